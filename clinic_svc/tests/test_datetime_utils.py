"""
Tests for document date parsing and formatting.
"""
from datetime import date, datetime, timezone

import pytest

from core.datetime_utils import (
    parse_datetime,
    parse_document_datetime,
    parse_document_date,
    format_iso,
    format_for_display,
)


def test_parse_iso_with_z_suffix():
    assert parse_datetime("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_parse_schedule_format():
    assert parse_datetime("2024-01-26 10:00 AM") == datetime(2024, 1, 26, 10, 0, tzinfo=timezone.utc)


def test_parse_invalid_raises():
    with pytest.raises(ValueError):
        parse_datetime("next tuesday")


def test_timestamp_map():
    value = {"seconds": 1704067200, "nanoseconds": 500000000}
    assert parse_document_datetime(value) == datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc)


def test_epoch_seconds():
    assert parse_document_date(1704067200) == date(2024, 1, 1)


@pytest.mark.parametrize("value", [
    None,
    "",
    "not a date",
    True,
    {"nanoseconds": 1},
    {"seconds": "soon"},
    1717200000000,
    float("inf"),
    float("nan"),
])
def test_unreadable_values_give_none(value):
    assert parse_document_datetime(value) is None


def test_plain_date_string():
    assert parse_document_date("2024-03-05") == date(2024, 3, 5)


def test_format_iso_converts_to_utc():
    from datetime import timedelta
    local = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
    assert format_iso(local) == "2024-01-15T10:30:00Z"


def test_format_for_display():
    assert format_for_display(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)) == "15 Jan 2024, 10:30 UTC"
