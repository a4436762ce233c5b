"""
Tests for gestation arithmetic.
"""
from datetime import date

import pytest

from core.pregnancy import (
    current_gestational_age,
    trimester_for,
    days_until,
    weeks_remaining,
    estimated_due_date,
    is_due_within,
    initials,
)

TODAY = date(2024, 6, 1)


class TestGestationalAge:

    def test_advances_by_whole_weeks_since_contact(self):
        # 20 days = 2 whole weeks
        assert current_gestational_age(10, date(2024, 5, 12), TODAY) == 12

    def test_partial_week_is_floored(self):
        assert current_gestational_age(10, date(2024, 5, 26), TODAY) == 10

    def test_without_contact_date_keeps_recorded_age(self):
        assert current_gestational_age(18, None, TODAY) == 18

    def test_missing_initial_weeks_count_as_zero(self):
        assert current_gestational_age(None, date(2024, 5, 4), TODAY) == 4


class TestTrimester:

    @pytest.mark.parametrize("weeks,expected", [
        (0, "1st Trimester"),
        (12, "1st Trimester"),
        (13, "2nd Trimester"),
        (27, "2nd Trimester"),
        (28, "3rd Trimester"),
        (40, "3rd Trimester"),
    ])
    def test_week_ranges(self, weeks, expected):
        assert trimester_for(weeks, has_delivered=False) == expected

    def test_week_range_checked_before_delivery(self):
        assert trimester_for(30, has_delivered=True) == "3rd Trimester"

    def test_past_term_delivered(self):
        assert trimester_for(41, has_delivered=True) == "Delivered"

    def test_past_term_not_delivered_is_unknown(self):
        assert trimester_for(43, has_delivered=False) == "Unknown"


class TestDueDates:

    def test_days_until(self):
        assert days_until(date(2024, 6, 11), TODAY) == 10
        assert days_until(date(2024, 5, 30), TODAY) == -2

    def test_weeks_remaining_rounds_up(self):
        assert weeks_remaining(date(2024, 6, 9), TODAY) == 2

    def test_weeks_remaining_never_negative(self):
        assert weeks_remaining(date(2024, 5, 1), TODAY) == 0

    def test_estimated_due_date(self):
        assert estimated_due_date(date(2024, 1, 1), 38) == date(2024, 1, 15)

    def test_estimated_due_date_without_contact(self):
        assert estimated_due_date(None, 20) is None

    def test_estimated_due_date_out_of_range_weeks(self):
        assert estimated_due_date(date(2024, 1, 1), 10**12) is None

    def test_due_within_excludes_today_and_past(self):
        assert is_due_within(date(2024, 6, 1), TODAY, 30) is False
        assert is_due_within(date(2024, 5, 20), TODAY, 30) is False
        assert is_due_within(date(2024, 7, 1), TODAY, 30) is True
        assert is_due_within(date(2024, 7, 2), TODAY, 30) is False
        assert is_due_within(None, TODAY, 30) is False


class TestInitials:

    def test_first_and_last(self):
        assert initials("ama serwaa mensah") == "AM"

    def test_single_name(self):
        assert initials("Efua") == "E"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty(self, name):
        assert initials(name) == "?"
