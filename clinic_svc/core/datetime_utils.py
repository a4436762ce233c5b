"""
UTC-first datetime utilities for the clinic service.

- All datetimes are processed in UTC
- ISO 8601 strings with a 'Z' suffix are used for storage and responses
- Document dates are accepted in every shape clinic documents carry them:
  ISO strings, plain dates, epoch seconds and hosted-database timestamp
  maps ({"seconds": ..., "nanoseconds": ...})

Usage:
    from core.datetime_utils import utc_now, parse_document_datetime, format_iso

    contact = parse_document_datetime({"seconds": 1704067200, "nanoseconds": 0})
    format_iso(contact)  # "2024-01-01T00:00:00Z"
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# PARSING
# =============================================================================

_FALLBACK_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %I:%M %p",      # 2024-01-26 10:00 AM (notification schedule format)
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
]


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse a datetime value to a UTC datetime.

    Args:
        value: ISO 8601 string (with or without timezone) or datetime.

    Raises:
        ValueError: If the value cannot be parsed.

    Examples:
        >>> parse_datetime("2024-01-15T10:30:00Z")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()
    try:
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse datetime: '{value}'")


def parse_datetime_safe(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a datetime, returning None on missing or invalid input."""
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        logger.warning(f"Failed to parse datetime '{value}': {e}")
        return None


def _from_epoch(seconds: Any, nanos: Any = 0) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(float(seconds) + float(nanos or 0) / 1e9, tz=timezone.utc)
    except (ValueError, OverflowError, OSError, TypeError) as e:
        logger.warning(f"Unreadable epoch value '{seconds}': {e}")
        return None


def parse_document_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a date-like value read from a document into a UTC datetime.

    Accepts timestamp maps with a "seconds" key, epoch seconds, date and
    datetime objects, and strings. Empty or unreadable values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        return _from_epoch(seconds, value.get("nanoseconds", value.get("_nanoseconds", 0)))
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        return parse_datetime_safe(value)
    return None


def parse_document_date(value: Any) -> Optional[date]:
    """Like parse_document_datetime but returns the calendar date."""
    dt = parse_document_datetime(value)
    return dt.date() if dt else None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with 'Z' suffix.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, passing None through."""
    return value.isoformat() if value else None


def format_for_display(dt: datetime, include_time: bool = True) -> str:
    """
    Format datetime for human-readable display and free-text search.

    Example:
        >>> format_for_display(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '15 Jan 2024, 10:30 UTC'
    """
    utc_dt = to_utc(dt)
    if include_time:
        return utc_dt.strftime("%d %b %Y, %H:%M UTC")
    return utc_dt.strftime("%d %b %Y")
