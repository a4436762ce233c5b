"""
Gestation arithmetic used across patient views.

All functions are pure: "today" is always passed in so callers (and
tests) control the reference date.

Usage:
    from core.pregnancy import current_gestational_age, trimester_for

    weeks = current_gestational_age(10, date(2024, 1, 1), date(2024, 2, 12))  # 16
    trimester_for(weeks, has_delivered=False)  # "2nd Trimester"
"""
import math
from datetime import date, timedelta
from typing import Optional

TRIMESTER_FIRST = "1st Trimester"
TRIMESTER_SECOND = "2nd Trimester"
TRIMESTER_THIRD = "3rd Trimester"
TRIMESTER_DELIVERED = "Delivered"
TRIMESTER_UNKNOWN = "Unknown"

TRIMESTER_LABELS = (
    TRIMESTER_FIRST,
    TRIMESTER_SECOND,
    TRIMESTER_THIRD,
    TRIMESTER_DELIVERED,
    TRIMESTER_UNKNOWN,
)

# Inclusive upper bounds in completed weeks
FIRST_TRIMESTER_END = 12
SECOND_TRIMESTER_END = 27
THIRD_TRIMESTER_END = 40

FULL_TERM_WEEKS = 40


def weeks_since(start: date, today: date) -> int:
    """Whole weeks elapsed from start to today (floored, may be negative)."""
    return (today - start).days // 7


def current_gestational_age(
    initial_weeks: Optional[float],
    first_contact: Optional[date],
    today: date,
) -> int:
    """
    Current gestational age in weeks.

    The age recorded at the first ANC contact is advanced by the whole
    weeks elapsed since that contact. Without a contact date the recorded
    age is returned unchanged.
    """
    weeks = int(initial_weeks or 0)
    if first_contact is None:
        return weeks
    return weeks + weeks_since(first_contact, today)


def trimester_for(weeks: int, has_delivered: bool) -> str:
    """
    Bucket a gestational age into a trimester label.

    Week ranges are checked before the delivery flag, so only patients
    past 40 weeks are labelled "Delivered".
    """
    if weeks <= FIRST_TRIMESTER_END:
        return TRIMESTER_FIRST
    if weeks <= SECOND_TRIMESTER_END:
        return TRIMESTER_SECOND
    if weeks <= THIRD_TRIMESTER_END:
        return TRIMESTER_THIRD
    if has_delivered:
        return TRIMESTER_DELIVERED
    return TRIMESTER_UNKNOWN


def days_until(target: date, today: date) -> int:
    """Days from today until target; negative once target has passed."""
    return (target - today).days


def weeks_remaining(due: date, today: date) -> int:
    """Weeks left until the due date, rounded up and never negative."""
    remaining = math.ceil(days_until(due, today) / 7)
    return remaining if remaining > 0 else 0


def estimated_due_date(first_contact: Optional[date], initial_weeks: Optional[float]) -> Optional[date]:
    """Due date projected from the first contact, assuming a 40 week term."""
    if first_contact is None:
        return None
    try:
        return first_contact + timedelta(weeks=FULL_TERM_WEEKS - int(initial_weeks or 0))
    except OverflowError:
        return None


def is_due_within(due: Optional[date], today: date, days: int) -> bool:
    """True when the due date falls in the next `days` days (today excluded)."""
    if due is None:
        return False
    remaining = days_until(due, today)
    return 0 < remaining <= days


def initials(full_name: Optional[str]) -> str:
    """First and last initials of a name, "?" when empty."""
    if not full_name or not full_name.strip():
        return "?"
    parts = full_name.strip().split()
    if len(parts) >= 2:
        return (parts[0][0] + parts[-1][0]).upper()
    return parts[0][0].upper()
