"""Calendar-date helpers.

Every date handled by the dashboard is a plain calendar day (``datetime.date``).
Strings crossing the API boundary use the fixed ``YYYY-MM-DD`` format and are
parsed component by component; nothing here goes through an instant/timestamp,
so a date can never drift by a day because of the server's timezone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class InvalidDateError(ValueError):
    """Raised for empty or malformed calendar-date input."""

    def __init__(self, value: Any, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Invalid date {value!r}; expected YYYY-MM-DD.")


# -----------------------------------------------------------------------------
#  Parsing / formatting
# -----------------------------------------------------------------------------

def parse_iso_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass through a ``date``).

    ``datetime`` values are refused on purpose: they carry a time-of-day.
    """
    if isinstance(value, datetime):
        raise InvalidDateError(value, "Expected a calendar date, got a datetime.")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value)

    raw = value.strip()
    if not raw:
        raise InvalidDateError(value, "Date is required.")

    m = ISO_DATE_RE.match(raw)
    if not m:
        raise InvalidDateError(value)

    year, month, day = (int(part) for part in m.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(value, f"Invalid date {value!r}: {e}.") from e


def format_iso_date(value: date) -> str:
    if not isinstance(value, date) or isinstance(value, datetime):
        raise InvalidDateError(value)
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_display_date(value: Any) -> str:
    """DD/MM/YYYY for customer-facing text. Blank input gives an empty string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    d = parse_iso_date(value)
    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"


# -----------------------------------------------------------------------------
#  Offsets
# -----------------------------------------------------------------------------

def today_local(today: Optional[date] = None) -> date:
    """Today's calendar date; an explicit ``today`` wins (tests, replays)."""
    if today is not None:
        return parse_iso_date(today)
    return date.today()


def add_days(value: Any, days: int) -> date:
    start = parse_iso_date(value)
    try:
        return start + timedelta(days=int(days))
    except OverflowError:
        raise InvalidDateError(value, f"{format_iso_date(start)} + {days} days is outside the calendar.") from None


def date_from_offset(value: Any, days: int) -> str:
    """String-in/string-out variant of :func:`add_days`."""
    return format_iso_date(add_days(value, days))


def days_between(a: Any, b: Any) -> int:
    """Signed whole days from ``b`` to ``a`` (positive when ``a`` is later)."""
    return (parse_iso_date(a) - parse_iso_date(b)).days


def days_until(value: Any, today: Optional[date] = None) -> int:
    return days_between(value, today_local(today))


# -----------------------------------------------------------------------------
#  Months
# -----------------------------------------------------------------------------

def month_start(value: Any) -> date:
    d = parse_iso_date(value)
    return date(d.year, d.month, 1)


def shift_months(value: Any, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    d = parse_iso_date(value)
    index = d.year * 12 + (d.month - 1) + int(months)
    try:
        return date(index // 12, index % 12 + 1, 1)
    except ValueError:
        raise InvalidDateError(value, f"{format_iso_date(d)} shifted by {months} months is outside the calendar.") from None


def month_end(value: Any) -> date:
    return shift_months(value, 1) - timedelta(days=1)


def month_label(value: Any) -> str:
    """Short label such as ``Mar/24``."""
    d = parse_iso_date(value)
    return f"{_MONTH_ABBR[d.month - 1]}/{d.year % 100:02d}"


def month_window(months: int, today: Optional[date] = None) -> List[date]:
    """Month starts for the ``months`` calendar months ending with today's month, oldest first."""
    if months < 1:
        raise ValueError("months must be >= 1")
    current = month_start(today_local(today))
    return [shift_months(current, -offset) for offset in range(months - 1, -1, -1)]
