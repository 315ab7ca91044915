"""
Date-only helpers

Recurring rules, transactions and budgets all work on calendar dates
with no time-of-day. Every value that enters the scheduler goes through
parse_date_only() so that a malformed date fails loudly instead of being
silently rolled over (2024-02-30 is an error, not March 1st).

All arithmetic happens in one proleptic Gregorian calendar. Aware
datetimes are converted to UTC before their date part is taken, so the
same instant never maps to two different days.
"""

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import NamedTuple, Optional, Union

from dateutil.relativedelta import relativedelta


DATE_ONLY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

DateLike = Union[date, datetime, str]


class SchedulingError(ValueError):
    """Base exception for scheduling errors."""
    pass


class InvalidDate(SchedulingError):
    """A value is not a well-formed calendar date."""

    def __init__(self, value: object, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Invalid date: {value!r} (expected YYYY-MM-DD)")


class MonthRange(NamedTuple):
    """Half-open [start, end) range covering one calendar month."""
    month: str
    start: date
    end: date


def parse_date_only(value: DateLike) -> date:
    """
    Normalize a date-like value to a plain date.

    Accepts:
    - date: returned as-is
    - datetime: naive values are taken as UTC, aware ones converted to UTC
    - str: strictly YYYY-MM-DD

    Raises:
        InvalidDate: for anything else, including out-of-range months/days
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(value)

    match = DATE_ONLY_PATTERN.match(value.strip())
    if not match:
        raise InvalidDate(value)

    year, month, day = (int(part) for part in match.groups())
    if not 1 <= month <= 12:
        raise InvalidDate(value, f"Invalid date: {value!r} (month {month} out of range)")
    if year < 1 or not 1 <= day <= days_in_month(year, month):
        raise InvalidDate(value, f"Invalid date: {value!r} (day {day} out of range)")
    return date(year, month, day)


def to_date_only(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_days(value: date, days: int) -> date:
    try:
        return value + timedelta(days=days)
    except OverflowError:
        raise InvalidDate(value, f"Invalid date: {to_date_only(value)} + {days} days is out of range")


def add_months(value: date, months: int, day_of_month: int) -> date:
    """
    Move `value` by `months` calendar months and land on `day_of_month`.

    The day is clamped to the length of the target month, so an anchor
    of 31 lands on Feb 28/29, Apr 30, etc. Year boundaries are handled
    by relativedelta.

    Raises:
        InvalidDate: if the result falls outside the supported date range
    """
    # relativedelta clamps an absolute day to the month's last day
    try:
        return value.replace(day=1) + relativedelta(months=months, day=day_of_month)
    except (OverflowError, ValueError):
        raise InvalidDate(value, f"Invalid date: {to_date_only(value)} + {months} months is out of range")


def parse_month(value: str) -> MonthRange:
    """
    Parse a YYYY-MM month key into its date range.

    Raises:
        InvalidDate: if the key is malformed or the month is out of range
    """
    match = MONTH_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidDate(value, f"Invalid month: {value!r} (expected YYYY-MM)")

    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        raise InvalidDate(value, f"Invalid month: {value!r} (month {month} out of range)")

    start = date(year, month, 1)
    return MonthRange(month=value.strip(), start=start, end=start + relativedelta(months=1))


def month_key(value: date) -> str:
    """YYYY-MM key for the month containing `value`."""
    return f"{value.year:04d}-{value.month:02d}"


def current_month(today: Optional[date] = None) -> str:
    """Month key for `today` (UTC today when omitted)."""
    return month_key(today or utc_today())


def utc_today() -> date:
    """Today's date in UTC."""
    return datetime.now(timezone.utc).date()
