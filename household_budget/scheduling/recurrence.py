"""
Recurrence Scheduler

Computes when a recurring template fires next.

DESIGN DECISION: Scheduling is a pure function of (rule, from_date).
No "now", no timezone, no storage. The recurring run and the upcoming
widget both call compute_next_occurrence() and only differ in how many
steps they take.

Rules:
- weekly:  from_date + interval * 7 days
- monthly: from_date's month + interval, on min(anchor_day, month length)
           where anchor_day = day_of_month or start_date.day
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Iterator, Optional, Union

from pydantic import ValidationError

from household_budget.dates import (
    DateLike,
    SchedulingError,
    add_days,
    add_months,
    parse_date_only,
)
from household_budget.models.recurring import Frequency, RecurrenceRule


RuleLike = Union[RecurrenceRule, Mapping]


class InvalidRule(SchedulingError):
    """A recurrence rule is not usable (bad interval, frequency or anchor)."""

    def __init__(self, field: str, value: object, message: str):
        self.field = field
        self.value = value
        super().__init__(message)


def _read(rule: Mapping, *names: str, default: Any = None) -> Any:
    for name in names:
        if name in rule:
            return rule[name]
    return default


def coerce_rule(rule: RuleLike) -> RecurrenceRule:
    """
    Turn a stored schedule document into a RecurrenceRule.

    Each field is checked on its own so the caller gets InvalidDate or
    InvalidRule (not a generic pydantic error) naming what is wrong.
    """
    if isinstance(rule, RecurrenceRule):
        _check_rule(rule.frequency, rule.interval, rule.day_of_month)
        return rule
    if not isinstance(rule, Mapping):
        raise InvalidRule("rule", rule, f"Unsupported rule type: {type(rule).__name__}")

    frequency = _read(rule, "frequency")
    try:
        frequency = Frequency(frequency)
    except ValueError:
        raise InvalidRule("frequency", frequency, f"Unrecognized frequency: {frequency!r}")

    interval = _read(rule, "interval", default=1)
    day_of_month = _read(rule, "day_of_month", "dayOfMonth")
    _check_rule(frequency, interval, day_of_month)

    start_date = parse_date_only(_read(rule, "start_date", "startDate"))

    try:
        return RecurrenceRule(
            frequency=frequency,
            interval=interval,
            day_of_month=day_of_month,
            start_date=start_date,
        )
    except ValidationError as e:
        raise InvalidRule("rule", dict(rule), f"Invalid recurrence rule: {e}")


def _check_rule(frequency: Frequency, interval: Any, day_of_month: Any) -> None:
    if frequency not in (Frequency.MONTHLY, Frequency.WEEKLY):
        raise InvalidRule("frequency", frequency, f"Unrecognized frequency: {frequency!r}")
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise InvalidRule("interval", interval, f"Interval must be a positive integer, got {interval!r}")
    if day_of_month is not None and (
        isinstance(day_of_month, bool)
        or not isinstance(day_of_month, int)
        or not 1 <= day_of_month <= 31
    ):
        raise InvalidRule(
            "day_of_month",
            day_of_month,
            f"Day of month must be between 1 and 31, got {day_of_month!r}",
        )


def compute_next_occurrence(rule: RuleLike, from_date: DateLike) -> date:
    """
    Compute the occurrence that follows `from_date`.

    Args:
        rule: RecurrenceRule or a stored schedule mapping
        from_date: The current occurrence (date, datetime or YYYY-MM-DD)

    Returns:
        The next occurrence as a date

    Raises:
        InvalidDate: from_date or the rule's start date is malformed, or the
            next occurrence would fall after the last supported date
        InvalidRule: interval < 1, unknown frequency or bad anchor day
    """
    current = parse_date_only(from_date)
    schedule = coerce_rule(rule)

    if schedule.frequency == Frequency.WEEKLY:
        return add_days(current, schedule.interval * 7)

    return add_months(current, schedule.interval, schedule.anchor_day)


def iter_occurrences(
    rule: RuleLike,
    from_date: DateLike,
    until: DateLike,
) -> Iterator[date]:
    """
    Yield `from_date` and every following occurrence up to `until` (inclusive).

    Used by the recurring run to catch up on everything that came due
    since the template last fired.
    """
    schedule = coerce_rule(rule)
    current = parse_date_only(from_date)
    end = parse_date_only(until)

    while current <= end:
        yield current
        current = compute_next_occurrence(schedule, current)


def next_after(rule: RuleLike, from_date: DateLike, after: DateLike) -> date:
    """First occurrence on the `from_date` chain strictly later than `after`."""
    schedule = coerce_rule(rule)
    current = parse_date_only(from_date)
    limit = parse_date_only(after)

    while current <= limit:
        current = compute_next_occurrence(schedule, current)
    return current


def upcoming_occurrences(
    rule: RuleLike,
    next_run: DateLike,
    today: DateLike,
    window_days: int = 14,
    until: Optional[DateLike] = None,
) -> list[date]:
    """
    Occurrences falling inside [today, today + window_days].

    Occurrences before `today` (a run that has not happened yet) are
    skipped rather than reported as upcoming.
    """
    start = parse_date_only(today)
    end = parse_date_only(until) if until is not None else add_days(start, window_days)

    return [
        occurrence
        for occurrence in iter_occurrences(rule, next_run, end)
        if occurrence >= start
    ]
