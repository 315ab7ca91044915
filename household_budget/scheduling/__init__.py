"""Recurring transaction scheduling package."""

from household_budget.dates import InvalidDate, SchedulingError
from household_budget.scheduling.recurrence import (
    InvalidRule,
    coerce_rule,
    compute_next_occurrence,
    iter_occurrences,
    next_after,
    upcoming_occurrences,
)

__all__ = [
    "InvalidDate",
    "InvalidRule",
    "SchedulingError",
    "coerce_rule",
    "compute_next_occurrence",
    "iter_occurrences",
    "next_after",
    "upcoming_occurrences",
]
