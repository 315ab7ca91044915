"""Budget summary and formatting package."""

from household_budget.budget.formatting import (
    FALLBACK_CURRENCY,
    UnsupportedLocaleError,
    format_currency,
    format_number,
    format_percent,
    workspace_currency,
)
from household_budget.budget.summary import (
    UNCATEGORIZED,
    build_budget_summary,
    progress_ratio,
)

__all__ = [
    "FALLBACK_CURRENCY",
    "UNCATEGORIZED",
    "UnsupportedLocaleError",
    "build_budget_summary",
    "format_currency",
    "format_number",
    "format_percent",
    "progress_ratio",
    "workspace_currency",
]
