"""Validation package."""

from household_budget.validation.validator import (
    DashboardLayoutValidator,
    DashboardValidationError,
)

__all__ = ["DashboardLayoutValidator", "DashboardValidationError"]
