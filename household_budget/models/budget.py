"""
Budget Models

A monthly budget plans an amount per expense category. The summary
compares those plans with what was actually spent, one section per
currency, all in integer minor units.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from household_budget.dates import parse_month


class Category(BaseModel):
    """Expense/income category as far as budgeting cares."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID
    name_key: str = Field(..., description="Translation key of the built-in name")
    name_custom: Optional[str] = Field(default=None, description="User-chosen name")
    is_archived: bool = False

    @property
    def display_name(self) -> str:
        return (self.name_custom or "").strip() or self.name_key or "Untitled"


class PlannedLine(BaseModel):
    """Planned spend for one category in one month."""

    category_id: UUID
    planned_minor: int = Field(..., ge=0)


class BudgetMonth(BaseModel):
    """The plan for a single month."""

    workspace_id: UUID
    month: str = Field(..., description="Month in YYYY-MM format")
    currency: str = Field(..., min_length=3, max_length=3)
    planned_lines: list[PlannedLine] = Field(default_factory=list)

    @field_validator('month')
    @classmethod
    def validate_month(cls, v: str) -> str:
        parse_month(v)
        return v


class BudgetSummaryRow(BaseModel):
    """Planned vs actual for one category in one currency."""

    category_id: Optional[UUID] = None
    category_name: str
    planned_minor: int = 0
    actual_minor: int = 0
    remaining_minor: int = 0
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    transaction_count: int = Field(default=0, ge=0)

    @property
    def is_over_budget(self) -> bool:
        return self.remaining_minor < 0


class BudgetTotals(BaseModel):
    planned_minor: int = 0
    actual_minor: int = 0
    remaining_minor: int = 0


class BudgetCurrencySummary(BaseModel):
    """All rows for a single currency."""

    currency: str
    rows: list[BudgetSummaryRow] = Field(default_factory=list)
    totals: BudgetTotals = Field(default_factory=BudgetTotals)


class BudgetSummary(BaseModel):
    """Budget vs actual for a month."""

    month: str
    budget_currency: str
    currencies: list[BudgetCurrencySummary] = Field(default_factory=list)

    def section(self, currency: str) -> Optional[BudgetCurrencySummary]:
        return next((s for s in self.currencies if s.currency == currency), None)
