"""
Recurring Transaction Models

A recurring template is the stored definition ("Rent, 12,000.00 MXN,
monthly on the 1st"). The scheduler only needs its RecurrenceRule; the
rest of the template is copied onto every transaction a run generates.

DESIGN DECISION: Amounts are integer minor units (cents).
Decimal amounts from forms are converted exactly once, on creation.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from household_budget.dates import parse_date_only


# =============================================================================
# ENUMS
# =============================================================================

class Frequency(str, Enum):
    """How often a recurring rule fires."""
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class TransactionKind(str, Enum):
    """Direction of money movement."""
    EXPENSE = "expense"
    INCOME = "income"


# =============================================================================
# RULE
# =============================================================================

class RecurrenceRule(BaseModel):
    """
    When a recurring template fires.

    Field aliases match the stored document shape (dayOfMonth,
    startDate) so persisted schedules load without a mapping layer.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    frequency: Frequency
    interval: int = Field(
        default=1,
        ge=1,
        description="Number of periods between occurrences"
    )
    day_of_month: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        alias="dayOfMonth",
        description="Anchor day for monthly rules (clamped to month length)"
    )
    start_date: date = Field(
        ...,
        alias="startDate",
        description="First occurrence (date only, UTC)"
    )

    @field_validator('start_date', mode='before')
    @classmethod
    def parse_start_date(cls, v):
        return parse_date_only(v)

    @property
    def anchor_day(self) -> int:
        """Day-of-month a monthly rule targets."""
        return self.day_of_month if self.day_of_month is not None else self.start_date.day


# =============================================================================
# TEMPLATES & TRANSACTIONS
# =============================================================================

def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal amount to integer minor units (cents)."""
    return int(Decimal(str(amount)).scaleb(2).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RecurringTemplateCreate(BaseModel):
    """Payload for creating a recurring template (as submitted by a form)."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    workspace_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, description="Amount in major units")
    currency: str = Field(..., min_length=3, max_length=3)
    kind: TransactionKind
    category_id: Optional[UUID] = None
    merchant_id: Optional[UUID] = None
    frequency: Frequency
    interval: int = Field(default=1, ge=1)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31, alias="dayOfMonth")
    start_date: date = Field(..., alias="startDate")

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator('start_date', mode='before')
    @classmethod
    def parse_start_date(cls, v):
        return parse_date_only(v)


class RecurringTemplate(BaseModel):
    """A stored recurring transaction definition."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    workspace_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    amount_minor: int = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    kind: TransactionKind
    category_id: Optional[UUID] = None
    merchant_id: Optional[UUID] = None
    schedule: RecurrenceRule
    next_run_on: date
    is_archived: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_create(cls, payload: RecurringTemplateCreate) -> "RecurringTemplate":
        """
        Build a template from a form payload.

        Monthly rules get their anchor day pinned (from the start date when
        absent) so later edits of start_date don't shift the schedule.
        Weekly rules never carry an anchor day.
        """
        if payload.frequency == Frequency.MONTHLY:
            day_of_month = payload.day_of_month or payload.start_date.day
        else:
            day_of_month = None

        schedule = RecurrenceRule(
            frequency=payload.frequency,
            interval=payload.interval,
            day_of_month=day_of_month,
            start_date=payload.start_date,
        )
        return cls(
            workspace_id=payload.workspace_id,
            name=payload.name,
            amount_minor=to_minor_units(payload.amount),
            currency=payload.currency,
            kind=payload.kind,
            category_id=payload.category_id,
            merchant_id=payload.merchant_id,
            schedule=schedule,
            next_run_on=payload.start_date,
        )


class Transaction(BaseModel):
    """A posted (or pending) money movement."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    workspace_id: UUID
    date: date
    amount_minor: int = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)
    kind: TransactionKind
    category_id: Optional[UUID] = None
    merchant_id: Optional[UUID] = None
    recurring_id: Optional[UUID] = None
    note: Optional[str] = Field(default=None, max_length=500)
    is_pending: bool = False
    is_archived: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_template(cls, template: RecurringTemplate, on: date) -> "Transaction":
        """Pending transaction generated by a recurring run."""
        return cls(
            workspace_id=template.workspace_id,
            date=on,
            amount_minor=template.amount_minor,
            currency=template.currency,
            kind=template.kind,
            category_id=template.category_id,
            merchant_id=template.merchant_id,
            recurring_id=template.id,
            note=f"Recurring: {template.name}" if template.name else None,
            is_pending=True,
        )


class UpcomingRecurringItem(BaseModel):
    """One upcoming occurrence shown on the dashboard."""

    recurring_id: UUID
    title: str
    next_date: date
    amount_minor: int
    currency: str
    kind: TransactionKind
    category_id: Optional[UUID] = None
    merchant_id: Optional[UUID] = None


class UpcomingRecurring(BaseModel):
    """Upcoming recurring occurrences inside a date window."""

    date_from: date
    date_to: date
    items: list[UpcomingRecurringItem] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_window(self) -> 'UpcomingRecurring':
        if self.date_to < self.date_from:
            raise ValueError("Window end cannot be before start")
        return self


class RecurringRunResult(BaseModel):
    """Outcome of one recurring run."""

    run_date: date
    templates_processed: int = Field(default=0, ge=0)
    created: list[UUID] = Field(
        default_factory=list,
        description="IDs of the transactions generated by this run"
    )
    skipped_count: int = Field(
        default=0,
        ge=0,
        description="Occurrences that already had a transaction"
    )
