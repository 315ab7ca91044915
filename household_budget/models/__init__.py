"""
Data Models Package

This package contains all Pydantic models used in Household Budget.
All data flowing through the system must conform to these schemas.
"""

from household_budget.models.recurring import (
    Frequency,
    RecurrenceRule,
    RecurringRunResult,
    RecurringTemplate,
    RecurringTemplateCreate,
    Transaction,
    TransactionKind,
    UpcomingRecurring,
    UpcomingRecurringItem,
    to_minor_units,
)
from household_budget.models.dashboard import (
    DashboardConfig,
    LayoutValidationResult,
    PlacedWidget,
    Rect,
    ValidationIssue,
    WidgetDefinition,
    WidgetSpec,
    WidgetView,
)
from household_budget.models.budget import (
    BudgetCurrencySummary,
    BudgetMonth,
    BudgetSummary,
    BudgetSummaryRow,
    BudgetTotals,
    Category,
    PlannedLine,
)
from household_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Recurring models
    "Frequency",
    "RecurrenceRule",
    "RecurringRunResult",
    "RecurringTemplate",
    "RecurringTemplateCreate",
    "Transaction",
    "TransactionKind",
    "UpcomingRecurring",
    "UpcomingRecurringItem",
    "to_minor_units",
    # Dashboard models
    "DashboardConfig",
    "LayoutValidationResult",
    "PlacedWidget",
    "Rect",
    "ValidationIssue",
    "WidgetDefinition",
    "WidgetSpec",
    "WidgetView",
    # Budget models
    "BudgetCurrencySummary",
    "BudgetMonth",
    "BudgetSummary",
    "BudgetSummaryRow",
    "BudgetTotals",
    "Category",
    "PlannedLine",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
