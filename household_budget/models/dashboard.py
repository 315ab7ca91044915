"""
Dashboard Models

A dashboard is an ordered list of widgets on a fixed-column grid.
Widget order matters: it is the tie-break the layout packer uses, so
the stored order is preserved everywhere.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from household_budget.models.recurring import TransactionKind


class WidgetView(str, Enum):
    """How a widget renders its metric."""
    CARD = "card"
    TABLE = "table"
    BAR = "bar"
    PIE = "pie"
    PERCENTAGE = "percentage"


class WidgetSpec(BaseModel):
    """
    A widget as the user saved it: requested position and size.

    Only type/x/y/w/h drive the layout. The remaining fields are
    rendering options carried through untouched.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str = Field(..., min_length=1, description="Metric type, e.g. expense_by_categories")
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    w: int = Field(default=4)
    h: int = Field(default=2)
    title_key: Optional[str] = Field(default=None, alias="titleKey")
    view: Optional[WidgetView] = None
    currency: Optional[str] = None
    kind: Optional[TransactionKind] = None
    limit: Optional[int] = Field(default=None, ge=1)

    @property
    def is_breakdown(self) -> bool:
        """Breakdown widgets (by category/group/merchant) need more room."""
        return "by_" in self.type


class PlacedWidget(WidgetSpec):
    """A widget with its resolved, non-overlapping grid placement."""
    pass


class Rect(BaseModel):
    """Half-open grid rectangle [x, x+w) x [y, y+h)."""
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    w: int
    h: int


class WidgetDefinition(BaseModel):
    """Registry entry describing one metric type."""
    model_config = ConfigDict(frozen=True)

    type: str
    title_key: str
    supported_views: tuple[WidgetView, ...]
    default_view: WidgetView
    default_w: int
    default_h: int
    kind: Optional[TransactionKind] = None


class DashboardConfig(BaseModel):
    """A workspace's saved dashboard."""

    workspace_id: UUID
    version: int = 1
    widgets: list[WidgetSpec] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'duplicate', 'out_of_bounds')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    widget_id: Optional[str] = Field(
        default=None,
        description="Widget the issue belongs to, if any"
    )


class LayoutValidationResult(BaseModel):
    """Result of validating a dashboard layout before it is saved."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    widget_count: int = Field(ge=0)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors
