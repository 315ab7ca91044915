"""
Dashboard Layout Validation

DESIGN DECISION: A layout is validated as raw data BEFORE it becomes
WidgetSpec models. This way every problem in a submitted layout is
reported at once, per widget, instead of stopping at the first pydantic
error.

Checks, per widget:
- id present and unique
- type is a registered metric
- view is allowed and supported by the metric
- x, y, w, h are integers
- positions are non-negative, sizes positive
- sizes fit the grid (w <= columns, h <= max rows)
- rendering options: kind, limit, currency and title key, when present

IMPORTANT: Validation NEVER silently fixes issues.
Clamping and packing happen later, in the layout packer, on data that
already passed validation.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from household_budget.config import get_settings
from household_budget.dashboard.registry import (
    ALLOWED_VIEWS,
    get_widget_definition,
)
from household_budget.models.dashboard import (
    LayoutValidationResult,
    ValidationIssue,
    WidgetSpec,
    WidgetView,
)
from household_budget.models.recurring import TransactionKind


CURRENCY_PATTERN = re.compile(r"^[A-Za-z]{3}$")


class DashboardValidationError(ValueError):
    """A submitted layout failed validation."""

    def __init__(self, result: LayoutValidationResult):
        self.result = result
        first = next((i.message for i in result.issues if i.severity == "error"), "Invalid layout")
        super().__init__(first)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _issues_from_pydantic(index: int, widget: Mapping, error: PydanticValidationError) -> list[ValidationIssue]:
    """Model-level errors the field checks did not anticipate, one issue each."""
    widget_id = widget.get("id")
    return [
        ValidationIssue(
            field=f"widgets[{index}]." + ".".join(str(part) for part in detail["loc"]),
            issue_type="invalid_value",
            message=detail["msg"],
            severity="error",
            widget_id=widget_id if isinstance(widget_id, str) else None,
        )
        for detail in error.errors()
    ]


class DashboardLayoutValidator:
    """Validates a submitted dashboard layout."""

    def __init__(
        self,
        columns: Optional[int] = None,
        max_rows: Optional[int] = None,
    ):
        """
        Args:
            columns: Grid width. Defaults to AppSettings.grid_columns.
            max_rows: Maximum widget height. Defaults to AppSettings.max_grid_rows.
        """
        if columns is None or max_rows is None:
            app_settings = get_settings().app
            columns = columns if columns is not None else app_settings.grid_columns
            max_rows = max_rows if max_rows is not None else app_settings.max_grid_rows
        self._columns = columns
        self._max_rows = max_rows

    def validate(self, widgets: list[Union[WidgetSpec, Mapping]]) -> LayoutValidationResult:
        """Validate every widget and collect all issues."""
        issues: list[ValidationIssue] = []
        seen_ids: set[str] = set()

        for index, item in enumerate(widgets):
            widget = item.model_dump() if isinstance(item, WidgetSpec) else dict(item)
            issues.extend(self._validate_widget(index, widget, seen_ids))

        return LayoutValidationResult(widget_count=len(widgets), issues=issues)

    def validate_or_raise(self, widgets: list[Union[WidgetSpec, Mapping]]) -> list[WidgetSpec]:
        """
        Validate and convert to WidgetSpec models.

        Raises:
            DashboardValidationError: if any error-level issue was found
        """
        result = self.validate(widgets)
        if result.has_errors:
            raise DashboardValidationError(result)

        specs = []
        issues = []
        for index, item in enumerate(widgets):
            if isinstance(item, WidgetSpec):
                specs.append(item)
                continue
            try:
                specs.append(WidgetSpec.model_validate(item))
            except PydanticValidationError as e:
                issues.extend(_issues_from_pydantic(index, item, e))
        if issues:
            raise DashboardValidationError(
                LayoutValidationResult(widget_count=len(widgets), issues=issues)
            )
        return specs

    def _validate_widget(
        self,
        index: int,
        widget: dict,
        seen_ids: set[str],
    ) -> list[ValidationIssue]:
        issues = []
        widget_id = widget.get("id")
        label = widget_id if isinstance(widget_id, str) and widget_id else f"#{index}"

        def error(field: str, issue_type: str, message: str) -> ValidationIssue:
            return ValidationIssue(
                field=f"widgets[{index}].{field}",
                issue_type=issue_type,
                message=message,
                severity="error",
                widget_id=widget_id if isinstance(widget_id, str) else None,
            )

        # Identity
        if not isinstance(widget_id, str) or not widget_id:
            issues.append(error("id", "missing", "Each widget needs an id."))
        elif widget_id in seen_ids:
            issues.append(error("id", "duplicate", "Widget ids must be unique."))
        else:
            seen_ids.add(widget_id)

        # Type and view
        widget_type = widget.get("type")
        definition = get_widget_definition(widget_type) if isinstance(widget_type, str) else None
        if definition is None:
            issues.append(error("type", "unknown", f"Invalid widget type: {widget_type!r}."))

        view = widget.get("view")
        try:
            view = WidgetView(view)
        except ValueError:
            view = None
        if view is None or view not in ALLOWED_VIEWS:
            issues.append(error("view", "invalid", f"Invalid widget view for {label}."))
        elif definition is not None and view not in definition.supported_views:
            issues.append(error(
                "view",
                "unsupported",
                f"View '{view.value}' is not supported by {definition.type}.",
            ))

        # Rendering options
        kind = widget.get("kind")
        if kind is not None:
            try:
                TransactionKind(kind)
            except ValueError:
                issues.append(error("kind", "invalid", f"Invalid widget kind for {label}."))

        limit = widget.get("limit")
        if limit is not None and (not _is_int(limit) or limit < 1):
            issues.append(error("limit", "invalid_value", f"Widget limit must be a positive integer for {label}."))

        currency = widget.get("currency")
        if currency is not None and not (isinstance(currency, str) and CURRENCY_PATTERN.match(currency)):
            issues.append(error("currency", "invalid_format", f"Invalid widget currency for {label}."))

        title_key = widget.get("title_key", widget.get("titleKey"))
        if title_key is not None and not isinstance(title_key, str):
            issues.append(error("title_key", "invalid_format", f"Invalid widget title key for {label}."))

        # Geometry
        layout = {key: widget.get(key) for key in ("x", "y", "w", "h")}
        if not all(_is_int(value) for value in layout.values()):
            issues.append(error("layout", "invalid_format", f"Invalid widget layout for {label}."))
            return issues

        if layout["x"] < 0 or layout["y"] < 0:
            issues.append(error(
                "layout", "out_of_bounds", f"Widget positions must be positive for {label}."
            ))
        if layout["w"] <= 0 or layout["h"] <= 0:
            issues.append(error(
                "layout", "invalid_value", f"Widget sizes must be positive for {label}."
            ))
        if layout["w"] > self._columns or layout["h"] > self._max_rows:
            issues.append(error(
                "layout", "out_of_bounds", f"Widget sizes exceed grid bounds for {label}."
            ))

        return issues

    def get_user_friendly_summary(self, result: LayoutValidationResult) -> str:
        """One-paragraph summary suitable for showing in the UI."""
        if result.is_valid:
            return f"✅ Layout with {result.widget_count} widgets is valid."

        lines = [f"❌ Found {result.error_count} problem(s) in this layout:"]
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"• {issue.message}")
        return "\n".join(lines)
