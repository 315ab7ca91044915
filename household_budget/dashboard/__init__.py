"""Dashboard layout package."""

from household_budget.dashboard.layout import (
    DEFAULT_COLUMNS,
    minimum_size,
    pack_widgets,
    rectangles_overlap,
)
from household_budget.dashboard.registry import (
    ALLOWED_VIEWS,
    WIDGET_REGISTRY,
    build_default_dashboard,
    get_widget_definition,
    is_metric_type,
    new_widget,
)

__all__ = [
    "ALLOWED_VIEWS",
    "DEFAULT_COLUMNS",
    "WIDGET_REGISTRY",
    "build_default_dashboard",
    "get_widget_definition",
    "is_metric_type",
    "minimum_size",
    "new_widget",
    "pack_widgets",
    "rectangles_overlap",
]
