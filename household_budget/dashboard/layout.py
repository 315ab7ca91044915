"""
Widget Layout Packer

Turns the widgets a user saved into a non-overlapping grid layout.

DESIGN DECISION: First-fit, row-major, input order.
Each widget starts at its requested (x, y) and slides right one column
at a time, wrapping to the next row, until it no longer overlaps
anything placed before it. Nothing is ever dropped and earlier widgets
always win, so a saved layout renders the same way every time.

Placed rectangles are kept in a plain list and scanned linearly.
Dashboards hold tens of widgets, not thousands.
"""

from collections.abc import Iterable, Mapping
from typing import Union

from household_budget.models.dashboard import PlacedWidget, Rect, WidgetSpec


DEFAULT_COLUMNS = 12
MIN_WIDTH = 4
MIN_BREAKDOWN_WIDTH = 5
MIN_HEIGHT = 2


def rectangles_overlap(a: Rect, b: Rect) -> bool:
    """True when two half-open rectangles share at least one cell."""
    return not (
        a.x + a.w <= b.x
        or b.x + b.w <= a.x
        or a.y + a.h <= b.y
        or b.y + b.h <= a.y
    )


def minimum_size(widget: WidgetSpec) -> tuple[int, int]:
    """Requested size raised to the type's minimum width and the height floor."""
    min_w = MIN_BREAKDOWN_WIDTH if widget.is_breakdown else MIN_WIDTH
    return max(min_w, widget.w), max(MIN_HEIGHT, widget.h)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def pack_widgets(
    widgets: Iterable[Union[WidgetSpec, Mapping]],
    columns: int = DEFAULT_COLUMNS,
) -> list[PlacedWidget]:
    """
    Place widgets on a grid without overlaps.

    Args:
        widgets: Widgets in saved order (models or plain dicts)
        columns: Grid column count

    Returns:
        One PlacedWidget per input widget, in input order

    Raises:
        ValueError: if columns < 1 (caller bug, not a user error)
    """
    if columns < 1:
        raise ValueError(f"columns must be at least 1, got {columns}")

    placed: list[Rect] = []
    result: list[PlacedWidget] = []

    for item in widgets:
        widget = item if isinstance(item, WidgetSpec) else WidgetSpec.model_validate(item)

        min_w, h = minimum_size(widget)
        w = _clamp(min_w, 1, columns)
        x = _clamp(widget.x, 0, columns - w)
        y = max(0, widget.y)

        while True:
            candidate = Rect(x=x, y=y, w=w, h=h)
            if not any(rectangles_overlap(rect, candidate) for rect in placed):
                break
            x += 1
            if x > columns - w:
                x = 0
                y += 1

        placed.append(candidate)
        result.append(
            PlacedWidget.model_validate(
                {**widget.model_dump(), "x": x, "y": y, "w": w, "h": h}
            )
        )

    return result
