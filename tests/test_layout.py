"""
Tests for the widget layout packer and the widget registry.
"""

import pytest

from household_budget.dashboard import (
    WIDGET_REGISTRY,
    build_default_dashboard,
    get_widget_definition,
    is_metric_type,
    minimum_size,
    new_widget,
    pack_widgets,
    rectangles_overlap,
)
from household_budget.models.dashboard import PlacedWidget, Rect, WidgetSpec, WidgetView


def _rect(widget) -> Rect:
    return Rect(x=widget.x, y=widget.y, w=widget.w, h=widget.h)


def _assert_no_overlaps(placed):
    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            assert not rectangles_overlap(_rect(a), _rect(b)), f"{a.id} overlaps {b.id}"


class TestRectanglesOverlap:
    """Tests for the half-open rectangle intersection test."""

    def test_touching_edges_do_not_overlap(self):
        """Test that adjacent rectangles share no cell."""
        a = Rect(x=0, y=0, w=4, h=2)
        assert not rectangles_overlap(a, Rect(x=4, y=0, w=4, h=2))
        assert not rectangles_overlap(a, Rect(x=0, y=2, w=4, h=2))

    def test_shared_cell_overlaps(self):
        """Test that a one-cell intersection counts."""
        a = Rect(x=0, y=0, w=4, h=2)
        assert rectangles_overlap(a, Rect(x=3, y=1, w=4, h=2))
        assert rectangles_overlap(Rect(x=3, y=1, w=4, h=2), a)


class TestPackWidgets:
    """Tests for pack_widgets."""

    def test_identical_widgets_share_a_row(self):
        """Test the second of two identical widgets slides right."""
        placed = pack_widgets([
            {"type": "kpi", "x": 0, "y": 0, "w": 4, "h": 2},
            {"type": "kpi", "x": 0, "y": 0, "w": 4, "h": 2},
        ], columns=12)
        assert [(p.x, p.y) for p in placed] == [(0, 0), (4, 0)]

    def test_breakdown_minimum_width(self):
        """Test breakdown widgets are widened to five columns."""
        placed = pack_widgets([{"type": "by_category", "x": 0, "y": 0, "w": 3, "h": 2}])
        assert placed[0].w == 5

    def test_regular_minimum_size(self):
        """Test regular widgets get at least 4 columns and 2 rows."""
        placed = pack_widgets([{"type": "total_income", "x": 0, "y": 0, "w": 1, "h": 1}])
        assert (placed[0].w, placed[0].h) == (4, 2)

    def test_larger_sizes_are_kept(self):
        """Test that sizes above the minimum are not shrunk."""
        widget = WidgetSpec(type="expense_by_categories", w=7, h=5)
        assert minimum_size(widget) == (7, 5)

    def test_width_clamped_to_columns(self):
        """Test a widget wider than the grid is narrowed to fit."""
        placed = pack_widgets([{"type": "kpi", "x": 3, "y": 0, "w": 20, "h": 2}], columns=12)
        assert (placed[0].x, placed[0].w) == (0, 12)

    def test_x_clamped_to_fit(self):
        """Test a widget hanging off the right edge is pulled back in."""
        placed = pack_widgets([{"type": "kpi", "x": 11, "y": 0, "w": 4, "h": 2}], columns=12)
        assert placed[0].x == 8

    def test_wraps_to_next_row(self):
        """Test that a full row pushes the next widget down."""
        widgets = [{"type": "kpi", "x": 0, "y": 0, "w": 4, "h": 2} for _ in range(4)]
        placed = pack_widgets(widgets, columns=12)
        assert [(p.x, p.y) for p in placed] == [(0, 0), (4, 0), (8, 0), (0, 2)]
        _assert_no_overlaps(placed)

    def test_narrow_grid(self):
        """Test a grid narrower than the minimum width still places everything."""
        placed = pack_widgets([
            {"type": "kpi", "w": 4, "h": 2},
            {"type": "kpi", "w": 4, "h": 2},
        ], columns=2)
        assert [(p.x, p.y, p.w) for p in placed] == [(0, 0, 2), (0, 2, 2)]

    def test_order_and_count_preserved(self):
        """Test every widget is returned, in input order."""
        widgets = [
            new_widget("expense_by_categories"),
            new_widget("total_income"),
            new_widget("total_expense"),
            new_widget("income_by_merchants"),
            new_widget("net_cash_flow"),
        ]
        placed = pack_widgets(widgets)
        assert [p.id for p in placed] == [w.id for w in widgets]
        assert all(isinstance(p, PlacedWidget) for p in placed)
        _assert_no_overlaps(placed)

    def test_pass_through_fields_untouched(self):
        """Test rendering options are copied to the output."""
        widget = WidgetSpec(
            id="w-1",
            type="expense_by_categories",
            w=6,
            h=4,
            title_key="dashboard_widget_expense_by_categories",
            view=WidgetView.PIE,
            currency="EUR",
            limit=5,
        )
        placed = pack_widgets([widget])[0]
        assert placed.id == "w-1"
        assert placed.title_key == "dashboard_widget_expense_by_categories"
        assert placed.view == WidgetView.PIE
        assert placed.currency == "EUR"
        assert placed.limit == 5

    def test_idempotent(self):
        """Test packing a packed layout changes nothing."""
        widgets = [
            {"type": "kpi", "x": 0, "y": 0, "w": 4, "h": 2},
            {"type": "by_merchant", "x": 2, "y": 0, "w": 3, "h": 3},
            {"type": "kpi", "x": 9, "y": 1, "w": 6, "h": 2},
        ]
        once = pack_widgets(widgets)
        twice = pack_widgets(once)
        assert [_rect(p) for p in twice] == [_rect(p) for p in once]

    def test_empty_input(self):
        """Test an empty dashboard packs to an empty list."""
        assert pack_widgets([]) == []

    def test_invalid_columns(self):
        """Test that a zero-column grid is a caller error."""
        with pytest.raises(ValueError):
            pack_widgets([{"type": "kpi"}], columns=0)

    def test_input_not_mutated(self):
        """Test the input widgets keep their requested geometry."""
        widget = WidgetSpec(type="kpi", x=0, y=0, w=1, h=1)
        pack_widgets([widget])
        assert (widget.w, widget.h) == (1, 1)


class TestWidgetRegistry:
    """Tests for the metric registry and the default dashboard."""

    def test_registry_types(self):
        """Test that every expected metric is registered."""
        expected = {
            "total_income", "total_expense", "net_cash_flow",
            "income_by_categories", "expense_by_categories",
            "income_by_groups", "expense_by_groups",
            "income_by_merchants", "expense_by_merchants",
            "income_tx_count", "expense_tx_count",
        }
        assert {d.type for d in WIDGET_REGISTRY} == expected
        assert all(is_metric_type(t) for t in expected)
        assert not is_metric_type("kpi")

    def test_breakdown_definitions(self):
        """Test breakdown metrics default to a 6x4 table."""
        definition = get_widget_definition("expense_by_groups")
        assert (definition.default_w, definition.default_h) == (6, 4)
        assert definition.default_view == WidgetView.TABLE
        assert WidgetView.PIE in definition.supported_views

    def test_new_widget_unknown_type(self):
        """Test that unknown types cannot be created."""
        with pytest.raises(KeyError):
            new_widget("kpi")

    def test_default_dashboard(self):
        """Test the default dashboard is three cards across row 0."""
        widgets = build_default_dashboard()
        assert [w.type for w in widgets] == ["total_income", "total_expense", "net_cash_flow"]
        assert [(w.x, w.y, w.w, w.h) for w in widgets] == [(0, 0, 4, 2), (4, 0, 4, 2), (8, 0, 4, 2)]
        assert len({w.id for w in widgets}) == 3

    def test_default_dashboard_is_already_packed(self):
        """Test the default layout survives packing unchanged."""
        widgets = build_default_dashboard()
        placed = pack_widgets(widgets)
        assert [_rect(p) for p in placed] == [_rect(w) for w in widgets]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
