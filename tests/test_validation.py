"""
Tests for dashboard layout validation.

Validators are built with explicit grid bounds so the tests do not
depend on the environment.
"""

import pytest

from household_budget.dashboard import build_default_dashboard, new_widget
from household_budget.models.dashboard import LayoutValidationResult, ValidationIssue
from household_budget.validation import DashboardLayoutValidator, DashboardValidationError


@pytest.fixture
def validator():
    return DashboardLayoutValidator(columns=12, max_rows=20)


def _widget(**overrides) -> dict:
    widget = {
        "id": "w-1",
        "type": "total_income",
        "x": 0,
        "y": 0,
        "w": 4,
        "h": 2,
        "view": "card",
    }
    widget.update(overrides)
    return widget


def _messages(result: LayoutValidationResult) -> list[str]:
    return [issue.message for issue in result.issues]


class TestDashboardLayoutValidator:
    """Tests for DashboardLayoutValidator."""

    def test_default_dashboard_is_valid(self, validator):
        """Test the default dashboard passes validation."""
        result = validator.validate(build_default_dashboard())
        assert result.is_valid
        assert result.widget_count == 3

    def test_missing_id(self, validator):
        """Test every widget needs an id."""
        result = validator.validate([_widget(id="")])
        assert "Each widget needs an id." in _messages(result)
        assert result.issues[0].field == "widgets[0].id"

    def test_duplicate_ids(self, validator):
        """Test ids must be unique."""
        result = validator.validate([_widget(), _widget(x=4)])
        assert _messages(result) == ["Widget ids must be unique."]
        assert result.issues[0].field == "widgets[1].id"

    def test_unknown_type(self, validator):
        """Test the type must be registered."""
        result = validator.validate([_widget(type="kpi")])
        assert result.error_count == 1
        assert result.issues[0].issue_type == "unknown"

    def test_invalid_view(self, validator):
        """Test views outside the allowed set are rejected."""
        result = validator.validate([_widget(view="donut")])
        assert _messages(result) == ["Invalid widget view for w-1."]

    def test_percentage_view_not_storable(self, validator):
        """Test the picker-only percentage view is rejected on save."""
        result = validator.validate([_widget(type="expense_by_categories", view="percentage", w=6, h=4)])
        assert _messages(result) == ["Invalid widget view for w-1."]

    def test_unsupported_view(self, validator):
        """Test a card metric cannot be shown as a pie."""
        result = validator.validate([_widget(view="pie")])
        assert result.issues[0].issue_type == "unsupported"

    def test_non_integer_layout(self, validator):
        """Test non-integer geometry is reported once."""
        result = validator.validate([_widget(x="0", w=4.5)])
        assert _messages(result) == ["Invalid widget layout for w-1."]

    def test_boolean_is_not_an_integer(self, validator):
        """Test that booleans are not accepted as coordinates."""
        result = validator.validate([_widget(y=True)])
        assert _messages(result) == ["Invalid widget layout for w-1."]

    def test_negative_position(self, validator):
        """Test positions must be non-negative."""
        result = validator.validate([_widget(x=-1)])
        assert _messages(result) == ["Widget positions must be positive for w-1."]

    def test_zero_size(self, validator):
        """Test sizes must be positive."""
        result = validator.validate([_widget(w=0)])
        assert _messages(result) == ["Widget sizes must be positive for w-1."]

    def test_exceeds_grid(self, validator):
        """Test sizes must fit the grid."""
        assert _messages(validator.validate([_widget(w=13)])) == [
            "Widget sizes exceed grid bounds for w-1."
        ]
        assert _messages(validator.validate([_widget(h=21)])) == [
            "Widget sizes exceed grid bounds for w-1."
        ]

    def test_small_sizes_are_valid(self, validator):
        """Test validation does not enforce the packer's minimum sizes."""
        assert validator.validate([_widget(w=1, h=1)]).is_valid

    def test_rendering_options(self, validator):
        """Test kind, limit and currency are checked when present."""
        result = validator.validate([_widget(kind="bogus", limit=0, currency="pesos")])
        assert [issue.field for issue in result.issues] == [
            "widgets[0].kind",
            "widgets[0].limit",
            "widgets[0].currency",
        ]

    def test_valid_rendering_options(self, validator):
        """Test well-formed rendering options pass."""
        assert validator.validate([_widget(kind="income", limit=5, currency="usd")]).is_valid

    @pytest.mark.parametrize("overrides", [{"kind": "bogus"}, {"limit": 0}, {"limit": True}, {"title_key": 7}])
    def test_validate_or_raise_rendering_options(self, validator, overrides):
        """Test bad rendering options raise the validation error, not a model error."""
        with pytest.raises(DashboardValidationError):
            validator.validate_or_raise([_widget(**overrides)])

    def test_collects_all_issues(self, validator):
        """Test every widget is checked, not just the first failing one."""
        result = validator.validate([
            _widget(id="a", type="kpi"),
            _widget(id="b", x=-2),
            _widget(id="c", x=4),
        ])
        assert result.error_count == 2
        assert {issue.widget_id for issue in result.issues} == {"a", "b"}

    def test_validate_or_raise(self, validator):
        """Test valid layouts come back as WidgetSpec models."""
        specs = validator.validate_or_raise([_widget(), new_widget("expense_by_merchants", y=2)])
        assert [s.type for s in specs] == ["total_income", "expense_by_merchants"]

    def test_validate_or_raise_error(self, validator):
        """Test invalid layouts raise with the first message."""
        with pytest.raises(DashboardValidationError, match="Widget ids must be unique.") as exc_info:
            validator.validate_or_raise([_widget(), _widget()])
        assert exc_info.value.result.has_errors

    def test_user_friendly_summary(self, validator):
        """Test the UI summary lists every error."""
        result = validator.validate([_widget(w=0)])
        summary = validator.get_user_friendly_summary(result)
        assert "1 problem" in summary
        assert "Widget sizes must be positive for w-1." in summary


class TestLayoutValidationResult:
    """Tests for LayoutValidationResult."""

    def test_warnings_are_not_errors(self):
        """Test that warnings don't count as errors."""
        result = LayoutValidationResult(
            widget_count=1,
            issues=[
                ValidationIssue(
                    field="widgets[0].view",
                    issue_type="deprecated",
                    message="View will be removed",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.is_valid

    def test_invalid_severity(self):
        """Test severity is restricted to known levels."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="t", message="m", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
