"""
Tests for the budget vs actual summary and money formatting.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from household_budget.budget import (
    UNCATEGORIZED,
    UnsupportedLocaleError,
    build_budget_summary,
    format_currency,
    format_number,
    format_percent,
    progress_ratio,
    workspace_currency,
)
from household_budget.dates import InvalidDate
from household_budget.models.budget import BudgetMonth, Category, PlannedLine
from household_budget.models.recurring import Transaction, TransactionKind


WORKSPACE_ID = uuid4()
GROCERIES = Category(id=uuid4(), name_key="category_groceries")
RENT = Category(id=uuid4(), name_key="category_rent", name_custom="Apartment")


def _expense(amount_minor, category=None, on=date(2024, 3, 10), currency="MXN", **kwargs):
    return Transaction(
        workspace_id=WORKSPACE_ID,
        date=on,
        amount_minor=amount_minor,
        currency=currency,
        kind=kwargs.pop("kind", TransactionKind.EXPENSE),
        category_id=category.id if category else None,
        **kwargs,
    )


def _summary(transactions, planned=None, categories=(GROCERIES, RENT), **kwargs):
    return build_budget_summary(
        month="2024-03",
        budget_currency="MXN",
        planned_lines=planned or [],
        categories=list(categories),
        transactions=transactions,
        **kwargs,
    )


class TestBudgetSummary:
    """Tests for build_budget_summary."""

    def test_planned_vs_actual(self):
        """Test remaining and progress per category."""
        summary = _summary(
            [_expense(30000, GROCERIES), _expense(20000, GROCERIES)],
            planned=[PlannedLine(category_id=GROCERIES.id, planned_minor=80000)],
        )
        section = summary.section("MXN")
        groceries = section.rows[0]
        assert groceries.category_name == "category_groceries"
        assert groceries.actual_minor == 50000
        assert groceries.remaining_minor == 30000
        assert groceries.progress == pytest.approx(0.625)
        assert groceries.transaction_count == 2
        assert not groceries.is_over_budget

    def test_over_budget_progress_capped(self):
        """Test progress stops at 1 while remaining goes negative."""
        summary = _summary(
            [_expense(12000, RENT)],
            planned=[PlannedLine(category_id=RENT.id, planned_minor=10000)],
        )
        rent = summary.section("MXN").rows[1]
        assert rent.category_name == "Apartment"
        assert rent.progress == 1.0
        assert rent.remaining_minor == -2000
        assert rent.is_over_budget

    def test_outside_month_and_income_ignored(self):
        """Test only this month's expenses count."""
        summary = _summary([
            _expense(100, GROCERIES, on=date(2024, 2, 29)),
            _expense(100, GROCERIES, on=date(2024, 4, 1)),
            _expense(100, GROCERIES, kind=TransactionKind.INCOME),
            _expense(100, GROCERIES, on=date(2024, 3, 31)),
        ])
        assert summary.section("MXN").rows[0].actual_minor == 100

    def test_archived_and_pending(self):
        """Test archived spend never counts and pending is optional."""
        transactions = [
            _expense(100, GROCERIES, is_archived=True),
            _expense(200, GROCERIES, is_pending=True),
            _expense(400, GROCERIES),
        ]
        assert _summary(transactions).section("MXN").rows[0].actual_minor == 600
        assert _summary(transactions, include_pending=False).section("MXN").rows[0].actual_minor == 400

    def test_uncategorized_row(self):
        """Test spend without a category gets its own row."""
        summary = _summary([_expense(700)])
        rows = summary.section("MXN").rows
        assert rows[-1].category_name == UNCATEGORIZED
        assert rows[-1].category_id is None
        assert rows[-1].remaining_minor == -700

    def test_no_uncategorized_row_without_spend(self):
        """Test the Uncategorized row only appears when needed."""
        rows = _summary([]).section("MXN").rows
        assert [row.category_name for row in rows] == ["category_groceries", "Apartment"]

    def test_sections_per_currency(self):
        """Test the budget currency comes first and plans apply only to it."""
        summary = _summary(
            [_expense(5000, GROCERIES, currency="USD"), _expense(100, GROCERIES)],
            planned=[PlannedLine(category_id=GROCERIES.id, planned_minor=1000)],
        )
        assert [s.currency for s in summary.currencies] == ["MXN", "USD"]
        usd = summary.section("USD").rows[0]
        assert usd.planned_minor == 0
        assert usd.actual_minor == 5000
        assert usd.progress == 0.0

    def test_unknown_category_rows(self):
        """Test planned or spent categories missing from the list still show."""
        stray = uuid4()
        summary = _summary(
            [_expense(100, Category(id=stray, name_key="gone"))],
            planned=[PlannedLine(category_id=stray, planned_minor=300)],
            categories=[],
        )
        row = summary.section("MXN").rows[0]
        assert row.category_id == stray
        assert row.category_name == "Untitled"
        assert row.remaining_minor == 200

    def test_archived_categories_hidden(self):
        """Test archived categories get no row unless asked for."""
        archived = Category(id=uuid4(), name_key="old", is_archived=True)
        summary = _summary([], categories=[archived])
        assert summary.section("MXN").rows == []
        summary = _summary([], categories=[archived], include_archived_categories=True)
        assert summary.section("MXN").rows[0].category_name == "old"

    def test_totals(self):
        """Test section totals add up the rows."""
        summary = _summary(
            [_expense(300, GROCERIES), _expense(500)],
            planned=[
                PlannedLine(category_id=GROCERIES.id, planned_minor=1000),
                PlannedLine(category_id=RENT.id, planned_minor=2000),
            ],
        )
        totals = summary.section("MXN").totals
        assert totals.planned_minor == 3000
        assert totals.actual_minor == 800
        assert totals.remaining_minor == 2200

    def test_invalid_month(self):
        """Test a malformed month key is rejected."""
        with pytest.raises(InvalidDate):
            build_budget_summary("2024-3", "MXN", [], [], [])

    def test_progress_ratio_without_plan(self):
        """Test nothing planned means zero progress."""
        assert progress_ratio(0, 500) == 0.0
        assert progress_ratio(400, 100) == 0.25

    def test_budget_month_validates_key(self):
        """Test the BudgetMonth model checks its month key."""
        with pytest.raises(ValueError):
            BudgetMonth(workspace_id=WORKSPACE_ID, month="March", currency="MXN")


class TestFormatting:
    """Tests for money and percentage formatting."""

    def test_format_currency_en(self):
        """Test English formatting puts the code first."""
        assert format_currency(123456, "MXN", "en") == "MXN 1,234.56"
        assert format_currency(-5, "usd", "en") == "-USD 0.05"

    def test_format_currency_es(self):
        """Test Spanish formatting swaps separators and puts the code last."""
        assert format_currency(123456789, "EUR", "es") == "1.234.567,89 EUR"
        assert format_currency(0, "MXN", "es") == "0,00 MXN"

    def test_format_number_rounds_half_up(self):
        """Test half values round away from zero."""
        assert format_number(Decimal("2.345"), "en") == "2.35"
        assert format_number(Decimal("999.5"), "en", places=0) == "1,000"

    def test_format_percent(self):
        """Test ratios are shown as whole percentages."""
        assert format_percent(0.425, "en") == "43%"
        assert format_percent(0.425, "es") == "43 %"
        assert format_percent(1, "en") == "100%"

    def test_unsupported_locale(self):
        """Test unknown locales are rejected, not guessed."""
        with pytest.raises(UnsupportedLocaleError):
            format_currency(100, "MXN", "fr")

    def test_workspace_currency_fallback(self):
        """Test a missing workspace currency falls back to MXN."""
        assert workspace_currency(None) == "MXN"
        assert workspace_currency("  ") == "MXN"
        assert workspace_currency("eur") == "EUR"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
