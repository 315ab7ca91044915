"""
Budget vs Actual Summary

DESIGN DECISION: The summary is computed from plain data.
Callers load the plan, the categories and the month's transactions;
this module only aggregates. That keeps the numbers reproducible and
testable without a database.

Aggregation rules:
- Only expense transactions count, archived ones never do
- Pending transactions count unless include_pending=False
- Actuals are grouped by (currency, category)
- Plans apply to the budget currency only
- Every known, planned or spent-in category gets a row
- Spend without a category lands in an "Uncategorized" row
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Optional
from uuid import UUID

from household_budget.dates import parse_month
from household_budget.models.budget import (
    BudgetCurrencySummary,
    BudgetSummary,
    BudgetSummaryRow,
    BudgetTotals,
    Category,
    PlannedLine,
)
from household_budget.models.recurring import Transaction, TransactionKind


UNCATEGORIZED = "Uncategorized"


def progress_ratio(planned_minor: int, actual_minor: int) -> float:
    """Share of the plan used, capped at 1. Zero when nothing was planned."""
    if planned_minor <= 0:
        return 0.0
    return min(actual_minor / planned_minor, 1.0)


def build_budget_summary(
    month: str,
    budget_currency: str,
    planned_lines: Iterable[PlannedLine],
    categories: Iterable[Category],
    transactions: Iterable[Transaction],
    include_pending: bool = True,
    include_archived_categories: bool = False,
) -> BudgetSummary:
    """
    Compare planned and actual spend for `month`.

    Args:
        month: YYYY-MM key
        budget_currency: Currency the plan is expressed in
        planned_lines: Planned amount per category
        categories: Expense categories of the workspace
        transactions: Candidate transactions (filtered here by month/kind)
        include_pending: Count pending transactions as spent
        include_archived_categories: Show rows for archived categories

    Raises:
        InvalidDate: if `month` is not a valid YYYY-MM key
    """
    month_range = parse_month(month)
    planned_lines = list(planned_lines)

    category_map = {
        category.id: category
        for category in categories
        if include_archived_categories or not category.is_archived
    }
    planned = {line.category_id: line.planned_minor for line in planned_lines}

    # (currency, category_id) -> [actual_minor, transaction_count]
    actuals: dict[tuple[str, Optional[UUID]], list[int]] = defaultdict(lambda: [0, 0])
    currencies: list[str] = [budget_currency]

    for tx in transactions:
        if tx.kind != TransactionKind.EXPENSE or tx.is_archived:
            continue
        if tx.is_pending and not include_pending:
            continue
        if not month_range.start <= tx.date < month_range.end:
            continue

        bucket = actuals[(tx.currency, tx.category_id)]
        bucket[0] += tx.amount_minor
        bucket[1] += 1
        if tx.currency not in currencies:
            currencies.append(tx.currency)

    # Row order: known categories, then planned-only, then spent-only
    category_ids: list[UUID] = list(category_map)
    for line in planned_lines:
        if line.category_id not in category_ids:
            category_ids.append(line.category_id)
    for _, category_id in actuals:
        if category_id is not None and category_id not in category_ids:
            category_ids.append(category_id)

    sections = []
    for currency in currencies:
        rows = []
        for category_id in category_ids:
            planned_minor = planned.get(category_id, 0) if currency == budget_currency else 0
            actual_minor, count = actuals.get((currency, category_id), (0, 0))
            category = category_map.get(category_id)
            rows.append(BudgetSummaryRow(
                category_id=category_id,
                category_name=category.display_name if category else "Untitled",
                planned_minor=planned_minor,
                actual_minor=actual_minor,
                remaining_minor=planned_minor - actual_minor,
                progress=progress_ratio(planned_minor, actual_minor),
                transaction_count=count,
            ))

        uncategorized = actuals.get((currency, None))
        if uncategorized:
            rows.append(BudgetSummaryRow(
                category_id=None,
                category_name=UNCATEGORIZED,
                actual_minor=uncategorized[0],
                remaining_minor=-uncategorized[0],
                transaction_count=uncategorized[1],
            ))

        totals = BudgetTotals(
            planned_minor=sum(row.planned_minor for row in rows),
            actual_minor=sum(row.actual_minor for row in rows),
            remaining_minor=sum(row.remaining_minor for row in rows),
        )
        sections.append(BudgetCurrencySummary(currency=currency, rows=rows, totals=totals))

    return BudgetSummary(
        month=month_range.month,
        budget_currency=budget_currency,
        currencies=sections,
    )
