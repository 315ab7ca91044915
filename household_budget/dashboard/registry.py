"""
Dashboard Widget Registry

The set of metrics a dashboard can show, with the views each supports
and the size a freshly added widget gets.
"""

from typing import Optional
from uuid import uuid4

from household_budget.models.dashboard import WidgetDefinition, WidgetSpec, WidgetView
from household_budget.models.recurring import TransactionKind


_CARD_VIEWS = (WidgetView.CARD, WidgetView.TABLE)
_BREAKDOWN_VIEWS = (WidgetView.TABLE, WidgetView.BAR, WidgetView.PIE, WidgetView.PERCENTAGE)

# Views a stored widget may use (percentage is picker-only)
ALLOWED_VIEWS = frozenset({WidgetView.CARD, WidgetView.TABLE, WidgetView.BAR, WidgetView.PIE})


def _card(type_: str, title_key: str, kind: Optional[TransactionKind] = None) -> WidgetDefinition:
    return WidgetDefinition(
        type=type_,
        title_key=title_key,
        supported_views=_CARD_VIEWS,
        default_view=WidgetView.CARD,
        default_w=4,
        default_h=2,
        kind=kind,
    )


def _breakdown(type_: str, kind: TransactionKind) -> WidgetDefinition:
    return WidgetDefinition(
        type=type_,
        title_key=f"dashboard_widget_{type_}",
        supported_views=_BREAKDOWN_VIEWS,
        default_view=WidgetView.TABLE,
        default_w=6,
        default_h=4,
        kind=kind,
    )


WIDGET_REGISTRY: tuple[WidgetDefinition, ...] = (
    _card("total_income", "dashboard_widget_total_income"),
    _card("total_expense", "dashboard_widget_total_expenses"),
    _card("net_cash_flow", "dashboard_widget_net_cash_flow"),
    _breakdown("income_by_categories", TransactionKind.INCOME),
    _breakdown("expense_by_categories", TransactionKind.EXPENSE),
    _breakdown("income_by_groups", TransactionKind.INCOME),
    _breakdown("expense_by_groups", TransactionKind.EXPENSE),
    _breakdown("income_by_merchants", TransactionKind.INCOME),
    _breakdown("expense_by_merchants", TransactionKind.EXPENSE),
    _card("income_tx_count", "dashboard_widget_income_tx_count", TransactionKind.INCOME),
    _card("expense_tx_count", "dashboard_widget_expense_tx_count", TransactionKind.EXPENSE),
)

_DEFINITIONS = {definition.type: definition for definition in WIDGET_REGISTRY}


def get_widget_definition(widget_type: str) -> Optional[WidgetDefinition]:
    return _DEFINITIONS.get(widget_type)


def is_metric_type(value: str) -> bool:
    return value in _DEFINITIONS


def new_widget(widget_type: str, x: int = 0, y: int = 0) -> WidgetSpec:
    """
    Create a widget for `widget_type` with its registry defaults.

    Raises:
        KeyError: if the type is not registered
    """
    definition = _DEFINITIONS[widget_type]
    return WidgetSpec(
        id=str(uuid4()),
        type=definition.type,
        title_key=definition.title_key,
        x=x,
        y=y,
        w=definition.default_w,
        h=definition.default_h,
        view=definition.default_view,
        kind=definition.kind,
    )


def build_default_dashboard() -> list[WidgetSpec]:
    """Income, expenses and net cash flow cards across the first row."""
    return [
        new_widget("total_income", x=0, y=0),
        new_widget("total_expense", x=4, y=0),
        new_widget("net_cash_flow", x=8, y=0),
    ]
