"""
Streamlit Frontend for Household Budget

The household's day-to-day screen: dashboard, recurring payments and
the monthly budget.

DESIGN PRINCIPLES:
1. What you saved is what you see (layouts are packed, never dropped)
2. Recurring runs are explicit and need the run secret
3. Clear error messages in simple language
4. Visual feedback for all operations
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import NAMESPACE_URL, uuid5

import streamlit as st

from household_budget.audit import create_correlation_id
from household_budget.budget import format_currency, format_percent
from household_budget.config import get_settings
from household_budget.dashboard import WIDGET_REGISTRY, new_widget
from household_budget.dates import current_month, utc_today
from household_budget.models.recurring import (
    Frequency,
    RecurringTemplateCreate,
    TransactionKind,
)
from household_budget.orchestrator import (
    BudgetFlow,
    DashboardFlow,
    RecurringFlow,
    RecurringRunError,
    create_app_components,
)
from household_budget.validation import DashboardValidationError


# Single-household install: one fixed workspace
WORKSPACE_ID = uuid5(NAMESPACE_URL, "household-budget/default-workspace")

# Page configuration
st.set_page_config(
    page_title="Household Budget",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .widget-box {
        padding: 16px;
        background-color: #f5f7fa;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("🏠 Household Budget")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🔁 Recurring", "💼 Budget", "⚙️ Settings"],
        index=0,
    )

    locale = st.sidebar.selectbox(
        "Language",
        options=["en", "es"],
        index=0 if get_settings().app.default_locale == "en" else 1,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(components.dashboard_flow, components.recurring_flow, locale)
    elif page == "🔁 Recurring":
        render_recurring_page(components.recurring_flow, locale)
    elif page == "💼 Budget":
        render_budget_page(components.budget_flow, locale)
    elif page == "⚙️ Settings":
        render_settings_page()


def _title(widget) -> str:
    return widget.type.replace("_", " ").title()


def render_dashboard_page(dashboard_flow: DashboardFlow, recurring_flow: RecurringFlow, locale: str):
    """Render the dashboard grid and the upcoming recurring list."""
    st.title("📊 Dashboard")

    placed = run_async(dashboard_flow.load_layout(WORKSPACE_ID))

    # Streamlit has no free grid, so render row by row
    rows: dict[int, list] = {}
    for widget in placed:
        rows.setdefault(widget.y, []).append(widget)

    for y in sorted(rows):
        row = sorted(rows[y], key=lambda w: w.x)
        columns = st.columns([w.w for w in row])
        for column, widget in zip(columns, row):
            with column:
                st.markdown(
                    f'<div class="widget-box"><strong>{_title(widget)}</strong>'
                    f'<br/><small>{widget.view.value if widget.view else ""}</small></div>',
                    unsafe_allow_html=True,
                )

    with st.expander("➕ Add widget"):
        widget_type = st.selectbox(
            "Metric",
            options=[definition.type for definition in WIDGET_REGISTRY],
        )
        if st.button("Add to dashboard"):
            widgets = run_async(dashboard_flow.get_widgets(WORKSPACE_ID))
            bottom = max((w.y + w.h for w in placed), default=0)
            widgets.append(new_widget(widget_type, x=0, y=bottom))
            try:
                run_async(dashboard_flow.save_layout(WORKSPACE_ID, widgets))
                st.success("Widget added.")
                st.rerun()
            except DashboardValidationError as e:
                st.error(str(e))

    st.markdown("---")
    st.markdown("### 🗓️ Next two weeks")
    upcoming = run_async(recurring_flow.next_two_weeks(WORKSPACE_ID))
    if not upcoming.items:
        st.info("Nothing scheduled in the next two weeks.")
    for item in upcoming.items:
        sign = "-" if item.kind == TransactionKind.EXPENSE else "+"
        st.markdown(
            f"**{item.next_date.isoformat()}** · {item.title} · "
            f"{sign}{format_currency(item.amount_minor, item.currency, locale)}"
        )


def render_recurring_page(recurring_flow: RecurringFlow, locale: str):
    """Render recurring template creation and the manual run."""
    st.title("🔁 Recurring")

    with st.form("new_recurring"):
        st.markdown("### New recurring transaction")
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name", placeholder="Rent")
            amount = st.number_input("Amount", min_value=0.01, value=100.0, step=0.01)
            currency = st.text_input("Currency", value=get_settings().app.default_currency)
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                format_func=lambda x: x.value.title(),
            )
        with col2:
            frequency = st.selectbox(
                "Repeats",
                options=list(Frequency),
                format_func=lambda x: x.value.title(),
            )
            interval = st.number_input("Every", min_value=1, value=1, step=1)
            start_date = st.date_input("First date", value=utc_today())
            day_of_month = st.number_input(
                "Day of month (monthly only)", min_value=1, max_value=31, value=start_date.day
            )

        if st.form_submit_button("💾 Save", type="primary"):
            try:
                payload = RecurringTemplateCreate(
                    workspace_id=WORKSPACE_ID,
                    name=name,
                    amount=Decimal(str(amount)),
                    currency=currency,
                    kind=kind,
                    frequency=frequency,
                    interval=int(interval),
                    day_of_month=int(day_of_month) if frequency == Frequency.MONTHLY else None,
                    start_date=start_date,
                )
                template = run_async(recurring_flow.create_template(payload))
                st.success(f"✅ Saved. First run on {template.next_run_on.isoformat()}.")
            except Exception as e:
                st.error(f"Could not save: {e}")

    st.markdown("---")
    st.markdown("### Active recurring transactions")
    for template in run_async(recurring_flow.list_templates(WORKSPACE_ID)):
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(
                f"**{template.name}** · "
                f"{format_currency(template.amount_minor, template.currency, locale)} · "
                f"{template.schedule.frequency.value}, next {template.next_run_on.isoformat()}"
            )
        with col2:
            if st.button("🗄️ Archive", key=f"archive-{template.id}"):
                run_async(recurring_flow.archive_template(template.id))
                st.rerun()

    st.markdown("---")
    st.markdown("### Run due transactions")
    secret = st.text_input("Run secret", type="password")
    if st.button("▶️ Run now"):
        correlation_id = create_correlation_id()
        try:
            result = run_async(recurring_flow.run_due(secret, correlation_id=correlation_id))
            st.success(
                f"Processed {result.templates_processed} template(s): "
                f"{len(result.created)} created, {result.skipped_count} already present."
            )
        except RecurringRunError as e:
            st.error(f"❌ {e}")
        except Exception as e:
            st.error(f"Error: {e}")

    st.markdown("---")
    st.markdown("### Next two weeks")
    upcoming = run_async(recurring_flow.next_two_weeks(WORKSPACE_ID))
    for item in upcoming.items:
        st.markdown(
            f"- {item.next_date.isoformat()} · {item.title} · "
            f"{format_currency(item.amount_minor, item.currency, locale)}"
        )


def render_budget_page(budget_flow: BudgetFlow, locale: str):
    """Render budget vs actual for a month."""
    st.title("💼 Budget")

    today = utc_today()
    month_date = st.date_input("Month", value=date(today.year, today.month, 1))
    include_pending = st.checkbox("Count pending transactions", value=True)

    try:
        summary = run_async(budget_flow.summary(
            workspace_id=WORKSPACE_ID,
            month=current_month(month_date),
            budget=None,
            categories=[],
            include_pending=include_pending,
        ))
    except Exception as e:
        st.error(f"Error: {e}")
        return

    for section in summary.currencies:
        st.markdown(f"### {section.currency}")
        if not section.rows:
            st.info("No spending recorded for this month.")
            continue
        st.table([
            {
                "Category": row.category_name,
                "Planned": format_currency(row.planned_minor, section.currency, locale),
                "Spent": format_currency(row.actual_minor, section.currency, locale),
                "Remaining": format_currency(row.remaining_minor, section.currency, locale),
                "Used": format_percent(row.progress, locale),
            }
            for row in section.rows
        ])
        st.markdown(
            f"**Total spent:** {format_currency(section.totals.actual_minor, section.currency, locale)}"
        )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from household_budget.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Recurring runs", "recurring"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if not get_settings().recurring.run_secret:
        st.warning("RECURRING_RUN_SECRET is not set, so recurring runs are disabled.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
