"""
Main Orchestrator for Household Budget

This module ties the pure building blocks to storage and auditing:
1. Recurring (create template → run due templates → upcoming list)
2. Dashboard (load saved layout → pack; validate → save)
3. Budget (load month's transactions → budget vs actual)

DESIGN DECISION: Flows own all I/O and all reads of "today" and
settings. The scheduler, packer and budget aggregation below them are
pure and receive everything as arguments.
"""

import hmac
from datetime import date, datetime
from typing import Iterable, NamedTuple, Optional, Union
from uuid import UUID

import structlog

from household_budget.audit import AuditLogger, create_correlation_id
from household_budget.budget import build_budget_summary
from household_budget.config import get_settings
from household_budget.dashboard import (
    build_default_dashboard,
    get_widget_definition,
    pack_widgets,
)
from household_budget.dates import DateLike, add_days, parse_date_only, parse_month, utc_today
from household_budget.models.budget import BudgetMonth, BudgetSummary, Category
from household_budget.models.dashboard import DashboardConfig, PlacedWidget, WidgetSpec
from household_budget.models.recurring import (
    RecurringRunResult,
    RecurringTemplate,
    RecurringTemplateCreate,
    Transaction,
    TransactionKind,
    UpcomingRecurring,
    UpcomingRecurringItem,
)
from household_budget.scheduling import compute_next_occurrence, upcoming_occurrences
from household_budget.services.storage import (
    DashboardConfigStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDashboardConfigStorage,
    GoogleSheetsRecurringStorage,
    GoogleSheetsTransactionStorage,
    InMemoryAuditStorage,
    InMemoryDashboardConfigStorage,
    InMemoryRecurringStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from household_budget.validation import DashboardLayoutValidator, DashboardValidationError


logger = structlog.get_logger(__name__)


class RecurringRunError(Exception):
    """Base exception for recurring run failures."""
    pass


class RunSecretNotConfiguredError(RecurringRunError):
    """No run secret is configured, so runs cannot be authorized."""
    pass


class UnauthorizedRunError(RecurringRunError):
    """The provided run secret does not match."""
    pass


class RecurringFlow:
    """
    Orchestrates recurring templates.

    A run catches every due template up to `today`:
    for each occurrence from next_run_on through today, one pending
    transaction is generated unless that date already has one. The
    template then moves to its first occurrence after today.
    """

    def __init__(
        self,
        recurring_storage: RecurringStorageInterface,
        transaction_storage: TransactionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        run_secret: Optional[str] = None,
        window_days: Optional[int] = None,
    ):
        self._recurring = recurring_storage
        self._transactions = transaction_storage
        self._audit_logger = audit_logger
        self._run_secret = run_secret if run_secret is not None else get_settings().recurring.run_secret
        self._window_days = window_days if window_days is not None else get_settings().app.upcoming_window_days

    async def create_template(
        self,
        payload: RecurringTemplateCreate,
        correlation_id: Optional[UUID] = None,
    ) -> RecurringTemplate:
        """Create and store a template from a validated payload."""
        template = RecurringTemplate.from_create(payload)
        await self._recurring.save_template(template)

        if self._audit_logger:
            await self._audit_logger.log_recurring_created(
                recurring_id=template.id,
                name=template.name,
                frequency=template.schedule.frequency.value,
                next_run_on=template.next_run_on,
                correlation_id=correlation_id,
            )
        return template

    async def list_templates(self, workspace_id: UUID) -> list[RecurringTemplate]:
        return await self._recurring.list_templates(workspace_id=workspace_id)

    async def archive_template(
        self,
        template_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> RecurringTemplate:
        """
        Stop a template from firing. Already generated transactions stay.

        Raises:
            NotFoundError: no template with that id
        """
        template = await self._recurring.get_template(template_id)
        if template is None:
            raise NotFoundError(f"Recurring template not found: {template_id}")
        if template.is_archived:
            return template

        template.is_archived = True
        template.updated_at = datetime.utcnow()
        await self._recurring.update_template(template)

        if self._audit_logger:
            await self._audit_logger.log_recurring_archived(
                recurring_id=template.id,
                name=template.name,
                correlation_id=correlation_id,
            )
        return template

    def _authorize(self, provided_secret: Optional[str]) -> None:
        if not self._run_secret:
            raise RunSecretNotConfiguredError("Recurring run secret not configured")
        if provided_secret is None or not hmac.compare_digest(
            provided_secret.encode(), self._run_secret.encode()
        ):
            raise UnauthorizedRunError("Unauthorized")

    async def run_due(
        self,
        provided_secret: Optional[str],
        today: Optional[DateLike] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RecurringRunResult:
        """
        Generate pending transactions for every due template.

        Raises:
            RunSecretNotConfiguredError: no secret configured
            UnauthorizedRunError: secret mismatch
            StorageError: storage failed mid-run (already-written
                transactions are kept; rerunning skips them)
        """
        correlation_id = correlation_id or create_correlation_id()
        run_date = parse_date_only(today) if today is not None else utc_today()

        try:
            self._authorize(provided_secret)
        except RecurringRunError as e:
            if self._audit_logger:
                await self._audit_logger.log_run_rejected(
                    reason=str(e),
                    correlation_id=correlation_id,
                )
            raise

        due = await self._recurring.list_due_templates(run_date)
        if self._audit_logger:
            await self._audit_logger.log_run_started(
                run_date=run_date,
                due_count=len(due),
                correlation_id=correlation_id,
            )

        result = RecurringRunResult(run_date=run_date)
        for template in due:
            try:
                await self._run_template(template, run_date, result, correlation_id)
            except StorageError as e:
                if self._audit_logger:
                    await self._audit_logger.log_external_service_error(
                        service="storage",
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                raise
            result.templates_processed += 1

        if self._audit_logger:
            await self._audit_logger.log_run_completed(
                run_date=run_date,
                created_count=len(result.created),
                skipped_count=result.skipped_count,
                correlation_id=correlation_id,
            )
        return result

    async def _run_template(
        self,
        template: RecurringTemplate,
        run_date: date,
        result: RecurringRunResult,
        correlation_id: UUID,
    ) -> None:
        occurrence = template.next_run_on
        while occurrence <= run_date:
            existing = await self._transactions.find_generated(
                workspace_id=template.workspace_id,
                recurring_id=template.id,
                on=occurrence,
            )
            if existing:
                result.skipped_count += 1
            else:
                transaction = Transaction.from_template(template, occurrence)
                await self._transactions.save_transaction(transaction)
                result.created.append(transaction.id)
                if self._audit_logger:
                    await self._audit_logger.log_transaction_generated(
                        transaction_id=transaction.id,
                        recurring_id=template.id,
                        on=occurrence,
                        correlation_id=correlation_id,
                    )

            occurrence = compute_next_occurrence(template.schedule, occurrence)

        template.next_run_on = occurrence
        await self._recurring.update_template(template)

    async def next_two_weeks(
        self,
        workspace_id: UUID,
        today: Optional[DateLike] = None,
        currency: Optional[str] = None,
    ) -> UpcomingRecurring:
        """Occurrences of active templates inside [today, today + window]."""
        start = parse_date_only(today) if today is not None else utc_today()
        end = add_days(start, self._window_days)

        templates = await self._recurring.list_templates(
            workspace_id=workspace_id,
            currency=currency.upper() if currency else None,
        )

        items = []
        for template in templates:
            for occurrence in upcoming_occurrences(
                template.schedule, template.next_run_on, start, until=end
            ):
                items.append(UpcomingRecurringItem(
                    recurring_id=template.id,
                    title=template.name,
                    next_date=occurrence,
                    amount_minor=template.amount_minor,
                    currency=template.currency,
                    kind=template.kind,
                    category_id=template.category_id,
                    merchant_id=template.merchant_id,
                ))

        items.sort(key=lambda item: (item.next_date, item.title))
        return UpcomingRecurring(date_from=start, date_to=end, items=items)


class DashboardFlow:
    """
    Orchestrates dashboard layouts.

    Saved layouts are validated strictly; rendered layouts are packed
    leniently. A stored layout that predates a size rule still renders,
    it just gets pushed into a valid shape.
    """

    def __init__(
        self,
        config_storage: DashboardConfigStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[DashboardLayoutValidator] = None,
        columns: Optional[int] = None,
    ):
        self._storage = config_storage
        self._audit_logger = audit_logger
        self._columns = columns if columns is not None else get_settings().app.grid_columns
        self._validator = validator or DashboardLayoutValidator(columns=self._columns)

    async def get_widgets(self, workspace_id: UUID) -> list[WidgetSpec]:
        """Saved widgets, or the default dashboard when nothing is saved."""
        config = await self._storage.get_config(workspace_id)
        if config is None:
            return build_default_dashboard()
        return config.widgets

    async def load_layout(
        self,
        workspace_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> list[PlacedWidget]:
        """The workspace's widgets, packed for rendering."""
        widgets = await self.get_widgets(workspace_id)
        placed = pack_widgets(widgets, columns=self._columns)

        if self._audit_logger:
            moved = sum(
                1 for before, after in zip(widgets, placed)
                if (before.x, before.y, before.w, before.h) != (after.x, after.y, after.w, after.h)
            )
            await self._audit_logger.log_layout_packed(
                workspace_id=workspace_id,
                widget_count=len(placed),
                moved_count=moved,
                correlation_id=correlation_id,
            )
        return placed

    async def save_layout(
        self,
        workspace_id: UUID,
        widgets: Iterable[Union[WidgetSpec, dict]],
        correlation_id: Optional[UUID] = None,
    ) -> list[PlacedWidget]:
        """
        Validate and store a layout.

        Title keys are always taken from the registry for known types.

        Raises:
            DashboardValidationError: layout rejected (nothing is stored)
        """
        normalized = []
        for item in widgets:
            raw = item.model_dump() if isinstance(item, WidgetSpec) else dict(item)
            definition = get_widget_definition(raw.get("type")) if isinstance(raw.get("type"), str) else None
            if definition is not None:
                raw.pop("titleKey", None)
                raw["title_key"] = definition.title_key
            normalized.append(raw)

        try:
            specs = self._validator.validate_or_raise(normalized)
        except DashboardValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_layout_rejected(
                    workspace_id=workspace_id,
                    issues=[
                        {"field": i.field, "type": i.issue_type, "message": i.message}
                        for i in e.result.issues
                    ],
                    correlation_id=correlation_id,
                )
            raise

        await self._storage.save_config(DashboardConfig(workspace_id=workspace_id, widgets=specs))
        if self._audit_logger:
            await self._audit_logger.log_layout_saved(
                workspace_id=workspace_id,
                widget_count=len(specs),
                correlation_id=correlation_id,
            )
        return pack_widgets(specs, columns=self._columns)


class BudgetFlow:
    """Budget vs actual for a workspace and month."""

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transactions = transaction_storage
        self._audit_logger = audit_logger

    async def summary(
        self,
        workspace_id: UUID,
        month: str,
        budget: Optional[BudgetMonth],
        categories: list[Category],
        default_currency: Optional[str] = None,
        include_pending: bool = True,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetSummary:
        """
        Compute the summary for `month`.

        Without a saved budget the plan is empty and the workspace's
        default currency is used.
        """
        month_range = parse_month(month)
        transactions = await self._transactions.list_transactions(
            workspace_id=workspace_id,
            date_from=month_range.start,
            date_to=month_range.end,
            kind=TransactionKind.EXPENSE,
        )

        currency = budget.currency if budget else (default_currency or get_settings().app.default_currency)
        result = build_budget_summary(
            month=month_range.month,
            budget_currency=currency,
            planned_lines=budget.planned_lines if budget else [],
            categories=categories,
            transactions=transactions,
            include_pending=include_pending,
        )

        if self._audit_logger:
            await self._audit_logger.log_budget_summary(
                workspace_id=workspace_id,
                month=result.month,
                currency_count=len(result.currencies),
                correlation_id=correlation_id,
            )
        return result


class AppComponents(NamedTuple):
    recurring_flow: RecurringFlow
    dashboard_flow: DashboardFlow
    budget_flow: BudgetFlow
    sheets_client: Optional[GoogleSheetsClient]


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False (or leave Sheets unconfigured) to run
                    on in-memory storage.
    """
    sheets_client = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            recurring_storage = GoogleSheetsRecurringStorage(sheets_client)
            transaction_storage = GoogleSheetsTransactionStorage(sheets_client)
            config_storage = GoogleSheetsDashboardConfigStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            use_storage = False
            sheets_client = None

    if not use_storage:
        recurring_storage = InMemoryRecurringStorage()
        transaction_storage = InMemoryTransactionStorage()
        config_storage = InMemoryDashboardConfigStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    return AppComponents(
        recurring_flow=RecurringFlow(recurring_storage, transaction_storage, audit_logger),
        dashboard_flow=DashboardFlow(config_storage, audit_logger),
        budget_flow=BudgetFlow(transaction_storage, audit_logger),
        sheets_client=sheets_client,
    )
