"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the default persistent backend because:
1. Households can look at (and fix) their data directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (fine for one household)
- No transactions (a recurring run writes transactions first and
  advances the template last, so a crash only repeats the run, and the
  run skips dates that already have a transaction)
- Limited query capabilities (we filter in Python)
"""

import json
from datetime import date, datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from household_budget.config import get_settings
from household_budget.models.audit import AuditEvent, AuditEventType, AuditSeverity
from household_budget.models.dashboard import DashboardConfig, WidgetSpec
from household_budget.models.recurring import (
    Frequency,
    RecurrenceRule,
    RecurringTemplate,
    Transaction,
    TransactionKind,
)
from household_budget.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DashboardConfigStorageInterface,
    DuplicateError,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
    TransactionStorageInterface,
)


logger = structlog.get_logger(__name__)

RECURRING_COLUMNS = [
    "id",
    "workspace_id",
    "name",
    "amount_minor",
    "currency",
    "kind",
    "category_id",
    "merchant_id",
    "frequency",
    "interval",
    "day_of_month",
    "start_date",
    "next_run_on",
    "is_archived",
    "created_at",
    "updated_at",
]

TRANSACTION_COLUMNS = [
    "id",
    "workspace_id",
    "date",
    "amount_minor",
    "currency",
    "kind",
    "category_id",
    "merchant_id",
    "recurring_id",
    "note",
    "is_pending",
    "is_archived",
    "created_at",
]

DASHBOARD_COLUMNS = [
    "workspace_id",
    "version",
    "widgets_json",
    "updated_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _safe_getter(row: list):
    """Index into a row, treating missing or blank cells as ''."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


def _uuid_or_none(value: str) -> Optional[UUID]:
    return UUID(value) if value else None


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row when missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_recurring_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.recurring_sheet_name, RECURRING_COLUMNS)

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS, rows=5000
        )

    def get_dashboard_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.dashboard_sheet_name, DASHBOARD_COLUMNS, rows=100)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsRecurringStorage(RecurringStorageInterface):
    """
    Recurring templates, one per row.

    The schedule is flattened into frequency/interval/day_of_month/start_date
    columns so it stays readable (and editable) in the sheet.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _template_to_row(self, template: RecurringTemplate) -> list:
        schedule = template.schedule
        return [
            str(template.id),
            str(template.workspace_id),
            template.name,
            str(template.amount_minor),
            template.currency,
            template.kind.value,
            str(template.category_id) if template.category_id else "",
            str(template.merchant_id) if template.merchant_id else "",
            schedule.frequency.value,
            str(schedule.interval),
            str(schedule.day_of_month) if schedule.day_of_month is not None else "",
            schedule.start_date.isoformat(),
            template.next_run_on.isoformat(),
            str(template.is_archived),
            template.created_at.isoformat(),
            template.updated_at.isoformat(),
        ]

    def _row_to_template(self, row: list) -> RecurringTemplate:
        safe_get = _safe_getter(row)
        return RecurringTemplate(
            id=UUID(safe_get(0)),
            workspace_id=UUID(safe_get(1)),
            name=safe_get(2),
            amount_minor=int(safe_get(3)),
            currency=safe_get(4),
            kind=TransactionKind(safe_get(5)),
            category_id=_uuid_or_none(safe_get(6)),
            merchant_id=_uuid_or_none(safe_get(7)),
            schedule=RecurrenceRule(
                frequency=Frequency(safe_get(8)),
                interval=int(safe_get(9, "1")),
                day_of_month=int(safe_get(10)) if safe_get(10) else None,
                start_date=safe_get(11),
            ),
            next_run_on=date.fromisoformat(safe_get(12)),
            is_archived=safe_get(13).lower() == "true",
            created_at=datetime.fromisoformat(safe_get(14)),
            updated_at=datetime.fromisoformat(safe_get(15)),
        )

    def _load_all(self) -> list[RecurringTemplate]:
        sheet = self._client.get_recurring_sheet()
        templates = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                templates.append(self._row_to_template(row))
            except (ValueError, TypeError) as e:
                logger.warning("recurring_row_skipped", row_id=row[0], error=str(e))
        return templates

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(DuplicateError),
        reraise=True,
    )
    async def save_template(self, template: RecurringTemplate) -> bool:
        try:
            sheet = self._client.get_recurring_sheet()
            if any(row and row[0] == str(template.id) for row in sheet.get_all_values()[1:]):
                raise DuplicateError(f"Recurring template already exists: {template.id}")
            sheet.append_row(self._template_to_row(template), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save recurring template: {e}")

    async def get_template(self, template_id: UUID) -> Optional[RecurringTemplate]:
        try:
            sheet = self._client.get_recurring_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(template_id):
                    return self._row_to_template(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get recurring template: {e}")

    async def update_template(self, template: RecurringTemplate) -> bool:
        try:
            sheet = self._client.get_recurring_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):  # row 1 is header
                if row and row[0] == str(template.id):
                    template.updated_at = datetime.utcnow()
                    new_row = self._template_to_row(template)
                    sheet.update(
                        range_name=f"A{idx}",
                        values=[new_row],
                        value_input_option="RAW",
                    )
                    return True

            raise NotFoundError(f"Recurring template not found: {template.id}")
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update recurring template: {e}")

    async def list_templates(
        self,
        workspace_id: Optional[UUID] = None,
        include_archived: bool = False,
        currency: Optional[str] = None,
    ) -> list[RecurringTemplate]:
        try:
            templates = [
                t for t in self._load_all()
                if (workspace_id is None or t.workspace_id == workspace_id)
                and (include_archived or not t.is_archived)
                and (currency is None or t.currency == currency)
            ]
        except Exception as e:
            raise StorageError(f"Failed to list recurring templates: {e}")
        templates.sort(key=lambda t: t.created_at, reverse=True)
        return templates

    async def list_due_templates(self, on_or_before: date) -> list[RecurringTemplate]:
        try:
            return [
                t for t in self._load_all()
                if not t.is_archived and t.next_run_on <= on_or_before
            ]
        except Exception as e:
            raise StorageError(f"Failed to list due recurring templates: {e}")


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """Transactions, one per row."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, tx: Transaction) -> list:
        return [
            str(tx.id),
            str(tx.workspace_id),
            tx.date.isoformat(),
            str(tx.amount_minor),
            tx.currency,
            tx.kind.value,
            str(tx.category_id) if tx.category_id else "",
            str(tx.merchant_id) if tx.merchant_id else "",
            str(tx.recurring_id) if tx.recurring_id else "",
            tx.note or "",
            str(tx.is_pending),
            str(tx.is_archived),
            tx.created_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        safe_get = _safe_getter(row)
        return Transaction(
            id=UUID(safe_get(0)),
            workspace_id=UUID(safe_get(1)),
            date=date.fromisoformat(safe_get(2)),
            amount_minor=int(safe_get(3)),
            currency=safe_get(4),
            kind=TransactionKind(safe_get(5)),
            category_id=_uuid_or_none(safe_get(6)),
            merchant_id=_uuid_or_none(safe_get(7)),
            recurring_id=_uuid_or_none(safe_get(8)),
            note=safe_get(9) or None,
            is_pending=safe_get(10).lower() == "true",
            is_archived=safe_get(11).lower() == "true",
            created_at=datetime.fromisoformat(safe_get(12)),
        )

    def _load_workspace(self, workspace_id: UUID) -> list[Transaction]:
        sheet = self._client.get_transactions_sheet()
        transactions = []
        for row in sheet.get_all_values()[1:]:
            if not row or len(row) < 2 or row[1] != str(workspace_id):
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except (ValueError, TypeError) as e:
                logger.warning("transaction_row_skipped", row_id=row[0], error=str(e))
        return transactions

    async def save_transaction(self, transaction: Transaction) -> bool:
        try:
            exists = self._has_row(self._client.get_transactions_sheet(), transaction.id)
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")
        if exists:
            raise DuplicateError(f"Transaction already exists: {transaction.id}")
        return await self._append_transaction(transaction)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _append_transaction(self, transaction: Transaction) -> bool:
        try:
            sheet = self._client.get_transactions_sheet()
            # An earlier attempt may have written the row before failing
            if self._has_row(sheet, transaction.id):
                return True
            sheet.append_row(self._transaction_to_row(transaction), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    @staticmethod
    def _has_row(sheet, transaction_id: UUID) -> bool:
        return any(row and row[0] == str(transaction_id) for row in sheet.get_all_values()[1:])

    async def find_generated(
        self,
        workspace_id: UUID,
        recurring_id: UUID,
        on: date,
    ) -> Optional[Transaction]:
        try:
            for tx in self._load_workspace(workspace_id):
                if tx.recurring_id == recurring_id and tx.date == on:
                    return tx
            return None
        except Exception as e:
            raise StorageError(f"Failed to look up generated transaction: {e}")

    async def list_transactions(
        self,
        workspace_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        include_archived: bool = False,
    ) -> list[Transaction]:
        try:
            transactions = self._load_workspace(workspace_id)
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

        result = []
        for tx in transactions:
            if date_from and tx.date < date_from:
                continue
            if date_to and tx.date >= date_to:
                continue
            if kind and tx.kind != kind:
                continue
            if tx.is_archived and not include_archived:
                continue
            result.append(tx)

        result.sort(key=lambda tx: tx.date, reverse=True)
        return result


class GoogleSheetsDashboardConfigStorage(DashboardConfigStorageInterface):
    """One row per workspace; the widget list is stored as JSON."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _config_to_row(self, config: DashboardConfig) -> list:
        return [
            str(config.workspace_id),
            str(config.version),
            json.dumps([w.model_dump(mode="json", exclude_none=True) for w in config.widgets]),
            config.updated_at.isoformat(),
        ]

    def _row_to_config(self, row: list) -> DashboardConfig:
        safe_get = _safe_getter(row)
        widgets_json = safe_get(2, "[]")
        return DashboardConfig(
            workspace_id=UUID(safe_get(0)),
            version=int(safe_get(1, "1")),
            widgets=[WidgetSpec.model_validate(w) for w in json.loads(widgets_json)],
            updated_at=datetime.fromisoformat(safe_get(3)),
        )

    async def get_config(self, workspace_id: UUID) -> Optional[DashboardConfig]:
        try:
            sheet = self._client.get_dashboard_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(workspace_id):
                    return self._row_to_config(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get dashboard config: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_config(self, config: DashboardConfig) -> DashboardConfig:
        try:
            sheet = self._client.get_dashboard_sheet()
            config.updated_at = datetime.utcnow()
            new_row = self._config_to_row(config)

            for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
                if row and row[0] == str(config.workspace_id):
                    sheet.update(range_name=f"A{idx}", values=[new_row], value_input_option="RAW")
                    return config

            sheet.append_row(new_row, value_input_option="RAW")
            return config
        except Exception as e:
            raise StorageError(f"Failed to save dashboard config: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        safe_get = _safe_getter(row)
        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=_uuid_or_none(safe_get(5)),
            correlation_id=_uuid_or_none(safe_get(6)),
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _load_all(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, TypeError) as e:
                logger.warning("audit_row_skipped", row_id=row[0], error=str(e))
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            events = [e for e in self._load_all() if e.correlation_id == correlation_id]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            events = self._load_all()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
