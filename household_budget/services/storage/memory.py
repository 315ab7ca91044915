"""
In-Memory Storage

Dict-backed implementation of every storage interface. Used by the
test suite and by the app when Google Sheets is not configured, so the
dashboard and recurring pages still work (without persistence).

Models are copied on the way in and out so callers can never mutate
stored state by accident.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from household_budget.models.audit import AuditEvent
from household_budget.models.dashboard import DashboardConfig
from household_budget.models.recurring import (
    RecurringTemplate,
    Transaction,
    TransactionKind,
)
from household_budget.services.storage.interface import (
    AuditStorageInterface,
    DashboardConfigStorageInterface,
    DuplicateError,
    NotFoundError,
    RecurringStorageInterface,
    TransactionStorageInterface,
)


class InMemoryRecurringStorage(RecurringStorageInterface):

    def __init__(self):
        self._templates: dict[UUID, RecurringTemplate] = {}

    async def save_template(self, template: RecurringTemplate) -> bool:
        if template.id in self._templates:
            raise DuplicateError(f"Recurring template already exists: {template.id}")
        self._templates[template.id] = template.model_copy(deep=True)
        return True

    async def get_template(self, template_id: UUID) -> Optional[RecurringTemplate]:
        template = self._templates.get(template_id)
        return template.model_copy(deep=True) if template else None

    async def update_template(self, template: RecurringTemplate) -> bool:
        if template.id not in self._templates:
            raise NotFoundError(f"Recurring template not found: {template.id}")
        self._templates[template.id] = template.model_copy(deep=True)
        return True

    async def list_templates(
        self,
        workspace_id: Optional[UUID] = None,
        include_archived: bool = False,
        currency: Optional[str] = None,
    ) -> list[RecurringTemplate]:
        templates = [
            t.model_copy(deep=True)
            for t in self._templates.values()
            if (workspace_id is None or t.workspace_id == workspace_id)
            and (include_archived or not t.is_archived)
            and (currency is None or t.currency == currency)
        ]
        templates.sort(key=lambda t: t.created_at, reverse=True)
        return templates

    async def list_due_templates(self, on_or_before: date) -> list[RecurringTemplate]:
        return [
            t.model_copy(deep=True)
            for t in self._templates.values()
            if not t.is_archived and t.next_run_on <= on_or_before
        ]


class InMemoryTransactionStorage(TransactionStorageInterface):

    def __init__(self):
        self._transactions: list[Transaction] = []

    async def save_transaction(self, transaction: Transaction) -> bool:
        if any(tx.id == transaction.id for tx in self._transactions):
            raise DuplicateError(f"Transaction already exists: {transaction.id}")
        self._transactions.append(transaction.model_copy(deep=True))
        return True

    async def find_generated(
        self,
        workspace_id: UUID,
        recurring_id: UUID,
        on: date,
    ) -> Optional[Transaction]:
        for tx in self._transactions:
            if (
                tx.workspace_id == workspace_id
                and tx.recurring_id == recurring_id
                and tx.date == on
            ):
                return tx.model_copy(deep=True)
        return None

    async def list_transactions(
        self,
        workspace_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        include_archived: bool = False,
    ) -> list[Transaction]:
        result = []
        for tx in self._transactions:
            if tx.workspace_id != workspace_id:
                continue
            if date_from and tx.date < date_from:
                continue
            if date_to and tx.date >= date_to:
                continue
            if kind and tx.kind != kind:
                continue
            if tx.is_archived and not include_archived:
                continue
            result.append(tx.model_copy(deep=True))
        result.sort(key=lambda tx: tx.date, reverse=True)
        return result


class InMemoryDashboardConfigStorage(DashboardConfigStorageInterface):

    def __init__(self):
        self._configs: dict[UUID, DashboardConfig] = {}

    async def get_config(self, workspace_id: UUID) -> Optional[DashboardConfig]:
        config = self._configs.get(workspace_id)
        return config.model_copy(deep=True) if config else None

    async def save_config(self, config: DashboardConfig) -> DashboardConfig:
        self._configs[config.workspace_id] = config.model_copy(deep=True)
        return config


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
