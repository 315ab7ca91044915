"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a document database later
2. Use in-memory storage for testing
3. Keep scheduling, layout and budgeting logic decoupled from storage

The interface is intentionally small - only the operations the
recurring run, the dashboard and the budget summary need.
"""

from abc import ABC, abstractmethod
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


class RecurringStorageInterface(ABC):
    """Abstract interface for recurring template storage."""

    @abstractmethod
    async def save_template(self, template: RecurringTemplate) -> bool:
        """
        Save a new recurring template.

        Raises:
            DuplicateError: If a template with the same id exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_template(self, template_id: UUID) -> Optional[RecurringTemplate]:
        """Retrieve a template by ID, or None."""
        pass

    @abstractmethod
    async def update_template(self, template: RecurringTemplate) -> bool:
        """
        Update an existing template.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        pass

    @abstractmethod
    async def list_templates(
        self,
        workspace_id: Optional[UUID] = None,
        include_archived: bool = False,
        currency: Optional[str] = None,
    ) -> list[RecurringTemplate]:
        """List templates, newest first."""
        pass

    @abstractmethod
    async def list_due_templates(self, on_or_before: date) -> list[RecurringTemplate]:
        """Active templates (any workspace) whose next_run_on <= on_or_before."""
        pass


class TransactionStorageInterface(ABC):
    """Abstract interface for transaction storage."""

    @abstractmethod
    async def save_transaction(self, transaction: Transaction) -> bool:
        """
        Save a transaction.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def find_generated(
        self,
        workspace_id: UUID,
        recurring_id: UUID,
        on: date,
    ) -> Optional[Transaction]:
        """The transaction a recurring template already generated for `on`, if any."""
        pass

    @abstractmethod
    async def list_transactions(
        self,
        workspace_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        kind: Optional[TransactionKind] = None,
        include_archived: bool = False,
    ) -> list[Transaction]:
        """
        List transactions with optional filters.

        Args:
            date_from: On or after this date
            date_to: Strictly before this date
        """
        pass


class DashboardConfigStorageInterface(ABC):
    """Abstract interface for saved dashboard layouts (one per workspace)."""

    @abstractmethod
    async def get_config(self, workspace_id: UUID) -> Optional[DashboardConfig]:
        pass

    @abstractmethod
    async def save_config(self, config: DashboardConfig) -> DashboardConfig:
        """Insert or replace the workspace's layout."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Returns True if logged successfully."""
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Events of one flow (e.g. one recurring run), oldest first."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
