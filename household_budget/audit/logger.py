"""
Audit Logger

DESIGN DECISION: Every write the system makes is logged.
This provides:
1. Traceability of unattended recurring runs
2. Debugging capability for surprising dashboard layouts
3. User-visible history of changes

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (a broken audit sheet never breaks a run)
- Supports correlation IDs to trace related events
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_budget.models.audit import AuditEvent, AuditEventBuilder
from household_budget.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_recurring_created(
        self,
        recurring_id: UUID,
        name: str,
        frequency: str,
        next_run_on: date,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_created(
            recurring_id=recurring_id,
            name=name,
            frequency=frequency,
            next_run_on=next_run_on,
            correlation_id=correlation_id,
        ))

    async def log_recurring_archived(
        self,
        recurring_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_archived(
            recurring_id=recurring_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_run_started(
        self,
        run_date: date,
        due_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_run_started(
            run_date=run_date,
            due_count=due_count,
            correlation_id=correlation_id,
        ))

    async def log_run_completed(
        self,
        run_date: date,
        created_count: int,
        skipped_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_run_completed(
            run_date=run_date,
            created_count=created_count,
            skipped_count=skipped_count,
            correlation_id=correlation_id,
        ))

    async def log_run_rejected(
        self,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_run_rejected(
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_transaction_generated(
        self,
        transaction_id: UUID,
        recurring_id: UUID,
        on: date,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_generated(
            transaction_id=transaction_id,
            recurring_id=recurring_id,
            on=on,
            correlation_id=correlation_id,
        ))

    async def log_layout_saved(
        self,
        workspace_id: UUID,
        widget_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.dashboard_layout_saved(
            workspace_id=workspace_id,
            widget_count=widget_count,
            correlation_id=correlation_id,
        ))

    async def log_layout_rejected(
        self,
        workspace_id: UUID,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.dashboard_layout_rejected(
            workspace_id=workspace_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_layout_packed(
        self,
        workspace_id: UUID,
        widget_count: int,
        moved_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.dashboard_layout_packed(
            workspace_id=workspace_id,
            widget_count=widget_count,
            moved_count=moved_count,
            correlation_id=correlation_id,
        ))

    async def log_budget_summary(
        self,
        workspace_id: UUID,
        month: str,
        currency_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.budget_summary_computed(
            workspace_id=workspace_id,
            month=month,
            currency_count=currency_count,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new action (e.g., a recurring run).
    Pass it through all subsequent operations.
    """
    return uuid4()
