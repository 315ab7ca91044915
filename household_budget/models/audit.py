"""
Audit Models for Household Budget

Every write the system makes on the user's behalf (a generated
transaction, a saved layout, a new recurring template) is recorded as
an audit event. Recurring runs happen unattended, so the audit trail is
how a user finds out why a pending transaction appeared.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Recurring templates
    RECURRING_CREATED = "recurring_created"
    RECURRING_ARCHIVED = "recurring_archived"

    # Recurring runs
    RECURRING_RUN_STARTED = "recurring_run_started"
    RECURRING_RUN_COMPLETED = "recurring_run_completed"
    RECURRING_RUN_REJECTED = "recurring_run_rejected"
    TRANSACTION_GENERATED = "transaction_generated"

    # Dashboard
    DASHBOARD_LAYOUT_SAVED = "dashboard_layout_saved"
    DASHBOARD_LAYOUT_REJECTED = "dashboard_layout_rejected"
    DASHBOARD_LAYOUT_PACKED = "dashboard_layout_packed"

    # Budget
    BUDGET_SUMMARY_COMPUTED = "budget_summary_computed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'recurring', 'transaction', 'dashboard')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one recurring run)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_generated(tx_id, recurring_id, on, correlation_id)
        event = AuditEventBuilder.dashboard_layout_saved(workspace_id, 5, correlation_id)
    """

    @staticmethod
    def recurring_created(
        recurring_id: UUID,
        name: str,
        frequency: str,
        next_run_on: date,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_CREATED,
            entity_type="recurring",
            entity_id=recurring_id,
            correlation_id=correlation_id,
            description=f"Recurring template created: {name}",
            details={
                "frequency": frequency,
                "next_run_on": next_run_on.isoformat(),
            },
            is_user_action=True,
        )

    @staticmethod
    def recurring_archived(
        recurring_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_ARCHIVED,
            entity_type="recurring",
            entity_id=recurring_id,
            correlation_id=correlation_id,
            description=f"Recurring template archived: {name}",
            is_user_action=True,
        )

    @staticmethod
    def recurring_run_started(
        run_date: date,
        due_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_RUN_STARTED,
            entity_type="recurring_run",
            correlation_id=correlation_id,
            description=f"Recurring run started with {due_count} due templates",
            details={
                "run_date": run_date.isoformat(),
                "due_count": due_count,
            },
        )

    @staticmethod
    def recurring_run_completed(
        run_date: date,
        created_count: int,
        skipped_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_RUN_COMPLETED,
            entity_type="recurring_run",
            correlation_id=correlation_id,
            description=f"Recurring run created {created_count} transactions",
            details={
                "run_date": run_date.isoformat(),
                "created_count": created_count,
                "skipped_count": skipped_count,
            },
        )

    @staticmethod
    def recurring_run_rejected(
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_RUN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="recurring_run",
            correlation_id=correlation_id,
            description="Recurring run rejected",
            error_message=reason,
        )

    @staticmethod
    def transaction_generated(
        transaction_id: UUID,
        recurring_id: UUID,
        on: date,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_GENERATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Pending transaction generated for {on.isoformat()}",
            details={
                "recurring_id": str(recurring_id),
                "date": on.isoformat(),
            },
        )

    @staticmethod
    def dashboard_layout_saved(
        workspace_id: UUID,
        widget_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_LAYOUT_SAVED,
            entity_type="dashboard",
            entity_id=workspace_id,
            correlation_id=correlation_id,
            description=f"Dashboard layout saved with {widget_count} widgets",
            details={"widget_count": widget_count},
            is_user_action=True,
        )

    @staticmethod
    def dashboard_layout_rejected(
        workspace_id: UUID,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_LAYOUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="dashboard",
            entity_id=workspace_id,
            correlation_id=correlation_id,
            description=f"Dashboard layout rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def dashboard_layout_packed(
        workspace_id: UUID,
        widget_count: int,
        moved_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_LAYOUT_PACKED,
            severity=AuditSeverity.DEBUG,
            entity_type="dashboard",
            entity_id=workspace_id,
            correlation_id=correlation_id,
            description=f"Packed {widget_count} widgets ({moved_count} moved or resized)",
            details={
                "widget_count": widget_count,
                "moved_count": moved_count,
            },
        )

    @staticmethod
    def budget_summary_computed(
        workspace_id: UUID,
        month: str,
        currency_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SUMMARY_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="budget",
            entity_id=workspace_id,
            correlation_id=correlation_id,
            description=f"Budget summary computed for {month}",
            details={
                "month": month,
                "currency_count": currency_count,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
