"""
Tests for Household Budget models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with in-memory storage)
3. No real API calls in tests
"""

import asyncio

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from household_budget.audit import AuditLogger
from household_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from household_budget.models.recurring import (
    Frequency,
    RecurringTemplate,
    RecurringTemplateCreate,
    Transaction,
    TransactionKind,
    UpcomingRecurring,
    to_minor_units,
)
from household_budget.services.storage import InMemoryAuditStorage, StorageError


def _payload(**overrides) -> RecurringTemplateCreate:
    data = {
        "workspace_id": uuid4(),
        "name": "  Rent  ",
        "amount": Decimal("12000.50"),
        "currency": "mxn",
        "kind": TransactionKind.EXPENSE,
        "frequency": Frequency.MONTHLY,
        "startDate": "2024-01-31",
    }
    data.update(overrides)
    return RecurringTemplateCreate(**data)


class TestRecurringModels:
    """Tests for recurring template and transaction models."""

    def test_to_minor_units(self):
        """Test decimal amounts become integer cents."""
        assert to_minor_units(Decimal("12.34")) == 1234
        assert to_minor_units(Decimal("0.005")) == 1
        assert to_minor_units(Decimal("100")) == 10000

    def test_create_payload_normalizes(self):
        """Test whitespace is stripped and the currency uppercased."""
        payload = _payload()
        assert payload.name == "Rent"
        assert payload.currency == "MXN"
        assert payload.start_date == date(2024, 1, 31)

    def test_create_payload_rejects_non_positive_amount(self):
        """Test that zero amounts are rejected."""
        with pytest.raises(ValueError):
            _payload(amount=Decimal("0"))

    def test_template_from_monthly_payload(self):
        """Test a monthly template pins its anchor day."""
        template = RecurringTemplate.from_create(_payload())
        assert template.amount_minor == 1200050
        assert template.schedule.day_of_month == 31
        assert template.next_run_on == date(2024, 1, 31)
        assert template.is_archived is False

    def test_template_keeps_explicit_anchor(self):
        """Test an explicit day of month wins over the start day."""
        template = RecurringTemplate.from_create(_payload(day_of_month=15))
        assert template.schedule.day_of_month == 15

    def test_template_from_weekly_payload(self):
        """Test a weekly template never carries an anchor day."""
        template = RecurringTemplate.from_create(
            _payload(frequency=Frequency.WEEKLY, day_of_month=3)
        )
        assert template.schedule.day_of_month is None
        assert template.schedule.frequency == Frequency.WEEKLY

    def test_transaction_from_template(self):
        """Test generated transactions copy the template and are pending."""
        template = RecurringTemplate.from_create(_payload(category_id=uuid4()))
        tx = Transaction.from_template(template, date(2024, 2, 29))
        assert tx.date == date(2024, 2, 29)
        assert tx.amount_minor == template.amount_minor
        assert tx.currency == "MXN"
        assert tx.category_id == template.category_id
        assert tx.recurring_id == template.id
        assert tx.note == "Recurring: Rent"
        assert tx.is_pending is True

    def test_upcoming_window_order(self):
        """Test the window end cannot precede its start."""
        with pytest.raises(ValueError, match="Window end cannot be before start"):
            UpcomingRecurring(date_from=date(2024, 1, 15), date_to=date(2024, 1, 1))


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECURRING_CREATED,
            description="Template created",
        )
        assert event.event_type == AuditEventType.RECURRING_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_GENERATED,
            description="Pending transaction generated",
            details={"date": "2024-02-29"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_generated"
        assert log_dict["details"]["date"] == "2024-02-29"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.DASHBOARD_LAYOUT_SAVED,
            description="Layout saved",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "dashboard_layout_saved"  # event_type
        assert row[10] == "True"  # is_user_action

    def test_builder_recurring_created(self):
        """Test AuditEventBuilder.recurring_created."""
        recurring_id = uuid4()
        event = AuditEventBuilder.recurring_created(
            recurring_id=recurring_id,
            name="Rent",
            frequency="monthly",
            next_run_on=date(2024, 1, 31),
        )
        assert event.entity_id == recurring_id
        assert event.details["next_run_on"] == "2024-01-31"
        assert event.is_user_action is True

    def test_builder_run_rejected(self):
        """Test AuditEventBuilder.recurring_run_rejected is a warning."""
        correlation_id = uuid4()
        event = AuditEventBuilder.recurring_run_rejected(
            reason="Unauthorized",
            correlation_id=correlation_id,
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "Unauthorized"
        assert event.correlation_id == correlation_id

    def test_builder_transaction_generated(self):
        """Test AuditEventBuilder.transaction_generated."""
        transaction_id = uuid4()
        recurring_id = uuid4()
        event = AuditEventBuilder.transaction_generated(
            transaction_id=transaction_id,
            recurring_id=recurring_id,
            on=date(2024, 3, 31),
            correlation_id=uuid4(),
        )
        assert event.entity_id == transaction_id
        assert event.details["recurring_id"] == str(recurring_id)
        assert event.is_user_action is False


class _FailingAuditStorage(InMemoryAuditStorage):

    async def append_event(self, event: AuditEvent) -> bool:
        raise StorageError("sheet unavailable")


class TestAuditLogger:
    """Tests for AuditLogger persistence behaviour."""

    def test_persists_events(self):
        """Test events reach the storage backend."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = uuid4()

        asyncio.run(logger.log_error(
            error_type="boom",
            error_message="something broke",
            correlation_id=correlation_id,
        ))

        events = asyncio.run(storage.get_events_by_correlation_id(correlation_id))
        assert [e.event_type for e in events] == [AuditEventType.SYSTEM_ERROR]

    def test_storage_failure_is_swallowed(self):
        """Test a failing audit backend never breaks the caller."""
        logger = AuditLogger(_FailingAuditStorage())
        event = AuditEventBuilder.dashboard_layout_saved(workspace_id=uuid4(), widget_count=3)
        assert asyncio.run(logger.log(event)) is False

    def test_without_storage(self):
        """Test local-only logging reports success."""
        event = AuditEventBuilder.budget_summary_computed(
            workspace_id=uuid4(), month="2024-03", currency_count=1
        )
        assert asyncio.run(AuditLogger().log(event)) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
