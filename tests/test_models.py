"""
Tests for Stipend Tracker models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with fake extractors)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError as SchemaError

from stipend_tracker.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Category,
    DailyAmount,
    Goal,
    GoalProgress,
    LedgerSnapshot,
    Receipt,
    ReceiptLineItem,
    ReceiptUpload,
    Transaction,
    TransactionKind,
)


def make_transaction(**overrides) -> Transaction:
    fields = {
        "description": "Lunch",
        "amount": Decimal("12.50"),
        "category": Category.FOOD,
        "date": date(2026, 10, 19),
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestLedgerModels:
    """Tests for ledger record models."""

    def test_transaction_defaults(self):
        """A new transaction is an expense without a receipt."""
        transaction = make_transaction()
        assert transaction.kind == TransactionKind.EXPENSE
        assert transaction.has_receipt is False
        assert transaction.receipt_id is None
        assert transaction.goal_id is None
        assert len(transaction.id) == 32

    def test_transaction_ids_are_unique(self):
        """Each transaction gets its own id."""
        assert make_transaction().id != make_transaction().id

    def test_transaction_strips_whitespace(self):
        """Whitespace is stripped from the description."""
        assert make_transaction(description="  Bus pass  ").description == "Bus pass"

    def test_transaction_rejects_non_positive_amount(self):
        """Amounts must be greater than zero."""
        with pytest.raises(SchemaError):
            make_transaction(amount=Decimal("0"))
        with pytest.raises(SchemaError):
            make_transaction(amount=Decimal("-5.00"))

    def test_transaction_rejects_fractional_cents(self):
        """Amounts carry at most two decimal places."""
        with pytest.raises(SchemaError):
            make_transaction(amount=Decimal("1.234"))

    def test_transaction_is_immutable(self):
        """Transactions cannot be edited after creation."""
        transaction = make_transaction()
        with pytest.raises(SchemaError):
            transaction.amount = Decimal("1.00")

    def test_signed_amount(self):
        """Expenses are negative, income positive."""
        assert make_transaction().signed_amount == Decimal("-12.50")
        income = make_transaction(kind=TransactionKind.INCOME, category=Category.OTHER)
        assert income.signed_amount == Decimal("12.50")
        assert income.is_income and not income.is_expense

    def test_category_values_are_display_names(self):
        """Category values go straight into exports."""
        assert Category.SCHOOL_SUPPLIES.value == "School Supplies"
        assert Category("Personal Care") == Category.PERSONAL_CARE

    def test_goal_requires_positive_target(self):
        """Goal targets must be positive."""
        with pytest.raises(SchemaError):
            Goal(name="Laptop", target_amount=Decimal("0"))

    def test_receipt_with_line_items(self):
        """Receipts keep their line items in order."""
        receipt = Receipt(
            merchant="Target",
            amount=Decimal("20.00"),
            date=date(2026, 10, 1),
            category=Category.FOOD,
            source_reference="receipt.jpg",
            line_items=(
                ReceiptLineItem(name="Item 1", price=Decimal("12.00")),
                ReceiptLineItem(name="Item 2", price=Decimal("8.00")),
            ),
        )
        assert [item.name for item in receipt.line_items] == ["Item 1", "Item 2"]


class TestReceiptUpload:
    """Tests for the upload model."""

    def test_image_upload(self):
        """Image mime types are accepted and normalized."""
        upload = ReceiptUpload(filename="r.png", content=b"abc", mime_type="IMAGE/PNG")
        assert upload.mime_type == "image/png"
        assert upload.size_bytes == 3

    def test_non_image_rejected(self):
        """Only images can be uploaded."""
        with pytest.raises(SchemaError, match="Unsupported file type"):
            ReceiptUpload(filename="r.pdf", content=b"abc", mime_type="application/pdf")


class TestSnapshot:
    """Tests for LedgerSnapshot."""

    def test_empty_snapshot(self):
        """A fresh snapshot has nothing in it."""
        snapshot = LedgerSnapshot()
        assert snapshot.is_empty
        assert snapshot.stipend == Decimal("0.00")

    def test_stipend_alone_is_still_empty(self):
        """A stipend without any activity does not count as activity."""
        assert LedgerSnapshot(stipend=Decimal("100.00")).is_empty

    def test_newest_first(self):
        """Display order is insertion order reversed."""
        first = make_transaction(description="first")
        second = make_transaction(description="second")
        snapshot = LedgerSnapshot(transactions=(first, second))
        assert [t.description for t in snapshot.transactions_newest_first()] == ["second", "first"]


class TestInsightModels:
    """Tests for derived result models."""

    def test_goal_progress_clamps_display_only(self):
        """Raw percent may pass 100, the display value may not."""
        goal = Goal(name="Laptop", target_amount=Decimal("100.00"))
        progress = GoalProgress(goal=goal, saved=Decimal("150.00"), percent=Decimal("150"))
        assert progress.percent == Decimal("150")
        assert progress.display_percent == Decimal("100")
        assert progress.remaining == Decimal("0.00")
        assert progress.is_complete

    def test_daily_amount_label(self):
        """Chart labels are short month and day."""
        point = DailyAmount(day=date(2026, 10, 9), amount=Decimal("0"))
        assert point.label == "Oct 9"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id="abc",
            description="Test",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "abc"

    def test_audit_event_to_sheets_row(self):
        """Test AuditEvent conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.SETTINGS_CHANGED,
            description="Test",
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "settings_changed"

    def test_audit_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        event = AuditEventBuilder.transaction_added(
            transaction_id="t1",
            kind="expense",
            category="Food",
            amount="12.50",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == "t1"
        assert event.is_user_action

    def test_audit_builder_extraction_failed(self):
        """Test AuditEventBuilder.extraction_failed."""
        correlation_id = uuid4()
        event = AuditEventBuilder.extraction_failed(
            filename="receipt.jpg",
            error_message="unreadable",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.EXTRACTION_FAILED
        assert event.correlation_id == correlation_id
        assert event.error_message == "unreadable"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
