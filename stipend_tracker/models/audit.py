"""
Audit Models for Stipend Tracker

Every ledger mutation and every receipt upload is logged for audit purposes.
This provides:
1. Traceability of how the ledger reached its current state
2. Debugging information when an upload fails
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from stipend_tracker.models.ledger import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REMOVED = "transaction_removed"
    GOAL_ADDED = "goal_added"
    GOAL_REMOVED = "goal_removed"
    WORKSHOP_TOGGLED = "workshop_toggled"
    RECEIPT_ADDED = "receipt_added"
    SETTINGS_CHANGED = "settings_changed"
    VALIDATION_FAILED = "validation_failed"

    # Receipt pipeline
    RECEIPT_UPLOADED = "receipt_uploaded"
    EXTRACTION_COMPLETED = "extraction_completed"
    EXTRACTION_FAILED = "extraction_failed"
    UPLOAD_REJECTED = "upload_rejected"

    # Storage
    STORAGE_READ_CORRUPTION = "storage_read_corruption"

    # Exports
    REPORT_EXPORTED = "report_exported"

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
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal', 'receipt')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events (e.g. one receipt upload)
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

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
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
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
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.goal_added(goal.id, goal.name, str(goal.target_amount))
        event = AuditEventBuilder.extraction_failed(filename, error, correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        category: str,
        amount: str,
        from_receipt: bool = False,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{kind.capitalize()} of {amount} added to {category}",
            details={
                "kind": kind,
                "category": category,
                "amount": amount,
                "from_receipt": from_receipt,
            },
            is_user_action=not from_receipt,
        )

    @staticmethod
    def entity_removed(entity_type: str, entity_id: str) -> AuditEvent:
        event_type = (
            AuditEventType.TRANSACTION_REMOVED
            if entity_type == "transaction"
            else AuditEventType.GOAL_REMOVED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} removed",
            is_user_action=True,
        )

    @staticmethod
    def goal_added(goal_id: str, name: str, target_amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_ADDED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal added: {name}",
            details={"name": name, "target_amount": target_amount},
            is_user_action=True,
        )

    @staticmethod
    def workshop_toggled(workshop: str, attended: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WORKSHOP_TOGGLED,
            entity_type="workshop",
            entity_id=workshop,
            description=f"Workshop {'attended' if attended else 'unmarked'}: {workshop}",
            details={"attended": attended},
            is_user_action=True,
        )

    @staticmethod
    def receipt_added(receipt_id: str, merchant: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_ADDED,
            entity_type="receipt",
            entity_id=receipt_id,
            description=f"Receipt added: {merchant} - {amount}",
            details={"merchant": merchant, "amount": amount},
        )

    @staticmethod
    def settings_changed(key: str, value: Any) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_CHANGED,
            entity_type="setting",
            entity_id=key,
            description=f"Setting changed: {key}",
            details={"value": str(value)},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(entity_type: str, field: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"Validation failed on {field}",
            details={"field": field},
            error_message=message,
            is_user_action=True,
        )

    @staticmethod
    def receipt_uploaded(
        filename: str,
        file_size: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_UPLOADED,
            entity_type="upload",
            correlation_id=correlation_id,
            description=f"Receipt uploaded: {filename}",
            details={
                "filename": filename,
                "file_size_bytes": file_size,
            },
            is_user_action=True,
        )

    @staticmethod
    def extraction_completed(
        receipt_id: str,
        transaction_id: str,
        merchant: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_COMPLETED,
            entity_type="receipt",
            entity_id=receipt_id,
            correlation_id=correlation_id,
            description=f"Receipt processed: {merchant} - {amount}",
            details={
                "merchant": merchant,
                "amount": amount,
                "transaction_id": transaction_id,
            },
        )

    @staticmethod
    def extraction_failed(
        filename: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="upload",
            correlation_id=correlation_id,
            description=f"Receipt extraction failed: {filename}",
            details={"filename": filename},
            error_message=error_message,
        )

    @staticmethod
    def upload_rejected(filename: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UPLOAD_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="upload",
            description=f"Receipt upload rejected: {filename}",
            details={"filename": filename},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def storage_read_corruption(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_CORRUPTION,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            description=f"Stored value for '{key}' is unreadable, using default",
            error_message=error_message,
        )

    @staticmethod
    def report_exported(report_format: str, filename: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            entity_type="report",
            entity_id=filename,
            description=f"{report_format.upper()} report exported: {filename}",
            details={"format": report_format, "rows": row_count},
            is_user_action=True,
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
        correlation_id: Optional[UUID] = None,
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
