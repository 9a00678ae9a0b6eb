"""
Audit Logger

DESIGN DECISION: Every ledger mutation and every receipt upload is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see history of their interactions

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from stipend_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from stipend_tracker.services.storage import AuditStorageInterface


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
    2. An audit storage backend, when one is configured
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
        self._logger = structlog.get_logger("stipend_tracker.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_validation_failed(self, entity_type: str, field: str, message: str) -> None:
        """Log a rejected ledger mutation."""
        self.log(AuditEventBuilder.validation_failed(entity_type, field, message))

    def log_storage_corruption(self, key: str, error_message: str) -> None:
        """Log an unreadable stored value that was replaced by its default."""
        self.log(AuditEventBuilder.storage_read_corruption(key, error_message))

    def log_receipt_uploaded(
        self,
        filename: str,
        file_size: int,
        correlation_id: UUID,
    ) -> None:
        """Log receipt upload event."""
        self.log(AuditEventBuilder.receipt_uploaded(
            filename=filename,
            file_size=file_size,
            correlation_id=correlation_id,
        ))

    def log_extraction_completed(
        self,
        receipt_id: str,
        transaction_id: str,
        merchant: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        """Log a receipt that made it into the ledger."""
        self.log(AuditEventBuilder.extraction_completed(
            receipt_id=receipt_id,
            transaction_id=transaction_id,
            merchant=merchant,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_extraction_failed(
        self,
        filename: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log extraction failure."""
        self.log(AuditEventBuilder.extraction_failed(
            filename=filename,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., receipt upload).
    Pass it through all subsequent operations.
    """
    return uuid4()
