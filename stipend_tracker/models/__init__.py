"""
Data Models Package

This package contains all Pydantic models used in the Stipend Tracker.
All data flowing through the system must conform to these schemas.
"""

from stipend_tracker.models.ledger import (
    WORKSHOP_CATALOG,
    Category,
    Goal,
    LedgerSnapshot,
    Receipt,
    ReceiptLineItem,
    ReceiptUpload,
    Transaction,
    TransactionKind,
    new_id,
    to_cents,
)
from stipend_tracker.models.insights import (
    Dashboard,
    DailyAmount,
    GoalProgress,
    LedgerSummary,
    Recommendation,
    RecommendationRule,
    Severity,
)
from stipend_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "WORKSHOP_CATALOG",
    "Category",
    "Goal",
    "LedgerSnapshot",
    "Receipt",
    "ReceiptLineItem",
    "ReceiptUpload",
    "Transaction",
    "TransactionKind",
    "new_id",
    "to_cents",
    # Derived results
    "Dashboard",
    "DailyAmount",
    "GoalProgress",
    "LedgerSummary",
    "Recommendation",
    "RecommendationRule",
    "Severity",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
