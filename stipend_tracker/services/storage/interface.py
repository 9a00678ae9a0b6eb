"""
Abstract Storage Interface

DESIGN DECISION: The ledger only needs a key-value store.
Values are JSON text, keys are plain strings. This allows us to:
1. Swap a local JSON file for Google Sheets (or anything else) later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from the storage implementation

The interface is intentionally tiny - get and set, nothing more.
Interpreting (and distrusting) what comes back is the ledger's job.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from stipend_tracker.models.audit import AuditEvent


class KeyValueStore(ABC):
    """
    Abstract interface for the ledger's persistent store.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw stored text for a key.

        Returns:
            The stored value, or None if the key was never set.
            The value is NOT guaranteed to be valid JSON.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under a key.

        Raises:
            StorageError: If the write fails
        """
        pass

    def keys(self) -> list[str]:
        """List stored keys. Optional for backends."""
        raise NotImplementedError


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one receipt upload).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written."""
    pass
