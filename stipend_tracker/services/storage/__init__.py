"""
Storage Services Package

Provides the abstract key-value interface the ledger persists through,
plus concrete implementations: in-memory, a local JSON file, and
Google Sheets.
"""

from stipend_tracker.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    StorageConnectionError,
    StorageError,
    StorageWriteError,
)
from stipend_tracker.services.storage.local import (
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    "StorageWriteError",
    # Local implementations
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
