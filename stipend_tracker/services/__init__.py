"""Services package."""

from stipend_tracker.services.extraction import (
    ExtractedReceipt,
    ExtractionError,
    ExtractionFailedError,
    ReceiptExtractor,
    SimulatedReceiptExtractor,
)
from stipend_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageConnectionError,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Receipt extraction
    "ExtractedReceipt",
    "ExtractionError",
    "ExtractionFailedError",
    "ReceiptExtractor",
    "SimulatedReceiptExtractor",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "StorageConnectionError",
    "StorageError",
    "StorageWriteError",
]
