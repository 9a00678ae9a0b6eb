"""
Local Storage Implementations

In-memory stores for tests and throwaway sessions, and a single-file
JSON store for running on one machine without any external service.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog

from stipend_tracker.models.audit import AuditEvent
from stipend_tracker.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    All keys in one JSON object on disk.

    Every set() rewrites the whole file through a temporary file and an
    atomic rename, so a crash mid-write leaves the previous file intact.
    An unreadable file is treated as empty rather than as an error.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._data = self._read_file()

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("storage_file_unreadable", path=str(self._path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            logger.warning("storage_file_unreadable", path=str(self._path), error="not an object")
            return {}
        # Values are kept as text; non-string values are re-encoded so
        # the ledger sees the same contract as any other backend.
        return {
            str(k): v if isinstance(v, str) else json.dumps(v)
            for k, v in raw.items()
        }

    def _write_file(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                dir=self._path.parent,
            )
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self._path}: {e}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageWriteError(f"Failed to write {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write_file()

    def keys(self) -> list[str]:
        return list(self._data)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
