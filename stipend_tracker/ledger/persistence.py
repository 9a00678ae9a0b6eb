"""
Ledger Persistence

Maps each ledger collection to one key in the key-value store and
back. Writes are full-collection overwrites. Reads never fail: a value
that is missing, is not JSON, or does not have the expected shape is
treated as absent and the default (empty collection / unset scalar)
is used instead.
"""

import json
from decimal import Decimal
from typing import Annotated, Any, Optional, TypeVar

import structlog
from pydantic import Field, TypeAdapter
from pydantic import ValidationError as SchemaError

from stipend_tracker.audit import AuditLogger
from stipend_tracker.models.ledger import WORKSHOP_CATALOG, Goal, Receipt, Transaction
from stipend_tracker.services.storage import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)

T = TypeVar("T")

TRANSACTIONS_KEY = "transactions"
GOALS_KEY = "goals"
WORKSHOPS_KEY = "workshops"
RECEIPTS_KEY = "receipts"
STIPEND_KEY = "stipend"
DISPLAY_NAME_KEY = "display_name"

_transactions = TypeAdapter(list[Transaction])
_goals = TypeAdapter(list[Goal])
_receipts = TypeAdapter(list[Receipt])
_workshops = TypeAdapter(list[str])
_stipend = TypeAdapter(Annotated[Decimal, Field(ge=0, allow_inf_nan=False)])
_display_name = TypeAdapter(Optional[str])


class LedgerPersistence:
    """Reads and writes ledger collections through a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        key_prefix: str = "stipend_tracker",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._prefix = key_prefix
        self._audit = audit_logger or AuditLogger()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def key(self, name: str) -> str:
        return f"{self._prefix}:{name}" if self._prefix else name

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, name: str, adapter: TypeAdapter[T], default: T) -> T:
        key = self.key(name)
        try:
            raw = self._store.get(key)
        except StorageError as e:
            logger.warning("storage_read_failed", key=key, error=str(e))
            return default
        if raw is None:
            return default
        try:
            return adapter.validate_python(json.loads(raw))
        except (json.JSONDecodeError, TypeError, SchemaError) as e:
            self._audit.log_storage_corruption(key, str(e)[:300])
            return default

    @staticmethod
    def _unique_by_id(items: list[Any]) -> list[Any]:
        seen: set[str] = set()
        unique = []
        for item in items:
            if item.id in seen:
                logger.warning("duplicate_id_dropped", id=item.id)
                continue
            seen.add(item.id)
            unique.append(item)
        return unique

    def load_transactions(self) -> list[Transaction]:
        return self._unique_by_id(self._read(TRANSACTIONS_KEY, _transactions, []))

    def load_goals(self) -> list[Goal]:
        return self._unique_by_id(self._read(GOALS_KEY, _goals, []))

    def load_receipts(self) -> list[Receipt]:
        return self._unique_by_id(self._read(RECEIPTS_KEY, _receipts, []))

    def load_workshops(self) -> list[str]:
        names = self._read(WORKSHOPS_KEY, _workshops, [])
        # Names outside the catalog (e.g. a renamed workshop) are dropped
        return list(dict.fromkeys(n for n in names if n in WORKSHOP_CATALOG))

    def load_stipend(self) -> Decimal:
        return self._read(STIPEND_KEY, _stipend, Decimal("0.00"))

    def load_display_name(self) -> Optional[str]:
        return self._read(DISPLAY_NAME_KEY, _display_name, None)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write(self, name: str, adapter: TypeAdapter[Any], value: Any) -> bool:
        key = self.key(name)
        payload = json.dumps(adapter.dump_python(value, mode="json"))
        try:
            self._store.set(key, payload)
            return True
        except StorageError as e:
            self._audit.log_error("storage_write_failed", str(e), details={"key": key})
            return False

    def save_transactions(self, transactions: list[Transaction]) -> bool:
        return self._write(TRANSACTIONS_KEY, _transactions, transactions)

    def save_goals(self, goals: list[Goal]) -> bool:
        return self._write(GOALS_KEY, _goals, goals)

    def save_receipts(self, receipts: list[Receipt]) -> bool:
        return self._write(RECEIPTS_KEY, _receipts, receipts)

    def save_workshops(self, workshops: list[str]) -> bool:
        return self._write(WORKSHOPS_KEY, _workshops, workshops)

    def save_stipend(self, stipend: Decimal) -> bool:
        return self._write(STIPEND_KEY, _stipend, stipend)

    def save_display_name(self, name: Optional[str]) -> bool:
        return self._write(DISPLAY_NAME_KEY, _display_name, name)
