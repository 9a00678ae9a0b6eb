"""Ledger package: the store and its persistence mapping."""

from stipend_tracker.ledger.persistence import LedgerPersistence
from stipend_tracker.ledger.store import LedgerChange, LedgerStore

__all__ = ["LedgerChange", "LedgerPersistence", "LedgerStore"]
