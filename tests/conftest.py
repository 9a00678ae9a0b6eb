"""Shared fixtures for the Stipend Tracker tests."""

from datetime import date

import pytest

from stipend_tracker.audit import AuditLogger
from stipend_tracker.ledger import LedgerStore
from stipend_tracker.services.storage import InMemoryAuditStorage, InMemoryKeyValueStore


TODAY = date(2026, 10, 19)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def ledger(kv_store, audit_logger):
    return LedgerStore.load(kv_store, audit_logger=audit_logger, today=lambda: TODAY)
