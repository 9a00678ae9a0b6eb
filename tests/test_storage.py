"""Tests for the storage backends."""

import json

import pytest
from uuid import uuid4

from stipend_tracker.audit import AuditLogger
from stipend_tracker.models import AuditEventBuilder
from stipend_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageWriteError,
)
from stipend_tracker.services.storage.google_sheets import (
    MAX_CELL_CHARS,
    GoogleSheetsAuditStorage,
    GoogleSheetsKeyValueStore,
)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the Sheets stores."""

    def __init__(self, header):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(v) for v in values])
        row = len(self.rows)
        return {"updates": {"updatedRange": f"'Ledger'!A{row}:C{row}"}}

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = str(value)


class FakeSheetsClient:
    def __init__(self):
        self.ledger_sheet = FakeWorksheet(["key", "value_json", "updated_at"])
        self.audit_sheet = FakeWorksheet(["event_id", "timestamp", "event_type"])

    def get_ledger_sheet(self):
        return self.ledger_sheet

    def get_audit_sheet(self):
        return self.audit_sheet


class BrokenAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise RuntimeError("sheet unavailable")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_recent_events(self, limit=100):
        return []


class TestInMemoryKeyValueStore:
    """Tests for the dictionary-backed store."""

    def test_get_and_set(self):
        """Values come back as written; unknown keys are None."""
        store = InMemoryKeyValueStore()
        assert store.get("a") is None
        store.set("a", "[1]")
        store.set("a", "[2]")
        assert store.get("a") == "[2]"
        assert store.keys() == ["a"]

    def test_initial_data_is_copied(self):
        """The initial dict is not shared."""
        initial = {"a": "1"}
        store = InMemoryKeyValueStore(initial)
        store.set("b", "2")
        assert "b" not in initial


class TestJsonFileKeyValueStore:
    """Tests for the single-file JSON store."""

    def test_values_survive_reopen(self, tmp_path):
        """A new store on the same file sees earlier writes."""
        path = tmp_path / "ledger.json"
        store = JsonFileKeyValueStore(path)
        store.set("stipend_tracker:stipend", "\"100.00\"")
        reopened = JsonFileKeyValueStore(path)
        assert reopened.get("stipend_tracker:stipend") == "\"100.00\""
        assert json.loads(path.read_text())["stipend_tracker:stipend"] == "\"100.00\""

    def test_missing_file_is_empty(self, tmp_path):
        """A file that does not exist yet is an empty store."""
        store = JsonFileKeyValueStore(tmp_path / "nested" / "ledger.json")
        assert store.keys() == []
        store.set("k", "v")
        assert (tmp_path / "nested" / "ledger.json").exists()

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]", ""])
    def test_unreadable_file_is_empty(self, tmp_path, content):
        """A corrupt file is treated as empty, not as an error."""
        path = tmp_path / "ledger.json"
        path.write_text(content)
        assert JsonFileKeyValueStore(path).keys() == []

    def test_non_string_values_are_reencoded(self, tmp_path):
        """Hand-edited files with raw JSON values still read as text."""
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"k": [1, 2]}))
        assert JsonFileKeyValueStore(path).get("k") == "[1, 2]"

    def test_write_failure_raises_storage_error(self, tmp_path):
        """A failed write surfaces as StorageWriteError."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        store = JsonFileKeyValueStore(blocker / "ledger.json")
        with pytest.raises(StorageWriteError):
            store.set("k", "v")


class TestGoogleSheetsKeyValueStore:
    """Tests for the Sheets store against a fake worksheet."""

    def test_append_then_update(self):
        """New keys append a row, known keys update it in place."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client)
        store.set("a", "1")
        store.set("b", "2")
        store.set("a", "3")

        rows = client.ledger_sheet.rows
        assert [row[:2] for row in rows[1:]] == [["a", "3"], ["b", "2"]]
        assert store.get("a") == "3"

    def test_reads_existing_rows(self):
        """Rows already in the sheet are visible."""
        client = FakeSheetsClient()
        client.ledger_sheet.rows.append(["stipend_tracker:stipend", "\"50.00\"", "2026-10-01"])
        store = GoogleSheetsKeyValueStore(client)
        assert store.get("stipend_tracker:stipend") == "\"50.00\""
        store.set("stipend_tracker:stipend", "\"60.00\"")
        assert len(client.ledger_sheet.rows) == 2

    def test_row_position_survives_blank_and_foreign_rows(self):
        """Updates land on the row the append actually wrote."""
        client = FakeSheetsClient()
        client.ledger_sheet.rows += [["a", "1", ""], ["", "", ""], ["", "notes", ""]]
        store = GoogleSheetsKeyValueStore(client)
        store.set("b", "2")
        store.set("b", "3")

        rows = client.ledger_sheet.rows
        assert rows[4][:2] == ["b", "3"]
        assert rows[1][:2] == ["a", "1"]
        assert rows[2] == ["", "", ""]
        assert rows[3] == ["", "notes", ""]

    def test_unknown_append_position_rereads_sheet(self):
        """Without a range in the append response the next access reloads."""
        client = FakeSheetsClient()
        client.ledger_sheet.append_row = lambda values, value_input_option=None: (
            client.ledger_sheet.rows.append(list(values))
        )
        store = GoogleSheetsKeyValueStore(client)
        store.set("a", "1")
        store.set("a", "2")
        assert [row[:2] for row in client.ledger_sheet.rows[1:]] == [["a", "2"]]

    def test_oversized_value_rejected(self):
        """Values that do not fit one cell are refused before any write."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client)
        with pytest.raises(StorageWriteError):
            store.set("big", "x" * (MAX_CELL_CHARS + 1))
        assert len(client.ledger_sheet.rows) == 1


class TestAuditStorage:
    """Tests for audit storage and the audit logger."""

    def test_in_memory_by_correlation_id(self):
        """Events can be traced by correlation id."""
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        storage.append_event(AuditEventBuilder.receipt_uploaded("r.jpg", 10, correlation_id))
        storage.append_event(AuditEventBuilder.settings_changed("stipend", "10"))
        events = storage.get_events_by_correlation_id(correlation_id)
        assert len(events) == 1
        assert storage.get_recent_events(limit=1)[0].entity_id == "stipend"

    def test_sheets_audit_round_trip(self):
        """Events written as rows read back as events."""
        client = FakeSheetsClient()
        storage = GoogleSheetsAuditStorage(client)
        correlation_id = uuid4()
        event = AuditEventBuilder.extraction_failed("r.jpg", "unreadable", correlation_id)
        assert storage.append_event(event) is True

        events = storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_id for e in events] == [event.event_id]
        assert events[0].error_message == "unreadable"
        assert events[0].details == {"filename": "r.jpg"}

    def test_logger_survives_storage_failure(self):
        """Audit storage failures never break the caller."""
        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.settings_changed("stipend", "10")) is False

    def test_logger_without_storage(self):
        """Local-only logging always succeeds."""
        assert AuditLogger().log(AuditEventBuilder.settings_changed("stipend", "10")) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
