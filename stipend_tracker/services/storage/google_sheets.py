"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a hosted backend because:
1. The user can look at their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

The ledger writes whole collections under a handful of keys, so the
sheet is simply one row per key: [key, value_json, updated_at].

TRADEOFFS:
- A cell holds at most 50,000 characters, which caps each collection
  (fine for personal use, a few hundred transactions)
- No transactions (each key is written independently)
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
from gspread.utils import a1_to_rowcol
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from stipend_tracker.config import get_settings
from stipend_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from stipend_tracker.models.ledger import utcnow
from stipend_tracker.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    StorageConnectionError,
    StorageError,
    StorageWriteError,
)


# Column mappings for the Ledger sheet
LEDGER_COLUMNS = [
    "key",
    "value_json",
    "updated_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

MAX_CELL_CHARS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet

    def get_ledger_sheet(self) -> gspread.Worksheet:
        """Get or create the Ledger worksheet."""
        return self._get_or_create_sheet(
            self._settings.ledger_sheet_name, LEDGER_COLUMNS, rows=100
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _appended_row(response) -> Optional[int]:
    """Row number written by append_row, from e.g. "'Ledger'!A7:C7"."""
    try:
        updated_range = response["updates"]["updatedRange"]
    except (KeyError, TypeError):
        return None
    first_cell = updated_range.split("!")[-1].split(":")[0]
    row, _ = a1_to_rowcol(first_cell)
    return row


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the ledger key-value store.

    Values are read once into a local cache and written through on
    every set().
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._cache: Optional[dict[str, str]] = None
        self._row_index: dict[str, int] = {}

    def _load(self) -> dict[str, str]:
        if self._cache is None:
            try:
                sheet = self._client.get_ledger_sheet()
                all_rows = sheet.get_all_values()
            except StorageError:
                raise
            except Exception as e:
                raise StorageError(f"Failed to read ledger sheet: {e}")

            self._cache = {}
            # Row 1 is the header; sheet rows are 1-based
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0]:
                    self._cache[row[0]] = row[1] if len(row) > 1 else ""
                    self._row_index[row[0]] = idx
        return self._cache

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        if len(value) > MAX_CELL_CHARS:
            raise StorageWriteError(
                f"Value for '{key}' is {len(value)} characters; Sheets cells hold {MAX_CELL_CHARS}"
            )
        cache = self._load()
        self._write_row(key, value)
        cache[key] = value

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_row(self, key: str, value: str) -> None:
        try:
            sheet = self._client.get_ledger_sheet()
            updated_at = utcnow().isoformat()
            if key in self._row_index:
                row = self._row_index[key]
                sheet.update_cell(row, 2, value)
                sheet.update_cell(row, 3, updated_at)
            else:
                response = sheet.append_row([key, value, updated_at], value_input_option="RAW")
                row = _appended_row(response)
                if row is None:
                    # Unknown position; re-read the sheet on next access
                    self._cache = None
                    self._row_index = {}
                else:
                    self._row_index[key] = row
        except Exception as e:
            raise StorageWriteError(f"Failed to write '{key}': {e}")

    def keys(self) -> list[str]:
        return list(self._load())


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _all_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, IndexError):
                continue  # Skip malformed rows
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageWriteError(f"Failed to write audit event: {e}")

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            events = [e for e in self._all_events() if e.correlation_id == correlation_id]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            events = self._all_events()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
