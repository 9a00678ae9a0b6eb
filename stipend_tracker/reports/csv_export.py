"""
Tabular (CSV) Export

One row per transaction in ledger order. The header is a plain literal
row; every data cell is quoted so descriptions can contain commas.
"""

import csv
import io
import re
from datetime import date
from typing import Optional

from stipend_tracker.models.ledger import LedgerSnapshot


CSV_HEADERS: tuple[str, ...] = (
    "Date",
    "Type",
    "Category",
    "Description",
    "Amount",
    "Has Receipt",
)

DEFAULT_OWNER_NAME = "Student"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\-]+")


def safe_owner_name(display_name: Optional[str]) -> str:
    """Display name reduced to something usable inside a filename."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (display_name or "").strip()).strip("_")
    return cleaned or DEFAULT_OWNER_NAME


def transactions_to_csv(snapshot: LedgerSnapshot) -> str:
    """
    Render all transactions as CSV text.

    Rows are separated by a single newline with no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for t in snapshot.transactions:
        writer.writerow([
            t.date.isoformat(),
            t.kind.value,
            t.category.value,
            t.description,
            f"{t.amount:.2f}",
            "Yes" if t.has_receipt else "No",
        ])

    lines = [",".join(CSV_HEADERS)]
    body = buffer.getvalue().rstrip("\n")
    if body:
        lines.append(body)
    return "\n".join(lines)


def csv_filename(display_name: Optional[str], today: date) -> str:
    return f"{safe_owner_name(display_name)}_transactions_{today.isoformat()}.csv"
