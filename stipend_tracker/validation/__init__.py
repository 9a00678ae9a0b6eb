"""Input validation package."""

from stipend_tracker.validation.validator import (
    LedgerError,
    LedgerValidator,
    ValidationError,
    parse_amount,
    parse_category,
    parse_date,
    parse_kind,
    require_text,
)

__all__ = [
    "LedgerError",
    "LedgerValidator",
    "ValidationError",
    "parse_amount",
    "parse_category",
    "parse_date",
    "parse_kind",
    "require_text",
]
