"""
Ledger Input Validation

DESIGN DECISION: Every ledger mutation is validated field by field, in a
fixed order, BEFORE anything changes. The first failing field wins and is
reported by name so the UI can put the message next to that input.

Validation NEVER silently fixes issues. The only normalization applied
is the harmless kind: stripping whitespace, rounding money to cents,
parsing ISO dates, and mapping category display names to the enum.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from stipend_tracker.models.ledger import (
    WORKSHOP_CATALOG,
    Category,
    TransactionKind,
    to_cents,
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """A ledger mutation was rejected because one field is invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


ISO_DATE_FORMAT = "%Y-%m-%d"


def require_text(value: Any, field: str, max_length: int = 500) -> str:
    """Non-empty text after stripping whitespace."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field.replace('_', ' ').capitalize()} is required")
    text = value.strip()
    if len(text) > max_length:
        raise ValidationError(field, f"Must be at most {max_length} characters")
    return text


def parse_amount(value: Any, field: str = "amount", allow_zero: bool = False) -> Decimal:
    """
    Parse a money amount into a Decimal rounded to cents.

    Accepts Decimal, int, float and numeric strings. Booleans, NaN and
    infinities are rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(field, "Amount is required and must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(field, "Amount must be a finite number")
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(field, f"'{value}' is not a number")
    else:
        raise ValidationError(field, "Amount must be a number")

    if not amount.is_finite():
        raise ValidationError(field, "Amount must be a finite number")

    try:
        amount = to_cents(amount)
    except InvalidOperation:
        raise ValidationError(field, "Amount is too large")
    if allow_zero:
        if amount < 0:
            raise ValidationError(field, "Amount cannot be negative")
    elif amount <= 0:
        raise ValidationError(field, "Amount must be greater than zero")
    return amount


def parse_category(value: Any, field: str = "category") -> Category:
    """Accept a Category member or its display name (case-insensitive)."""
    if isinstance(value, Category):
        return value
    if isinstance(value, str) and value.strip():
        wanted = value.strip().lower()
        for category in Category:
            if category.value.lower() == wanted or category.name.lower() == wanted:
                return category
    allowed = ", ".join(c.value for c in Category)
    raise ValidationError(field, f"Category must be one of: {allowed}")


def parse_kind(value: Any, field: str = "kind") -> TransactionKind:
    if isinstance(value, TransactionKind):
        return value
    if isinstance(value, str):
        try:
            return TransactionKind(value.strip().lower())
        except ValueError:
            pass
    raise ValidationError(field, "Type must be 'income' or 'expense'")


def parse_date(
    value: Any,
    field: str = "date",
    default: Optional[date] = None,
) -> Optional[date]:
    """
    Parse a calendar date.

    Strings must be ISO 8601 dates without a time (YYYY-MM-DD).
    None returns the default.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()
        except ValueError:
            pass
    raise ValidationError(field, f"'{value}' is not a valid date (expected YYYY-MM-DD)")


class LedgerValidator:
    """
    Validates ledger mutations.

    Each validate_* method returns the cleaned field values or raises
    ValidationError for the first invalid field.
    """

    def validate_transaction(
        self,
        description: Any,
        amount: Any,
        category: Any,
        kind: Any,
        on_date: Any,
        today: date,
    ) -> dict[str, Any]:
        """
        Check order: description, amount, category, kind, date.
        A missing date means today.
        """
        return {
            "description": require_text(description, "description"),
            "amount": parse_amount(amount),
            "category": parse_category(category),
            "kind": parse_kind(kind),
            "date": parse_date(on_date, default=today),
        }

    def validate_goal(
        self,
        name: Any,
        target_amount: Any,
        deadline: Any,
    ) -> dict[str, Any]:
        """Check order: name, target_amount, deadline (optional)."""
        return {
            "name": require_text(name, "name", max_length=200),
            "target_amount": parse_amount(target_amount, field="target_amount"),
            "deadline": parse_date(deadline, field="deadline"),
        }

    def validate_workshop(self, name: Any) -> str:
        if isinstance(name, str) and name.strip() in WORKSHOP_CATALOG:
            return name.strip()
        raise ValidationError("workshop", f"Unknown workshop: {name!r}")

    def validate_stipend(self, amount: Any) -> Decimal:
        return parse_amount(amount, field="stipend", allow_zero=True)

    def validate_display_name(self, name: Any) -> Optional[str]:
        if name is None:
            return None
        return require_text(name, "display_name", max_length=100)
