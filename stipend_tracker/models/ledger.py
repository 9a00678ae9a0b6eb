"""
Core Data Models for Stipend Tracker

These models define the strict schemas for everything the ledger owns.
They are designed to:
1. Enforce type safety at runtime
2. Be immutable once created (records are only ever added or removed)
3. Be JSON-serializable for the key-value store
4. Be shared read-only with the analytics engines via snapshots

DESIGN DECISION: Money is always Decimal with two decimal places.
Floats never enter the ledger.
"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


CENT = Decimal("0.01")


def new_id() -> str:
    """Create a fresh identifier for a ledger record."""
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_cents(value: Decimal) -> Decimal:
    """Quantize an amount to two decimal places (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Spending categories.

    The values are the display names, so they can go straight into
    exports without a lookup table.
    """
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    SCHOOL_SUPPLIES = "School Supplies"
    CLOTHING = "Clothing"
    PERSONAL_CARE = "Personal Care"
    ENTERTAINMENT = "Entertainment"
    SAVINGS = "Savings"
    OTHER = "Other"


class TransactionKind(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


WORKSHOP_CATALOG: tuple[str, ...] = (
    "Money Foundations & Budget Setup",
    "Goal Setting & Saving Smart",
    "Banking & Credit",
    "Budgeting for School, Fun & Life",
    "Cost of College & Scholarships",
    "Smart Spending & Mental Health",
)


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable. The only lifecycle change is removal
    from the ledger by id.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        description="Unique transaction ID"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount in currency units, always positive"
    )
    kind: TransactionKind = TransactionKind.EXPENSE
    category: Category
    date: date
    has_receipt: bool = False
    receipt_id: Optional[str] = Field(
        default=None,
        description="Receipt this transaction was created from"
    )
    goal_id: Optional[str] = Field(
        default=None,
        description="Savings goal this transaction contributes to"
    )

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with expenses negative, for net computations."""
        return self.amount if self.is_income else -self.amount


class Goal(BaseModel):
    """
    A savings goal.

    The saved amount is NOT stored here. It is derived from Savings
    transactions by the goal tracker.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., gt=0, decimal_places=2)
    deadline: Optional[date] = None
    created_at: datetime = Field(default_factory=utcnow)


class ReceiptLineItem(BaseModel):
    """One line detected on a receipt."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)


class Receipt(BaseModel):
    """
    A receipt produced by the ingestion pipeline.

    Optionally linked 1:1 to a transaction through Transaction.receipt_id.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    merchant: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    date: date
    category: Category
    source_reference: str = Field(
        ...,
        description="Opaque handle to the uploaded file (name, path or URL)"
    )
    line_items: tuple[ReceiptLineItem, ...] = ()
    uploaded_at: datetime = Field(default_factory=utcnow)


class ReceiptUpload(BaseModel):
    """
    A file handed to the receipt pipeline.

    The pipeline never looks inside content; it only forwards it to the
    extractor.
    """
    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1, max_length=255)
    content: bytes = Field(..., repr=False)
    mime_type: str = "image/jpeg"
    uploaded_at: datetime = Field(default_factory=utcnow)

    @field_validator('mime_type')
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        """Only allow image types."""
        if not v.lower().startswith("image/"):
            raise ValueError(f"Unsupported file type: {v}. Please upload an image of the receipt")
        return v.lower()

    @property
    def size_bytes(self) -> int:
        return len(self.content)


# =============================================================================
# SNAPSHOT
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    Immutable read-only copy of the ledger.

    Every analytics component works from one of these and never
    touches the live store.
    """
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    goals: tuple[Goal, ...] = ()
    receipts: tuple[Receipt, ...] = ()
    workshops: tuple[str, ...] = ()
    stipend: Decimal = Field(default=Decimal("0.00"), ge=0)
    display_name: Optional[str] = None
    taken_at: datetime = Field(default_factory=utcnow)

    @property
    def is_empty(self) -> bool:
        return not (self.transactions or self.goals or self.receipts or self.workshops)

    def transactions_newest_first(self) -> list[Transaction]:
        """Insertion order reversed (the usual display order)."""
        return list(reversed(self.transactions))
