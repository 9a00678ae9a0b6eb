"""
Aggregation Engine

Pure functions over a LedgerSnapshot. Nothing here is cached and
nothing mutates the snapshot; every figure is recomputed on each call.

The stipend counts as income exactly once per computation. It is not
a transaction.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from stipend_tracker.models.insights import DailyAmount, LedgerSummary
from stipend_tracker.models.ledger import Category, LedgerSnapshot, Transaction


ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def total_income(snapshot: LedgerSnapshot) -> Decimal:
    """Income transactions plus the configured stipend."""
    income = sum((t.amount for t in snapshot.transactions if t.is_income), ZERO)
    return income + snapshot.stipend


def total_expense(snapshot: LedgerSnapshot) -> Decimal:
    return sum((t.amount for t in snapshot.transactions if t.is_expense), ZERO)


def balance(snapshot: LedgerSnapshot) -> Decimal:
    return total_income(snapshot) - total_expense(snapshot)


def category_breakdown(snapshot: LedgerSnapshot) -> dict[Category, Decimal]:
    """
    Expense total per category, in first-encountered order.

    Only categories with at least one expense appear.
    """
    breakdown: dict[Category, Decimal] = {}
    for transaction in snapshot.transactions:
        if transaction.is_expense:
            breakdown[transaction.category] = (
                breakdown.get(transaction.category, ZERO) + transaction.amount
            )
    return breakdown


def top_categories(snapshot: LedgerSnapshot, k: int = 3) -> list[tuple[Category, Decimal]]:
    """Largest expense categories first; ties keep first-encountered order."""
    if k < 0:
        raise ValueError("k must be non-negative")
    ranked = sorted(category_breakdown(snapshot).items(), key=lambda item: item[1], reverse=True)
    return ranked[:k]


def _trailing_series(
    snapshot: LedgerSnapshot,
    window_days: int,
    today: Optional[date],
    contribution: Callable[[Transaction], Decimal],
) -> list[DailyAmount]:
    if window_days < 0:
        raise ValueError("window_days must be non-negative")
    end = today or date.today()
    start = end - timedelta(days=window_days - 1)

    per_day: dict[date, Decimal] = {}
    for transaction in snapshot.transactions:
        if start <= transaction.date <= end:
            per_day[transaction.date] = per_day.get(transaction.date, ZERO) + contribution(transaction)

    return [
        DailyAmount(day=day, amount=per_day.get(day, ZERO))
        for day in (start + timedelta(days=offset) for offset in range(window_days))
    ]


def trailing_daily_net(
    snapshot: LedgerSnapshot,
    window_days: int = 7,
    today: Optional[date] = None,
) -> list[DailyAmount]:
    """
    Income minus expenses for each of the last window_days days.

    Always exactly window_days entries, oldest first, ending today
    (inclusive). Days without transactions are zero.
    """
    return _trailing_series(snapshot, window_days, today, lambda t: t.signed_amount)


def trailing_daily_spend(
    snapshot: LedgerSnapshot,
    window_days: int = 7,
    today: Optional[date] = None,
) -> list[DailyAmount]:
    """Same shape as trailing_daily_net but counts expenses only."""
    return _trailing_series(
        snapshot, window_days, today, lambda t: t.amount if t.is_expense else ZERO
    )


def percent_of(part: Decimal, whole: Decimal) -> Optional[Decimal]:
    """part / whole as a percentage, None when whole is zero."""
    if whole == 0:
        return None
    return part / whole * HUNDRED


def whole_percent(value: Decimal) -> Decimal:
    """Round a percentage to the nearest whole percent (half-up)."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def stipend_used_percent(snapshot: LedgerSnapshot) -> Optional[Decimal]:
    """Share of the stipend already spent, None when no stipend is set."""
    return percent_of(total_expense(snapshot), snapshot.stipend)


def receipt_count(snapshot: LedgerSnapshot) -> int:
    return sum(1 for t in snapshot.transactions if t.has_receipt)


def summarize(snapshot: LedgerSnapshot) -> LedgerSummary:
    income = total_income(snapshot)
    expense = total_expense(snapshot)
    return LedgerSummary(
        stipend=snapshot.stipend,
        total_income=income,
        total_expense=expense,
        balance=income - expense,
        transaction_count=len(snapshot.transactions),
        receipt_count=receipt_count(snapshot),
        stipend_used_percent=stipend_used_percent(snapshot),
    )
