"""Tests for the aggregation functions."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from stipend_tracker.analytics import (
    balance,
    category_breakdown,
    receipt_count,
    stipend_used_percent,
    summarize,
    top_categories,
    total_expense,
    total_income,
    trailing_daily_net,
    trailing_daily_spend,
)
from stipend_tracker.models import Category, LedgerSnapshot, Transaction, TransactionKind


TODAY = date(2026, 10, 19)


def txn(amount, category=Category.FOOD, kind=TransactionKind.EXPENSE, day=TODAY, **extra):
    return Transaction(
        description=f"{category.value} {amount}",
        amount=Decimal(amount),
        category=category,
        kind=kind,
        date=day,
        **extra,
    )


@pytest.fixture
def snapshot():
    return LedgerSnapshot(
        stipend=Decimal("200.00"),
        transactions=(
            txn("12.50", Category.FOOD),
            txn("4.00", Category.TRANSPORTATION, day=TODAY - timedelta(days=1)),
            txn("30.00", Category.OTHER, kind=TransactionKind.INCOME, day=TODAY - timedelta(days=2)),
            txn("20.00", Category.ENTERTAINMENT, has_receipt=True, receipt_id="r1"),
            txn("7.50", Category.FOOD, day=TODAY - timedelta(days=10)),
        ),
    )


class TestTotals:
    """Tests for income, expense and balance."""

    def test_stipend_counts_once_as_income(self, snapshot):
        """Income is transactions plus the stipend."""
        assert total_income(snapshot) == Decimal("230.00")
        assert total_expense(snapshot) == Decimal("44.00")

    def test_balance_identity(self, snapshot):
        """Balance is always income minus expense."""
        assert balance(snapshot) == total_income(snapshot) - total_expense(snapshot)
        assert balance(snapshot) == Decimal("186.00")

    def test_empty_ledger(self):
        """Nothing recorded means zero everywhere."""
        empty = LedgerSnapshot()
        assert total_income(empty) == Decimal("0")
        assert total_expense(empty) == Decimal("0")
        assert balance(empty) == Decimal("0")
        assert category_breakdown(empty) == {}

    def test_receipt_count(self, snapshot):
        assert receipt_count(snapshot) == 1


class TestCategories:
    """Tests for the category breakdown and ranking."""

    def test_breakdown_sums_to_total_expense(self, snapshot):
        """Per-category totals add up to total spend and skip income."""
        breakdown = category_breakdown(snapshot)
        assert sum(breakdown.values()) == total_expense(snapshot)
        assert breakdown == {
            Category.FOOD: Decimal("20.00"),
            Category.TRANSPORTATION: Decimal("4.00"),
            Category.ENTERTAINMENT: Decimal("20.00"),
        }
        assert Category.OTHER not in breakdown

    def test_top_categories_ties_keep_first_seen(self, snapshot):
        """Ranking is by amount, ties in first-encountered order."""
        assert top_categories(snapshot) == [
            (Category.FOOD, Decimal("20.00")),
            (Category.ENTERTAINMENT, Decimal("20.00")),
            (Category.TRANSPORTATION, Decimal("4.00")),
        ]
        assert top_categories(snapshot, k=1) == [(Category.FOOD, Decimal("20.00"))]
        assert top_categories(snapshot, k=0) == []

    def test_negative_k_rejected(self, snapshot):
        with pytest.raises(ValueError):
            top_categories(snapshot, k=-1)


class TestTrailingSeries:
    """Tests for the daily series behind the trend chart."""

    def test_empty_ledger_has_seven_zero_days(self):
        """The window is always full, oldest first, ending today."""
        series = trailing_daily_net(LedgerSnapshot(), today=TODAY)
        assert len(series) == 7
        assert series[0].day == TODAY - timedelta(days=6)
        assert series[-1].day == TODAY
        assert all(point.amount == 0 for point in series)

    def test_net_per_day(self, snapshot):
        """Income adds, expenses subtract, old days fall outside."""
        series = {p.day: p.amount for p in trailing_daily_net(snapshot, today=TODAY)}
        assert series[TODAY] == Decimal("-32.50")
        assert series[TODAY - timedelta(days=1)] == Decimal("-4.00")
        assert series[TODAY - timedelta(days=2)] == Decimal("30.00")
        assert sum(series.values()) == Decimal("-6.50")

    def test_spend_per_day_ignores_income(self, snapshot):
        series = {p.day: p.amount for p in trailing_daily_spend(snapshot, today=TODAY)}
        assert series[TODAY] == Decimal("32.50")
        assert series[TODAY - timedelta(days=2)] == Decimal("0")

    def test_custom_window(self, snapshot):
        """Longer windows reach older transactions."""
        series = trailing_daily_spend(snapshot, window_days=14, today=TODAY)
        assert len(series) == 14
        assert series[3].amount == Decimal("7.50")


class TestSummary:
    """Tests for summarize()."""

    def test_summary_matches_functions(self, snapshot):
        summary = summarize(snapshot)
        assert summary.total_income == total_income(snapshot)
        assert summary.total_expense == total_expense(snapshot)
        assert summary.balance == balance(snapshot)
        assert summary.transaction_count == 5
        assert summary.receipt_count == 1
        assert summary.stipend_used_percent == Decimal("22")

    def test_no_stipend_has_no_used_percent(self):
        """Without a stipend the used share is undefined, not infinite."""
        snapshot = LedgerSnapshot(transactions=(txn("5.00"),))
        assert stipend_used_percent(snapshot) is None
        assert summarize(snapshot).stipend_used_percent is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
