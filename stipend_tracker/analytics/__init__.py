"""
Analytics Package

Aggregation functions, goal tracking and recommendations. Everything
here reads a LedgerSnapshot and never mutates the ledger.
"""

from stipend_tracker.analytics.aggregation import (
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
from stipend_tracker.analytics.goals import GoalTracker
from stipend_tracker.analytics.recommendations import RecommendationEngine

__all__ = [
    "GoalTracker",
    "RecommendationEngine",
    "balance",
    "category_breakdown",
    "receipt_count",
    "stipend_used_percent",
    "summarize",
    "top_categories",
    "total_expense",
    "total_income",
    "trailing_daily_net",
    "trailing_daily_spend",
]
