"""
Derived Result Models

Outputs of the aggregation engine, goal tracker and recommendation
engine. These are computed from a snapshot on demand and never stored.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stipend_tracker.models.ledger import Category, Goal


class DailyAmount(BaseModel):
    """One point of a trailing daily series."""
    model_config = ConfigDict(frozen=True)

    day: date
    amount: Decimal

    @property
    def label(self) -> str:
        """Short chart label, e.g. 'Oct 19'."""
        return f"{self.day:%b} {self.day.day}"


class LedgerSummary(BaseModel):
    """Headline figures for a snapshot."""
    model_config = ConfigDict(frozen=True)

    stipend: Decimal
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transaction_count: int = Field(ge=0)
    receipt_count: int = Field(ge=0, description="Transactions carrying a receipt")
    stipend_used_percent: Optional[Decimal] = None


class GoalProgress(BaseModel):
    """
    Progress toward one goal.

    percent is raw and may exceed 100 so over-saving can be detected.
    Use display_percent for progress bars.
    """
    model_config = ConfigDict(frozen=True)

    goal: Goal
    saved: Decimal
    percent: Decimal
    contributing_transaction_ids: tuple[str, ...] = ()

    @property
    def display_percent(self) -> Decimal:
        return min(self.percent, Decimal("100"))

    @property
    def remaining(self) -> Decimal:
        return max(self.goal.target_amount - self.saved, Decimal("0.00"))

    @property
    def is_complete(self) -> bool:
        return self.saved >= self.goal.target_amount


class Severity(str, Enum):
    """Display styling hint for a recommendation. Not used by engine logic."""
    WARNING = "warning"
    TIP = "tip"
    SUCCESS = "success"


class RecommendationRule(str, Enum):
    """Recommendation rules, declared in evaluation order."""
    BUDGET_OVERRUN = "budget_overrun"
    FOOD_CONCENTRATION = "food_concentration"
    RECEIPT_COVERAGE = "receipt_coverage"
    SAVINGS_OPPORTUNITY = "savings_opportunity"
    ENGAGEMENT = "engagement"
    FALLBACK = "fallback"


class Recommendation(BaseModel):
    """One piece of spending advice."""
    model_config = ConfigDict(frozen=True)

    rule: RecommendationRule
    severity: Severity
    title: str
    message: str
    action: str


class Dashboard(BaseModel):
    """Everything the overview screen shows, computed from one snapshot."""
    model_config = ConfigDict(frozen=True)

    summary: LedgerSummary
    top_categories: tuple[tuple[Category, Decimal], ...] = ()
    daily_net: tuple[DailyAmount, ...] = ()
    goals: tuple[GoalProgress, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
