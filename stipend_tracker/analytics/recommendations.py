"""
Recommendation Engine

DESIGN DECISION: Advice is a fixed, ordered list of independent rules,
not a model. Each rule looks at aggregates of one snapshot and
contributes at most one recommendation. The output keeps evaluation
order; severity is a display hint only and never re-sorts anything.

The fallback rule fires only when nothing else did.

Rules, in order:
1. Budget overrun        - spending above a share of the stipend
2. Food concentration    - Food above a share of the stipend
3. Receipt coverage      - fewer than half the transactions have receipts
4. Savings opportunity   - nothing saved yet and money left over
5. Engagement            - fewer than the target number of workshops
6. Fallback              - positive affirmation
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from stipend_tracker.analytics.aggregation import (
    category_breakdown,
    percent_of,
    total_expense,
    whole_percent,
)
from stipend_tracker.config.settings import RecommendationSettings
from stipend_tracker.models.insights import Recommendation, RecommendationRule, Severity
from stipend_tracker.models.ledger import Category, LedgerSnapshot


Rule = Callable[[LedgerSnapshot], Optional[Recommendation]]


class RecommendationEngine:
    """
    Evaluates the recommendation rules against a snapshot.

    The engine is a pure function of (snapshot, settings): calling
    evaluate() twice on the same snapshot gives the same list.
    """

    def __init__(
        self,
        settings: Optional[RecommendationSettings] = None,
        currency_symbol: str = "$",
    ):
        self._settings = settings or RecommendationSettings()
        self._currency = currency_symbol
        self._rules: tuple[Rule, ...] = (
            self._budget_overrun,
            self._food_concentration,
            self._receipt_coverage,
            self._savings_opportunity,
            self._engagement,
        )

    def _money(self, amount: Decimal) -> str:
        return f"{self._currency}{amount:.2f}"

    def evaluate(self, snapshot: LedgerSnapshot) -> list[Recommendation]:
        recommendations = []
        for rule in self._rules:
            recommendation = rule(snapshot)
            if recommendation is not None:
                recommendations.append(recommendation)

        if not recommendations:
            recommendations.append(self._fallback())
        return recommendations

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _budget_overrun(self, snapshot: LedgerSnapshot) -> Optional[Recommendation]:
        stipend = snapshot.stipend
        spent = total_expense(snapshot)
        if stipend <= 0 or spent <= stipend * self._settings.budget_alert_ratio:
            return None

        used = whole_percent(percent_of(spent, stipend))
        return Recommendation(
            rule=RecommendationRule.BUDGET_OVERRUN,
            severity=Severity.WARNING,
            title="Budget Alert",
            message=(
                f"You've used {used}% of your stipend. "
                "Consider reducing non-essential spending."
            ),
            action="Review your Food and Entertainment spending",
        )

    def _food_concentration(self, snapshot: LedgerSnapshot) -> Optional[Recommendation]:
        food = category_breakdown(snapshot).get(Category.FOOD, Decimal("0"))
        if food <= snapshot.stipend * self._settings.food_concentration_ratio:
            return None

        # food > 0 here, so total spend is non-zero
        share = whole_percent(percent_of(food, total_expense(snapshot)))
        weekly = (food / 4 * self._settings.weekly_food_budget_factor).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return Recommendation(
            rule=RecommendationRule.FOOD_CONCENTRATION,
            severity=Severity.TIP,
            title="Food Savings Opportunity",
            message=(
                f"Food is {share}% of your spending. Try meal planning or "
                f"school meal programs to save {self._currency}20-30/week."
            ),
            action=f"Set a weekly food budget of {self._currency}{weekly}",
        )

    def _receipt_coverage(self, snapshot: LedgerSnapshot) -> Optional[Recommendation]:
        total = len(snapshot.transactions)
        with_receipt = sum(1 for t in snapshot.transactions if t.has_receipt)
        if total == 0 or Decimal(with_receipt) / total >= self._settings.receipt_coverage_ratio:
            return None

        return Recommendation(
            rule=RecommendationRule.RECEIPT_COVERAGE,
            severity=Severity.TIP,
            title="Keep Your Receipts!",
            message=(
                "Upload receipts for better tracking. "
                f"Only {with_receipt} of {total} transactions have receipts."
            ),
            action="Upload receipts in the Receipts tab",
        )

    def _savings_opportunity(self, snapshot: LedgerSnapshot) -> Optional[Recommendation]:
        if any(t.category == Category.SAVINGS for t in snapshot.transactions):
            return None
        spent = total_expense(snapshot)
        if spent >= snapshot.stipend:
            return None

        remaining = snapshot.stipend - spent
        suggestion = min(self._settings.savings_suggestion_cap, remaining)
        return Recommendation(
            rule=RecommendationRule.SAVINGS_OPPORTUNITY,
            severity=Severity.SUCCESS,
            title="Great Job!",
            message=(
                f"You have {self._money(remaining)} left this month. "
                f"Consider saving at least {self._money(suggestion)} for your goals!"
            ),
            action="Move money to savings now",
        )

    def _engagement(self, snapshot: LedgerSnapshot) -> Optional[Recommendation]:
        # A brand-new user with no stipend gets the welcome message instead of a nag
        if snapshot.is_empty and snapshot.stipend == 0:
            return None
        attended = len(snapshot.workshops)
        if attended >= self._settings.workshop_target:
            return None

        return Recommendation(
            rule=RecommendationRule.ENGAGEMENT,
            severity=Severity.TIP,
            title="Build Your Skills",
            message=(
                "Attending financial workshops can unlock resources and knowledge. "
                f"You have completed {attended} workshops."
            ),
            action="Check out the Workshops tab",
        )

    def _fallback(self) -> Recommendation:
        return Recommendation(
            rule=RecommendationRule.FALLBACK,
            severity=Severity.SUCCESS,
            title="You are Doing Great!",
            message=(
                "Keep tracking your spending and working toward your goals. "
                "Small steps lead to big changes!"
            ),
            action="Keep up the good work",
        )
