"""
Goal Tracker

A goal's saved amount is derived, never stored. It is the sum of the
Savings transactions linked to the goal.

Linking rules:
1. A transaction with goal_id counts toward that goal only.
2. A transaction without goal_id counts toward every goal whose name
   appears in its description (case-sensitive substring), when
   match_by_name is on. This keeps older data, recorded before explicit
   links existed, working.
"""

from decimal import Decimal
from typing import Optional

from stipend_tracker.models.insights import GoalProgress
from stipend_tracker.models.ledger import Category, Goal, LedgerSnapshot, Transaction


ZERO = Decimal("0.00")


class GoalTracker:
    """Computes progress for each goal in a snapshot."""

    def __init__(self, match_by_name: bool = True):
        self._match_by_name = match_by_name

    def is_linked(self, transaction: Transaction, goal: Goal) -> bool:
        if transaction.category != Category.SAVINGS:
            return False
        if transaction.goal_id is not None:
            return transaction.goal_id == goal.id
        return self._match_by_name and goal.name in transaction.description

    def progress_for_goal(self, snapshot: LedgerSnapshot, goal: Goal) -> GoalProgress:
        linked = [t for t in snapshot.transactions if self.is_linked(t, goal)]
        saved = sum((t.amount for t in linked), ZERO)
        return GoalProgress(
            goal=goal,
            saved=saved,
            # Deliberately uncapped: over-saving shows up as > 100
            percent=saved / goal.target_amount * Decimal("100"),
            contributing_transaction_ids=tuple(t.id for t in linked),
        )

    def progress(self, snapshot: LedgerSnapshot) -> list[GoalProgress]:
        """One entry per goal, in the order the goals were created."""
        return [self.progress_for_goal(snapshot, goal) for goal in snapshot.goals]

    def find(self, snapshot: LedgerSnapshot, goal_id: str) -> Optional[GoalProgress]:
        goal = next((g for g in snapshot.goals if g.id == goal_id), None)
        return self.progress_for_goal(snapshot, goal) if goal else None
