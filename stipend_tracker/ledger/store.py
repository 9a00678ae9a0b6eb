"""
Ledger Store

The single source of truth for transactions, goals, receipts, workshop
attendance and the two user scalars (stipend, display name).

Every mutation follows the same pattern:
1. Validate (first invalid field raises ValidationError, nothing changes)
2. Mutate the in-memory collection
3. Persist the whole affected collection
4. Audit and notify subscribers

Downstream engines never see the live collections. They get an
immutable LedgerSnapshot.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

import structlog

from stipend_tracker.audit import AuditLogger
from stipend_tracker.ledger.persistence import LedgerPersistence
from stipend_tracker.models.audit import AuditEventBuilder
from stipend_tracker.models.ledger import (
    Category,
    Goal,
    LedgerSnapshot,
    Receipt,
    Transaction,
    TransactionKind,
    new_id,
)
from stipend_tracker.services.storage import InMemoryKeyValueStore, KeyValueStore
from stipend_tracker.validation import LedgerValidator, ValidationError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LedgerChange:
    """What a subscriber is told after a successful mutation."""
    collection: str
    action: str
    entity_id: Optional[str] = None


Listener = Callable[[LedgerChange], None]


class LedgerStore:
    """
    Owns the ledger collections and is the only thing allowed to mutate them.

    Usage:
        ledger = LedgerStore.load(JsonFileKeyValueStore(path))
        ledger.set_stipend("100")
        ledger.add_transaction("Lunch", "12.50", "Food")
        snapshot = ledger.snapshot()
    """

    def __init__(
        self,
        persistence: Optional[LedgerPersistence] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[LedgerValidator] = None,
        today: Callable[[], date] = date.today,
    ):
        self._audit = audit_logger or AuditLogger()
        self._persistence = persistence or LedgerPersistence(
            InMemoryKeyValueStore(), audit_logger=self._audit
        )
        self._validator = validator or LedgerValidator()
        self._today = today

        self._transactions: list[Transaction] = []
        self._goals: list[Goal] = []
        self._receipts: list[Receipt] = []
        self._workshops: list[str] = []
        self._stipend = Decimal("0.00")
        self._display_name: Optional[str] = None

        self._listeners: list[Listener] = []

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        key_prefix: str = "stipend_tracker",
        audit_logger: Optional[AuditLogger] = None,
        **kwargs: Any,
    ) -> "LedgerStore":
        """Build a ledger from whatever the store holds. Unreadable keys start empty."""
        audit_logger = audit_logger or AuditLogger()
        persistence = LedgerPersistence(store, key_prefix=key_prefix, audit_logger=audit_logger)
        ledger = cls(persistence=persistence, audit_logger=audit_logger, **kwargs)
        ledger._transactions = persistence.load_transactions()
        ledger._goals = persistence.load_goals()
        ledger._receipts = persistence.load_receipts()
        ledger._workshops = persistence.load_workshops()
        ledger._stipend = persistence.load_stipend()
        ledger._display_name = persistence.load_display_name()
        logger.info(
            "ledger_loaded",
            transactions=len(ledger._transactions),
            goals=len(ledger._goals),
            receipts=len(ledger._receipts),
        )
        return ledger

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, collection: str, action: str, entity_id: Optional[str] = None) -> None:
        change = LedgerChange(collection, action, entity_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                # A broken view must not undo a committed mutation
                self._audit.log_error(
                    "listener_failed",
                    str(e),
                    details={"collection": collection, "action": action},
                )

    def _log_rejection(self, entity_type: str, error: ValidationError) -> None:
        self._audit.log_validation_failed(entity_type, error.field, error.message)

    def _fresh_id(self, taken: set[str]) -> str:
        new = new_id()
        while new in taken:
            new = new_id()
        return new

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _build_transaction(
        self,
        description: Any,
        amount: Any,
        category: Any,
        kind: Any,
        on_date: Any,
        has_receipt: bool,
        receipt_id: Optional[str],
        goal_id: Optional[str],
    ) -> Transaction:
        fields = self._validator.validate_transaction(
            description, amount, category, kind, on_date, today=self._today()
        )
        if goal_id is not None:
            if not any(g.id == goal_id for g in self._goals):
                raise ValidationError("goal_id", f"No goal with id {goal_id}")
            if fields["category"] != Category.SAVINGS:
                raise ValidationError("goal_id", "Only Savings transactions can be linked to a goal")
        return Transaction(
            id=self._fresh_id({t.id for t in self._transactions}),
            has_receipt=has_receipt,
            receipt_id=receipt_id,
            goal_id=goal_id,
            **fields,
        )

    def add_transaction(
        self,
        description: Any,
        amount: Any,
        category: Any,
        kind: Any = TransactionKind.EXPENSE,
        date: Any = None,
        has_receipt: bool = False,
        receipt_id: Optional[str] = None,
        goal_id: Optional[str] = None,
    ) -> Transaction:
        """
        Validate and append a transaction.

        Fields are checked in order description, amount, category, kind,
        date, goal_id. A missing date means today.

        Raises:
            ValidationError: naming the first invalid field
        """
        try:
            transaction = self._build_transaction(
                description, amount, category, kind, date, has_receipt, receipt_id, goal_id
            )
        except ValidationError as e:
            self._log_rejection("transaction", e)
            raise

        self._transactions.append(transaction)
        self._persistence.save_transactions(self._transactions)
        self._audit.log(AuditEventBuilder.transaction_added(
            transaction.id,
            transaction.kind.value,
            transaction.category.value,
            str(transaction.amount),
        ))
        self._notify("transactions", "added", transaction.id)
        return transaction

    def remove_transaction(self, transaction_id: str) -> bool:
        """Remove by id. Unknown ids are a no-op and return False."""
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                del self._transactions[index]
                break
        else:
            return False

        self._persistence.save_transactions(self._transactions)
        self._audit.log(AuditEventBuilder.entity_removed("transaction", transaction_id))
        self._notify("transactions", "removed", transaction_id)
        return True

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._transactions if t.id == transaction_id), None)

    def transactions(self, newest_first: bool = False) -> list[Transaction]:
        items = list(self._transactions)
        if newest_first:
            items.reverse()
        return items

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(self, name: Any, target_amount: Any, deadline: Any = None) -> Goal:
        """
        Validate and append a savings goal.

        Raises:
            ValidationError: naming the first invalid field (name, target_amount, deadline)
        """
        try:
            fields = self._validator.validate_goal(name, target_amount, deadline)
        except ValidationError as e:
            self._log_rejection("goal", e)
            raise

        goal = Goal(id=self._fresh_id({g.id for g in self._goals}), **fields)
        self._goals.append(goal)
        self._persistence.save_goals(self._goals)
        self._audit.log(AuditEventBuilder.goal_added(goal.id, goal.name, str(goal.target_amount)))
        self._notify("goals", "added", goal.id)
        return goal

    def remove_goal(self, goal_id: str) -> bool:
        """
        Remove by id. Unknown ids are a no-op and return False.

        Transactions linked to the goal keep their goal_id; they simply
        stop counting toward anything.
        """
        remaining = [g for g in self._goals if g.id != goal_id]
        if len(remaining) == len(self._goals):
            return False
        self._goals = remaining
        self._persistence.save_goals(self._goals)
        self._audit.log(AuditEventBuilder.entity_removed("goal", goal_id))
        self._notify("goals", "removed", goal_id)
        return True

    def goals(self) -> list[Goal]:
        return list(self._goals)

    # ------------------------------------------------------------------
    # Workshops
    # ------------------------------------------------------------------

    def toggle_workshop(self, name: Any) -> bool:
        """
        Flip attendance for a catalog workshop.

        Returns the new state (True = attended).
        """
        try:
            workshop = self._validator.validate_workshop(name)
        except ValidationError as e:
            self._log_rejection("workshop", e)
            raise

        if workshop in self._workshops:
            self._workshops.remove(workshop)
            attended = False
        else:
            self._workshops.append(workshop)
            attended = True

        self._persistence.save_workshops(self._workshops)
        self._audit.log(AuditEventBuilder.workshop_toggled(workshop, attended))
        self._notify("workshops", "attended" if attended else "unmarked", workshop)
        return attended

    def attended_workshops(self) -> list[str]:
        return list(self._workshops)

    # ------------------------------------------------------------------
    # Receipts
    # ------------------------------------------------------------------

    def _check_new_receipt(self, receipt: Receipt) -> None:
        if not isinstance(receipt, Receipt):
            raise ValidationError("receipt", "Expected a Receipt record")
        if any(r.id == receipt.id for r in self._receipts):
            raise ValidationError("id", f"Receipt {receipt.id} already exists")

    def add_receipt(self, receipt: Receipt) -> Receipt:
        """Append a receipt record without creating a transaction."""
        try:
            self._check_new_receipt(receipt)
        except ValidationError as e:
            self._log_rejection("receipt", e)
            raise

        self._receipts.append(receipt)
        self._persistence.save_receipts(self._receipts)
        self._audit.log(AuditEventBuilder.receipt_added(receipt.id, receipt.merchant, str(receipt.amount)))
        self._notify("receipts", "added", receipt.id)
        return receipt

    def record_receipt_expense(
        self,
        receipt: Receipt,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Append a receipt and the expense transaction derived from it.

        Both records are validated before either is written, so a bad
        receipt leaves the ledger untouched.
        """
        try:
            self._check_new_receipt(receipt)
            transaction = self._build_transaction(
                description or f"{receipt.merchant} - Auto from receipt",
                receipt.amount,
                receipt.category,
                TransactionKind.EXPENSE,
                receipt.date,
                has_receipt=True,
                receipt_id=receipt.id,
                goal_id=None,
            )
        except ValidationError as e:
            self._log_rejection("receipt", e)
            raise

        self._receipts.append(receipt)
        self._transactions.append(transaction)
        self._persistence.save_receipts(self._receipts)
        self._persistence.save_transactions(self._transactions)
        self._audit.log(AuditEventBuilder.receipt_added(receipt.id, receipt.merchant, str(receipt.amount)))
        self._audit.log(AuditEventBuilder.transaction_added(
            transaction.id,
            transaction.kind.value,
            transaction.category.value,
            str(transaction.amount),
            from_receipt=True,
        ))
        self._notify("receipts", "added", receipt.id)
        self._notify("transactions", "added", transaction.id)
        return transaction

    def receipts(self) -> list[Receipt]:
        return list(self._receipts)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    @property
    def stipend(self) -> Decimal:
        return self._stipend

    def set_stipend(self, amount: Any) -> Decimal:
        """Set the recurring stipend. Zero is allowed, negative is not."""
        try:
            stipend = self._validator.validate_stipend(amount)
        except ValidationError as e:
            self._log_rejection("setting", e)
            raise

        self._stipend = stipend
        self._persistence.save_stipend(stipend)
        self._audit.log(AuditEventBuilder.settings_changed("stipend", stipend))
        self._notify("stipend", "updated")
        return stipend

    @property
    def display_name(self) -> Optional[str]:
        return self._display_name

    def set_display_name(self, name: Optional[str]) -> Optional[str]:
        try:
            display_name = self._validator.validate_display_name(name)
        except ValidationError as e:
            self._log_rejection("setting", e)
            raise

        self._display_name = display_name
        self._persistence.save_display_name(display_name)
        self._audit.log(AuditEventBuilder.settings_changed("display_name", display_name))
        self._notify("display_name", "updated")
        return display_name

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Immutable copy of the current state for the analytics engines."""
        return LedgerSnapshot(
            transactions=tuple(self._transactions),
            goals=tuple(self._goals),
            receipts=tuple(self._receipts),
            workshops=tuple(self._workshops),
            stipend=self._stipend,
            display_name=self._display_name,
        )
