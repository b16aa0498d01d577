import logging
import uuid
from datetime import date
from typing import Callable

from database.transaction_dao import TransactionDAO
from models.category import emoji_for
from models.transaction import Transaction
from utils.constants import FREQUENCIES, TRANSACTION_TYPES
from utils.date_helpers import as_date, parse_date
from utils.recurrence import normalize_frequency

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class TransactionService:
    """CRUD over expense and income transactions.

    Views that cache transactions register a listener with `subscribe` and
    refetch when it fires; it is called after every successful mutation.
    """

    def __init__(self, tx_dao: TransactionDAO):
        self._dao = tx_dao
        self._listeners: list[Listener] = []

    # ── Change notification ──────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify_changed(self):
        for listener in list(self._listeners):
            listener()

    # ── Queries ──────────────────────────────────────────────────────────────

    def get_all(self) -> list[Transaction]:
        return self._dao.get_all()

    def get_expenses(self) -> list[Transaction]:
        return self._dao.get_by_type("expense")

    def get_income(self) -> list[Transaction]:
        return self._dao.get_by_type("income")

    def get_by_id(self, tx_id: str) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def search(self, term: str, type_: str | None = None) -> list[Transaction]:
        if not term:
            return self._dao.get_by_type(type_) if type_ else self._dao.get_all()
        return self._dao.search(term, type_)

    # ── Mutations ────────────────────────────────────────────────────────────

    def add_expense(
        self,
        name: str,
        amount: float,
        category: str,
        frequency: str,
        due_date: date | str,
        emoji: str | None = None,
    ) -> Transaction:
        return self.create("expense", name, amount, category, frequency, due_date, emoji)

    def add_income(
        self,
        name: str,
        amount: float,
        frequency: str,
        receive_date: date | str,
        category: str = "house",
        emoji: str | None = None,
    ) -> Transaction:
        return self.create("income", name, amount, category, frequency, receive_date, emoji)

    def create(
        self,
        type_: str,
        name: str,
        amount: float,
        category: str,
        frequency: str,
        anchor_date: date | str,
        emoji: str | None = None,
    ) -> Transaction:
        freq, anchor = self._validate(type_, name, amount, frequency, anchor_date)
        tx = self._dao.create(
            tx_id=uuid.uuid4().hex,
            type_=type_,
            name=name.strip(),
            amount=float(amount),
            category=category or "",
            frequency=freq,
            anchor_date=anchor,
            emoji=emoji or emoji_for(category),
        )
        logger.info("Created %s %s (%s)", type_, tx.id, tx.name)
        self.notify_changed()
        return tx

    def update(
        self,
        tx_id: str,
        name: str,
        amount: float,
        category: str,
        frequency: str,
        anchor_date: date | str,
        emoji: str | None = None,
    ) -> Transaction:
        existing = self._dao.get_by_id(tx_id)
        if existing is None:
            raise ValueError(f"Transaction with ID {tx_id} not found.")
        freq, anchor = self._validate(existing.type, name, amount, frequency, anchor_date)
        tx = self._dao.update(
            tx_id,
            name=name.strip(),
            amount=float(amount),
            category=category or "",
            frequency=freq,
            anchor_date=anchor,
            emoji=emoji or existing.emoji or emoji_for(category),
        )
        logger.info("Updated %s %s", existing.type, tx_id)
        self.notify_changed()
        return tx

    def delete(self, tx_id: str):
        if not self._dao.delete(tx_id):
            raise ValueError(f"Transaction with ID {tx_id} not found.")
        logger.info("Deleted transaction %s", tx_id)
        self.notify_changed()

    def _validate(
        self, type_: str, name: str, amount: float, frequency: str, anchor_date
    ) -> tuple[str, date]:
        if type_ not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid type: {type_}")
        if not name or len(name.strip()) < 2:
            raise ValueError("Name must be at least 2 characters.")
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            raise ValueError("Amount must be a positive number.") from None
        if not amount > 0:
            raise ValueError("Amount must be a positive number.")
        freq = normalize_frequency(frequency)
        if freq not in FREQUENCIES:
            raise ValueError(f"Invalid frequency: {frequency}")
        if isinstance(anchor_date, str):
            anchor = parse_date(anchor_date)
            if anchor is None:
                raise ValueError("Invalid date format. Use YYYY-MM-DD.")
        else:
            anchor = as_date(anchor_date)
        return freq, anchor
