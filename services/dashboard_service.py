from dataclasses import dataclass, field
from datetime import date, timedelta

from models.transaction import Transaction
from services.transaction_service import TransactionService
from utils.constants import MONTHLY, UPCOMING_DAYS
from utils.date_helpers import today
from utils.recurrence import normalize_frequency, occurrences_in_range


@dataclass
class UpcomingItem:
    date: date
    transaction: Transaction


@dataclass
class DashboardCards:
    total_expenses: float
    monthly_recurring: float
    upcoming_total: float
    upcoming_days: int
    upcoming: list[UpcomingItem] = field(default_factory=list)


class DashboardService:
    def __init__(self, tx_service: TransactionService):
        self._tx = tx_service

    def get_cards(
        self, ref_date: date | None = None, upcoming_days: int = UPCOMING_DAYS
    ) -> DashboardCards:
        """
        total_expenses:    sum of every recorded expense amount
        monthly_recurring: sum of expenses billed monthly
        upcoming_total:    expense occurrences due in [ref, ref + upcoming_days]
        """
        ref = ref_date or today()
        expenses = self._tx.get_expenses()
        upcoming = self.get_upcoming(expenses, ref, upcoming_days)
        return DashboardCards(
            total_expenses=sum(t.amount for t in expenses),
            monthly_recurring=sum(
                t.amount for t in expenses if normalize_frequency(t.frequency) == MONTHLY
            ),
            upcoming_total=sum(item.transaction.amount for item in upcoming),
            upcoming_days=upcoming_days,
            upcoming=upcoming,
        )

    def get_upcoming(
        self, transactions: list[Transaction], ref: date, days: int
    ) -> list[UpcomingItem]:
        end = ref + timedelta(days=days)
        items = [
            UpcomingItem(d, tx)
            for tx in transactions
            for d in occurrences_in_range(tx, ref, end)
        ]
        items.sort(key=lambda i: (i.date, i.transaction.name))
        return items
