from dataclasses import dataclass, field
from datetime import date

from models.transaction import Transaction
from services.transaction_service import TransactionService
from utils.date_helpers import add_months, format_month, month_bounds, month_grid, today
from utils.recurrence import aggregate_by_bucket, bucket_day, bucket_month, filter_occurring_on


@dataclass
class CalendarDay:
    date: date
    in_month: bool
    is_today: bool
    income_total: float = 0.0
    expense_total: float = 0.0

    @property
    def has_transactions(self) -> bool:
        return self.income_total > 0 or self.expense_total > 0

    @property
    def net(self) -> float:
        return self.income_total - self.expense_total


@dataclass
class DayDetail:
    date: date
    income: list[Transaction] = field(default_factory=list)
    expenses: list[Transaction] = field(default_factory=list)

    @property
    def income_total(self) -> float:
        return sum(t.amount for t in self.income)

    @property
    def expense_total(self) -> float:
        return sum(t.amount for t in self.expenses)

    @property
    def net(self) -> float:
        return self.income_total - self.expense_total

    @property
    def is_empty(self) -> bool:
        return not self.income and not self.expenses


class CalendarService:
    def __init__(self, tx_service: TransactionService):
        self._tx = tx_service

    def _load(self, search: str | None) -> tuple[list[Transaction], list[Transaction]]:
        income = self._tx.get_income()
        expenses = self._tx.get_expenses()
        if search:
            needle = search.lower()
            income = [t for t in income if _matches(t, needle)]
            expenses = [t for t in expenses if _matches(t, needle)]
        return income, expenses

    def get_month_grid(
        self, year: int, month: int, search: str | None = None, ref_date: date | None = None
    ) -> list[list[CalendarDay]]:
        """Sunday-first weeks for the month, each day carrying its totals."""
        ref = ref_date or today()
        weeks = month_grid(year, month)
        grid_start, grid_end = weeks[0][0], weeks[-1][-1]
        income, expenses = self._load(search)
        income_by_day = aggregate_by_bucket(income, bucket_day, grid_start, grid_end)
        expense_by_day = aggregate_by_bucket(expenses, bucket_day, grid_start, grid_end)

        result = []
        for week in weeks:
            row = []
            for d in week:
                key = bucket_day(d)
                row.append(CalendarDay(
                    date=d,
                    in_month=d.month == month,
                    is_today=d == ref,
                    income_total=income_by_day.get(key, 0.0),
                    expense_total=expense_by_day.get(key, 0.0),
                ))
            result.append(row)
        return result

    def get_day_detail(self, target: date, search: str | None = None) -> DayDetail:
        income, expenses = self._load(search)
        return DayDetail(
            date=target,
            income=filter_occurring_on(income, target),
            expenses=filter_occurring_on(expenses, target),
        )

    def get_month_totals(self, year: int, month: int, search: str | None = None) -> dict:
        """Income and expense totals counting every occurrence inside the month."""
        first, last = month_bounds(year, month)
        key = bucket_month(first)
        income, expenses = self._load(search)
        inc = aggregate_by_bucket(income, bucket_month, first, last).get(key, 0.0)
        exp = aggregate_by_bucket(expenses, bucket_month, first, last).get(key, 0.0)
        return {"income": inc, "expense": exp, "net": inc - exp}

    def navigation_months(self, center: date | None = None, span: int = 12) -> list[str]:
        """YYYY-MM strings from `span` months before center to `span` after."""
        base = (center or today()).replace(day=1)
        return [format_month(add_months(base, i)) for i in range(-span, span + 1)]


def _matches(tx: Transaction, needle: str) -> bool:
    return needle in tx.name.lower() or needle in tx.category.lower()
