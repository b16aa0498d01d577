from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str               # 'income' | 'expense'
    name: str
    amount: float
    category: str
    frequency: str          # one of utils.constants.FREQUENCIES
    anchor_date: date       # due date (expense) or receive date (income)
    emoji: str = ""
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    @property
    def signed_amount(self) -> float:
        """Amount as it affects the balance: income positive, expense negative."""
        return self.amount if self.is_income else -self.amount
