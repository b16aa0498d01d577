import csv
import logging
from pathlib import Path

from matplotlib.figure import Figure

from models.transaction import Transaction
from services.transaction_service import TransactionService
from utils.constants import FREQUENCY_LABELS
from utils.date_helpers import format_long_date, parse_date
from utils.recurrence import normalize_frequency

logger = logging.getLogger(__name__)

SORT_KEYS = ("name", "amount", "category", "frequency", "anchor_date", "created_at")

CATEGORY_COLORS = [
    "#F44336", "#FF9800", "#9C27B0", "#2196F3", "#00BCD4",
    "#4CAF50", "#FF5722", "#009688", "#8BC34A", "#888888",
]


class ReportService:
    def __init__(self, tx_service: TransactionService):
        self._tx = tx_service

    def _load(self, type_: str) -> list[Transaction]:
        return self._tx.get_income() if type_ == "income" else self._tx.get_expenses()

    def get_rows(
        self,
        type_: str = "expense",
        search: str | None = None,
        sort_key: str | None = None,
        descending: bool = False,
    ) -> list[Transaction]:
        """Transactions matching search (name, category, amount, frequency), sorted."""
        rows = self._load(type_)
        if search:
            needle = search.lower()
            rows = [
                t for t in rows
                if needle in t.name.lower()
                or needle in t.category.lower()
                or needle in f"{t.amount:g}"
                or needle in t.frequency.lower()
            ]
        if sort_key:
            if sort_key not in SORT_KEYS:
                raise ValueError(f"Cannot sort by {sort_key}")
            rows = sorted(rows, key=lambda t: _sort_value(t, sort_key), reverse=descending)
        return rows

    def export_rows(self, transactions: list[Transaction]) -> list[list[str]]:
        """Return rows suitable for CSV export, header first."""
        header = ["Name", "Amount", "Category", "Frequency", "Due Date", "Created At"]
        rows = [header]
        for tx in transactions:
            created = parse_date(tx.created_at)
            freq = normalize_frequency(tx.frequency)
            rows.append([
                tx.name,
                f"{tx.amount:.2f}",
                f"{tx.emoji} {tx.category}".strip(),
                FREQUENCY_LABELS.get(freq, tx.frequency),
                format_long_date(tx.anchor_date),
                format_long_date(created) if created else tx.created_at,
            ])
        return rows

    def export_csv(self, path: str | Path, transactions: list[Transaction]) -> Path:
        path = Path(path)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerows(self.export_rows(transactions))
        logger.info("Exported %d transactions to %s", len(transactions), path)
        return path

    def get_category_breakdown(self, type_: str = "expense") -> list[dict]:
        """Return [{category, amount, percentage}, ...] sorted by amount, largest first."""
        by_category: dict[str, float] = {}
        for tx in self._load(type_):
            by_category[tx.category] = by_category.get(tx.category, 0.0) + tx.amount
        total = sum(by_category.values())
        breakdown = [
            {
                "category": category,
                "amount": amount,
                "percentage": (amount / total) * 100 if total > 0 else 0.0,
            }
            for category, amount in by_category.items()
        ]
        breakdown.sort(key=lambda d: d["amount"], reverse=True)
        return breakdown

    def render_category_chart(self, path: str | Path, type_: str = "expense") -> Path:
        """Draw the category breakdown as a pie chart; format follows the file suffix."""
        path = Path(path)
        breakdown = self.get_category_breakdown(type_)
        fig = Figure(figsize=(6, 4), dpi=100, tight_layout=True)
        ax = fig.add_subplot(111)

        if not breakdown:
            ax.text(0.5, 0.5, f"No {type_} data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            ax.set_axis_off()
        else:
            colors = [CATEGORY_COLORS[i % len(CATEGORY_COLORS)] for i in range(len(breakdown))]
            ax.pie(
                [d["amount"] for d in breakdown],
                labels=[f"{d['category']} ({d['percentage']:.0f}%)" for d in breakdown],
                colors=colors,
                startangle=90,
            )
            ax.set_aspect("equal")
            ax.set_title(f"{type_.capitalize()} Breakdown")

        fig.savefig(path)
        logger.info("Wrote category chart to %s", path)
        return path

    def render_forecast_chart(self, path: str | Path, forecast: list[dict]) -> Path:
        """Grouped income/expense bars for a monthly forecast series."""
        path = Path(path)
        fig = Figure(figsize=(8, 3), dpi=100, tight_layout=True)
        ax = fig.add_subplot(111)

        if not forecast:
            ax.text(0.5, 0.5, "No data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
        else:
            labels = [d["month"] for d in forecast]
            incomes = [d["income"] for d in forecast]
            expenses = [d["expense"] for d in forecast]
            x = list(range(len(labels)))
            w = 0.35
            ax.bar([i - w / 2 for i in x], incomes, w, color="#4CAF50", label="Income")
            ax.bar([i + w / 2 for i in x], expenses, w, color="#F44336", label="Expense")
            ax.set_xticks(x)
            ax.set_xticklabels(labels, rotation=45 if len(labels) > 12 else 0, ha="right")
            ax.yaxis.set_major_formatter(
                lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
            )
            ax.legend(loc="upper left", fontsize=8)

        fig.savefig(path)
        logger.info("Wrote forecast chart to %s", path)
        return path


def _sort_value(tx: Transaction, key: str):
    if key == "created_at":
        return tx.created_at or ""
    value = getattr(tx, key)
    return value.lower() if isinstance(value, str) else value
