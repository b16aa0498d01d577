import logging
from typing import Optional

from database.db_manager import DatabaseManager
from models.transaction import Transaction
from utils.date_helpers import format_date, parse_date

logger = logging.getLogger(__name__)


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Optional[Transaction]:
        anchor = parse_date(row["date"])
        if anchor is None:
            logger.warning(
                "Skipping transaction %s with unparseable date %r", row["id"], row["date"]
            )
            return None
        return Transaction(
            id=row["id"],
            type=row["type"],
            name=row["name"],
            amount=row["amount"],
            category=row["category"],
            frequency=row["frequency"],
            anchor_date=anchor,
            emoji=row["emoji"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _to_models(self, rows) -> list[Transaction]:
        models = (self._row_to_model(r) for r in rows)
        return [m for m in models if m is not None]

    def get_all(self) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transactions ORDER BY date ASC, created_at ASC, id ASC"
        ).fetchall()
        return self._to_models(rows)

    def get_by_type(self, type_: str) -> list[Transaction]:
        """All transactions of one kind ('income' | 'expense'), oldest first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM transactions WHERE type = ?
               ORDER BY date ASC, created_at ASC, id ASC""",
            (type_,),
        ).fetchall()
        return self._to_models(rows)

    def get_by_id(self, tx_id: str) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM transactions WHERE id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_ids(self) -> set[str]:
        conn = self._db.get_connection()
        return {r["id"] for r in conn.execute("SELECT id FROM transactions").fetchall()}

    def search(self, term: str, type_: str | None = None) -> list[Transaction]:
        conn = self._db.get_connection()
        sql = "SELECT * FROM transactions WHERE (name LIKE ? OR category LIKE ?)"
        params: list = [f"%{term}%", f"%{term}%"]
        if type_:
            sql += " AND type = ?"
            params.append(type_)
        sql += " ORDER BY date ASC, id ASC"
        return self._to_models(conn.execute(sql, params).fetchall())

    def create(
        self,
        tx_id: str,
        type_: str,
        name: str,
        amount: float,
        category: str,
        frequency: str,
        anchor_date,
        emoji: str = "",
        created_at: str | None = None,
        commit: bool = True,
    ) -> Transaction:
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO transactions
               (id, type, name, amount, category, frequency, date, emoji,
                created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?,
                       COALESCE(?, datetime('now')), datetime('now'))""",
            (
                tx_id, type_, name, amount, category, frequency,
                format_date(anchor_date), emoji, created_at,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(tx_id)

    def update(
        self,
        tx_id: str,
        name: str,
        amount: float,
        category: str,
        frequency: str,
        anchor_date,
        emoji: str,
    ) -> Optional[Transaction]:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE transactions
               SET name=?, amount=?, category=?, frequency=?, date=?, emoji=?,
                   updated_at=datetime('now')
               WHERE id=?""",
            (name, amount, category, frequency, format_date(anchor_date), emoji, tx_id),
        )
        conn.commit()
        return self.get_by_id(tx_id)

    def delete(self, tx_id: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()
        return cursor.rowcount > 0

    def delete_all(self, commit: bool = True):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions")
        if commit:
            conn.commit()
