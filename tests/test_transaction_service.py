from datetime import date, datetime

import pytest

from database.db_manager import DatabaseManager


def test_add_expense_normalises_and_persists(tx_service):
    tx = tx_service.add_expense("Rent", 1200, "housing", "MONTHLY", "2024-01-31")
    assert tx.type == "expense"
    assert tx.frequency == "monthly"
    assert tx.anchor_date == date(2024, 1, 31)
    assert tx.emoji == "🏠"
    assert tx.created_at
    assert tx_service.get_by_id(tx.id) == tx
    assert tx_service.get_expenses() == [tx]
    assert tx_service.get_income() == []


def test_add_income_defaults(tx_service):
    tx = tx_service.add_income("Paycheck", 2500, "BI_WEEKLY", datetime(2024, 1, 5, 9, 30))
    assert tx.type == "income"
    assert tx.category == "house"
    assert tx.frequency == "bi-weekly"
    assert tx.anchor_date == date(2024, 1, 5)


def test_unknown_category_gets_default_emoji(tx_service):
    tx = tx_service.add_expense("Gym", 40, "fitness", "monthly", date(2024, 1, 1))
    assert tx.emoji == "💰"
    tx = tx_service.add_expense("Gift", 40, "fitness", "one-time", date(2024, 1, 1), emoji="🎁")
    assert tx.emoji == "🎁"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"name": "R"}, "at least 2 characters"),
        ({"amount": 0}, "positive"),
        ({"amount": -5}, "positive"),
        ({"amount": "abc"}, "positive"),
        ({"frequency": "fortnightly"}, "Invalid frequency"),
        ({"due_date": "31/01/2024"}, "Invalid date"),
    ],
)
def test_validation_errors(tx_service, kwargs, message):
    args = {
        "name": "Rent",
        "amount": 100,
        "category": "housing",
        "frequency": "monthly",
        "due_date": "2024-01-01",
    }
    args.update(kwargs)
    with pytest.raises(ValueError, match=message):
        tx_service.add_expense(**args)
    assert tx_service.get_all() == []


def test_invalid_type_rejected(tx_service):
    with pytest.raises(ValueError, match="Invalid type"):
        tx_service.create("transfer", "Move", 10, "other", "monthly", date(2024, 1, 1))


def test_update_and_delete(tx_service):
    tx = tx_service.add_expense("Internet", 60, "internet", "monthly", "2024-01-15")
    updated = tx_service.update(tx.id, "Fiber", 75, "internet", "quarterly", "2024-02-01")
    assert updated.name == "Fiber"
    assert updated.amount == 75
    assert updated.frequency == "quarterly"
    assert updated.anchor_date == date(2024, 2, 1)
    assert updated.emoji == tx.emoji

    tx_service.delete(tx.id)
    assert tx_service.get_by_id(tx.id) is None
    with pytest.raises(ValueError, match="not found"):
        tx_service.delete(tx.id)
    with pytest.raises(ValueError, match="not found"):
        tx_service.update(tx.id, "Fiber", 75, "internet", "monthly", "2024-02-01")


def test_search_matches_name_and_category(tx_service):
    rent = tx_service.add_expense("Rent", 1200, "housing", "monthly", "2024-01-01")
    power = tx_service.add_expense("Power bill", 90, "utilities", "monthly", "2024-01-10")
    pay = tx_service.add_income("Paycheck", 2000, "monthly", "2024-01-01")

    assert tx_service.search("bill") == [power]
    assert tx_service.search("HOUS", "expense") == [rent]
    assert tx_service.search("", "income") == [pay]
    assert len(tx_service.search("")) == 3


def test_subscribers_are_notified_after_mutations(tx_service):
    calls = []
    unsubscribe = tx_service.subscribe(lambda: calls.append("changed"))

    tx = tx_service.add_expense("Rent", 1200, "housing", "monthly", "2024-01-01")
    tx_service.update(tx.id, "Rent", 1300, "housing", "monthly", "2024-01-01")
    tx_service.delete(tx.id)
    assert calls == ["changed"] * 3

    with pytest.raises(ValueError):
        tx_service.add_expense("X", 1, "other", "monthly", "2024-01-01")
    assert len(calls) == 3

    unsubscribe()
    tx_service.add_expense("Water", 30, "utilities", "monthly", "2024-01-01")
    assert len(calls) == 3


def test_rows_with_bad_dates_are_skipped(db, tx_dao, tx_service):
    tx_service.add_expense("Rent", 1200, "housing", "monthly", "2024-01-01")
    db.get_connection().execute(
        """INSERT INTO transactions (id, type, name, amount, category, frequency, date)
           VALUES ('bad', 'expense', 'Broken', 10, 'other', 'monthly', 'someday')"""
    )
    assert [t.name for t in tx_dao.get_all()] == ["Rent"]
    assert tx_dao.get_by_id("bad") is None
    assert "bad" in tx_dao.get_ids()


def test_settings_seeded_and_updatable(db):
    assert db.get_setting("currency_symbol") == "$"
    assert db.get_setting("upcoming_days") == "7"
    db.set_setting("currency_symbol", "€")
    assert db.get_setting("currency_symbol") == "€"
    assert db.get_setting("missing", "fallback") == "fallback"


def test_open_creates_database_in_folder(tmp_path):
    db = DatabaseManager.open(db_folder=str(tmp_path / "data"))
    try:
        assert (tmp_path / "data" / "budget_tracker.db").exists()
        db.initialize()  # idempotent
    finally:
        db.close()


def test_migrate_adds_missing_columns(tmp_path):
    path = tmp_path / "old.db"
    db = DatabaseManager(str(path))
    conn = db.get_connection()
    conn.execute(
        """CREATE TABLE transactions (
               id TEXT PRIMARY KEY, type TEXT NOT NULL, name TEXT NOT NULL,
               amount REAL NOT NULL, category TEXT NOT NULL DEFAULT '',
               frequency TEXT NOT NULL, date TEXT NOT NULL,
               created_at TEXT NOT NULL DEFAULT (datetime('now')))"""
    )
    conn.commit()
    db.initialize()
    cols = {row[1] for row in conn.execute("PRAGMA table_info(transactions)").fetchall()}
    assert {"emoji", "updated_at"} <= cols
    db.close()
