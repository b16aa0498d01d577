from datetime import date

import pytest

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from models.transaction import Transaction
from services.transaction_service import TransactionService


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def tx_service(tx_dao):
    return TransactionService(tx_dao)


def make_tx(
    frequency: str,
    anchor: date,
    amount: float = 100.0,
    type_: str = "expense",
    name: str = "Rent",
    category: str = "housing",
    tx_id: str = "t1",
) -> Transaction:
    return Transaction(
        id=tx_id,
        type=type_,
        name=name,
        amount=amount,
        category=category,
        frequency=frequency,
        anchor_date=anchor,
        emoji="🏠",
    )
