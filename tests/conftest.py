from datetime import date

import pytest

from database.budget_dao import BudgetDAO
from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.user_dao import UserDAO
from models.budget import Budget
from models.transaction import Transaction
from services.backend import SQLiteAuthBackend, SQLiteDataBackend

NOW = date(2024, 3, 15)


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def user_dao(db):
    return UserDAO(db)


@pytest.fixture
def auth(db, user_dao):
    return SQLiteAuthBackend(db, user_dao)


@pytest.fixture
def data_backend(db, auth):
    return SQLiteDataBackend(TransactionDAO(db), BudgetDAO(db), auth)


@pytest.fixture
def signed_in_user(auth):
    result = auth.sign_up("alex@example.com", "secret123")
    assert result.ok
    return result.data


def make_tx(id_="t1", type_="expense", amount=10.0, category="Food",
            description="Lunch", date_="2024-03-10", user_id="u1") -> Transaction:
    return Transaction(
        id=id_, user_id=user_id, type=type_, amount=amount,
        category=category, description=description, date=date_,
    )


def make_budget(id_="b1", category="Food", amount=1000.0, period="monthly", user_id="u1") -> Budget:
    return Budget(id=id_, user_id=user_id, category=category, amount=amount, period=period)
