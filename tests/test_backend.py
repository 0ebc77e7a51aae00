from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from services.backend import SQLiteDataBackend

TX = {"type": "expense", "amount": 42.0, "category": "Food",
      "description": "Groceries", "date": "2024-03-10"}


def test_insert_and_select_for_owner(data_backend, signed_in_user):
    result = data_backend.transactions.insert(dict(TX, user_id=signed_in_user.id))

    assert result.ok
    tx = result.data
    assert len(tx.id) == 32
    assert tx.user_id == signed_in_user.id
    assert tx.created_at

    rows = data_backend.transactions.select_for_owner(signed_in_user.id)
    assert [t.id for t in rows.data] == [tx.id]


def test_select_orders_newest_date_first(data_backend, signed_in_user):
    for d in ("2024-01-05", "2024-03-01", "2024-02-10"):
        data_backend.transactions.insert(dict(TX, date=d))
    rows = data_backend.transactions.select_for_owner(signed_in_user.id).data
    assert [t.date for t in rows] == ["2024-03-01", "2024-02-10", "2024-01-05"]


def test_insert_for_another_owner_is_rejected(data_backend, signed_in_user):
    result = data_backend.transactions.insert(dict(TX, user_id="someone-else"))
    assert result.error.code == "rls"
    assert "row-level security" in result.error.message
    assert data_backend.transactions.select_for_owner(signed_in_user.id).data == []


def test_operations_require_a_session(data_backend):
    assert data_backend.transactions.insert(TX).error.message == "Not authenticated"
    assert data_backend.budgets.delete("x").error.code == "unauthenticated"
    assert data_backend.transactions.select_for_owner("anyone").data == []


def test_update_patches_only_given_fields(data_backend, signed_in_user):
    tx = data_backend.transactions.insert(TX).data

    result = data_backend.transactions.update(tx.id, {"amount": 10.0, "id": "hijack"})

    assert result.ok
    assert result.data.id == tx.id
    assert result.data.amount == 10.0
    assert result.data.description == "Groceries"


def test_update_missing_record(data_backend, signed_in_user):
    result = data_backend.budgets.update("does-not-exist", {"amount": 5.0})
    assert result.error.code == "not_found"


def test_delete_missing_record_succeeds(data_backend, signed_in_user):
    assert data_backend.transactions.delete("does-not-exist").ok


def test_constraint_violation_becomes_error_value(data_backend, signed_in_user):
    result = data_backend.transactions.insert(dict(TX, amount=0))
    assert result.error.code == "constraint"

    result = data_backend.budgets.insert({"category": "Food", "amount": 100.0, "period": "weekly"})
    assert result.error.code == "constraint"


def test_rows_are_scoped_to_their_owner(db, auth, data_backend):
    alice = auth.sign_up("alice@example.com", "password1").data
    data_backend.transactions.insert(TX)
    data_backend.budgets.insert({"category": "Food", "amount": 100.0, "period": "monthly"})

    bob = auth.sign_up("bob@example.com", "password2").data
    assert data_backend.transactions.select_for_owner(bob.id).data == []
    assert data_backend.budgets.select_for_owner(bob.id).data == []
    # another user's id is invisible, not just filtered
    assert data_backend.transactions.select_for_owner(alice.id).data == []

    auth.sign_in("alice@example.com", "password1")
    assert len(data_backend.transactions.select_for_owner(alice.id).data) == 1


def test_budget_round_trip_through_dao(db, signed_in_user, auth):
    backend = SQLiteDataBackend(TransactionDAO(db), BudgetDAO(db), auth)
    first = backend.budgets.insert({"category": "Food", "amount": 500.0, "period": "monthly"}).data
    second = backend.budgets.insert({"category": "Bills", "amount": 200.0, "period": "yearly"}).data

    rows = backend.budgets.select_for_owner(signed_in_user.id).data
    assert [b.id for b in rows] == [first.id, second.id]

    backend.budgets.delete(first.id)
    assert [b.id for b in backend.budgets.select_for_owner(signed_in_user.id).data] == [second.id]
