import threading
from dataclasses import replace

from conftest import NOW, make_budget, make_tx
from services.backend import DataBackend, OperationResult, RecordTable
from services.financial_store import FinancialDataStore


class FakeTable(RecordTable):
    def __init__(self, rows=None, factory=None):
        self.rows = list(rows or [])
        self.factory = factory
        self.fail_with: str | None = None
        self.calls: list[tuple] = []

    def _failed(self, call):
        self.calls.append(call)
        if self.fail_with:
            return OperationResult.failure(self.fail_with)
        return None

    def insert(self, record):
        err = self._failed(("insert", record))
        if err:
            return err
        row = self.factory(f"new{len(self.calls)}", record)
        self.rows.append(row)
        return OperationResult.success(row)

    def update(self, record_id, patch):
        err = self._failed(("update", record_id, patch))
        if err:
            return err
        for i, row in enumerate(self.rows):
            if row.id == record_id:
                self.rows[i] = replace(row, **patch)
                return OperationResult.success(self.rows[i])
        return OperationResult.failure("Record not found", "not_found")

    def delete(self, record_id):
        err = self._failed(("delete", record_id))
        if err:
            return err
        self.rows = [r for r in self.rows if r.id != record_id]
        return OperationResult.success(None)

    def select_for_owner(self, owner_id):
        err = self._failed(("select", owner_id))
        if err:
            return err
        return OperationResult.success([r for r in self.rows if r.user_id == owner_id])


class FakeBackend(DataBackend):
    def __init__(self, transactions=(), budgets=()):
        self.transactions = FakeTable(
            transactions,
            lambda id_, r: make_tx(id_, r["type"], r["amount"], r["category"],
                                   r["description"], r["date"], r["user_id"]),
        )
        self.budgets = FakeTable(
            budgets,
            lambda id_, r: make_budget(id_, r["category"], r["amount"], r["period"], r["user_id"]),
        )


NEW_TX = {"type": "expense", "amount": 12.5, "category": "Food",
          "description": "Snack", "date": "2024-03-14"}


def _store(backend=None):
    backend = backend or FakeBackend(
        transactions=[
            make_tx("t1", "income", 5000.0, "Salary", date_="2024-03-01"),
            make_tx("t2", "expense", 2000.0, "Food", date_="2024-02-20"),
        ],
        budgets=[make_budget("b1")],
    )
    store = FinancialDataStore(backend, "u1", clock=lambda: NOW)
    return store, backend


def test_load_fills_cache_and_dashboard():
    store, _ = _store()
    scopes = []
    store.subscribe(scopes.append)

    result = store.load()

    assert result.ok
    assert [t.id for t in store.transactions] == ["t1", "t2"]
    assert [b.id for b in store.budgets] == ["b1"]
    assert store.dashboard.balance == 3000.0
    assert store.load_error is None
    assert not store.loading
    assert scopes == ["full"]


def test_load_failure_is_surfaced():
    store, backend = _store()
    backend.transactions.fail_with = "connection refused"

    result = store.load()

    assert not result.ok
    assert store.load_error == "connection refused"
    assert store.transactions == []
    assert [b.id for b in store.budgets] == ["b1"]


def test_retry_after_failed_load_clears_error():
    store, backend = _store()
    backend.budgets.fail_with = "timeout"
    store.load()
    backend.budgets.fail_with = None

    store.load()

    assert store.load_error is None
    assert len(store.budgets) == 1


def test_add_transaction_prepends_and_recomputes():
    store, backend = _store()
    store.load()

    result = store.add_transaction(NEW_TX)

    assert result.ok
    assert store.transactions[0].id == result.data.id
    assert store.transactions[0].user_id == "u1"
    assert backend.transactions.calls[-1][1]["user_id"] == "u1"
    assert store.dashboard.monthly_expenses == 12.5
    assert store.dashboard.recent_transactions[0].description == "Snack"


def test_failed_add_leaves_cache_untouched():
    store, backend = _store()
    store.load()
    scopes = []
    store.subscribe(scopes.append)
    backend.transactions.fail_with = "new row violates row-level security policy"

    result = store.add_transaction(NEW_TX)

    assert result.error.message == "new row violates row-level security policy"
    assert [t.id for t in store.transactions] == ["t1", "t2"]
    assert scopes == []


def test_update_transaction_replaces_record_in_place():
    store, _ = _store()
    store.load()

    result = store.update_transaction("t2", {"amount": 50.0, "category": "Bills"})

    assert result.ok
    assert [t.id for t in store.transactions] == ["t1", "t2"]
    assert store.transactions[1].amount == 50.0
    assert store.transactions[1].category == "Bills"
    assert store.dashboard.balance == 4950.0


def test_update_missing_transaction_reports_not_found():
    store, _ = _store()
    store.load()
    result = store.update_transaction("nope", {"amount": 1.0})
    assert result.error.code == "not_found"
    assert len(store.transactions) == 2


def test_delete_transaction_removes_record():
    store, _ = _store()
    store.load()
    scopes = []
    store.subscribe(scopes.append)

    assert store.delete_transaction("t1").ok

    assert [t.id for t in store.transactions] == ["t2"]
    assert store.dashboard.total_income == 0.0
    assert scopes == ["transaction"]


def test_delete_of_missing_id_is_not_an_error():
    store, _ = _store()
    store.load()
    assert store.delete_transaction("missing").ok
    assert len(store.transactions) == 2


def test_budget_mutations():
    store, _ = _store()
    store.load()

    added = store.add_budget({"category": "Bills", "amount": 300.0, "period": "yearly"})
    assert added.ok
    assert [b.category for b in store.budgets] == ["Food", "Bills"]

    store.update_budget(added.data.id, {"amount": 350.0})
    assert store.budgets[1].amount == 350.0

    store.delete_budget("b1")
    assert [b.category for b in store.budgets] == ["Bills"]


def test_budget_statuses_use_cached_transactions():
    store, _ = _store()
    store.load()
    store.add_transaction(dict(NEW_TX, amount=1500.0))

    [status] = store.budget_statuses()

    assert status.budget.id == "b1"
    assert status.spent == 1500.0
    assert status.is_over_budget


def test_superseded_load_is_discarded():
    store, backend = _store()
    gate = threading.Event()
    entered = threading.Event()
    original = backend.transactions.select_for_owner

    def slow_select(owner_id):
        entered.set()
        gate.wait(timeout=5)
        return OperationResult.success([make_tx("stale", user_id=owner_id)])

    backend.transactions.select_for_owner = slow_select
    first = threading.Thread(target=store.load)
    first.start()
    assert entered.wait(timeout=5)

    backend.transactions.select_for_owner = original
    store.load()
    gate.set()
    first.join(timeout=5)

    assert [t.id for t in store.transactions] == ["t1", "t2"]


def test_close_clears_cache_and_ignores_late_results():
    store, _ = _store()
    store.load()
    scopes = []
    store.subscribe(scopes.append)

    store.close()
    store.add_transaction(NEW_TX)

    assert store.closed
    assert store.transactions == []
    assert store.budgets == []
    assert scopes == []


def test_listener_errors_do_not_break_mutations():
    store, _ = _store()
    store.load()

    def broken(_scope):
        raise RuntimeError("boom")

    store.subscribe(broken)
    assert store.add_transaction(NEW_TX).ok
    assert len(store.transactions) == 3


def test_record_locks_are_released_after_delete_and_close():
    store, _ = _store()
    store.load()

    store.update_transaction("t2", {"amount": 1.0})
    store.delete_transaction("t2")
    store.delete_budget("b1")
    assert ("transaction", "t2") not in store._record_locks
    assert ("budget", "b1") not in store._record_locks

    store.update_transaction("t1", {"amount": 2.0})
    assert ("transaction", "t1") in store._record_locks
    store.close()
    assert store._record_locks == {}


def test_failed_delete_keeps_record_lock():
    store, backend = _store()
    store.load()
    backend.transactions.fail_with = "timeout"

    assert not store.delete_transaction("t1").ok
    assert ("transaction", "t1") in store._record_locks
    assert len(store.transactions) == 2
