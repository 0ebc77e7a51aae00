import logging
import threading
from datetime import date
from typing import Callable

from models.budget import Budget, BudgetStatus
from models.dashboard import DashboardData
from models.transaction import Transaction
from services.aggregation import budget_status, compute_dashboard
from services.backend import DataBackend, OperationResult
from utils.date_helpers import today

logger = logging.getLogger(__name__)

StoreListener = Callable[[str], None]   # receives a refresh scope: 'transaction' | 'budget' | 'full'


class FinancialDataStore:
    """In-memory copy of one user's transactions and budgets.

    Created at sign-in and closed at sign-out. Every mutation goes through
    the DataBackend first; the cache only ever reflects confirmed backend
    state. Methods are safe to call from worker threads: mutations on the
    same record are serialised, and a load that has been superseded by a
    newer one is discarded instead of overwriting it.
    """

    def __init__(self, backend: DataBackend, user_id: str, clock: Callable[[], date] = today):
        self._backend = backend
        self.user_id = user_id
        self._clock = clock

        self._transactions: list[Transaction] = []
        self._budgets: list[Budget] = []
        self._dashboard = compute_dashboard([], clock())
        self.loading = True
        self.load_error: str | None = None

        self._closed = False
        self._load_gen = 0
        self._cache_lock = threading.RLock()
        self._record_locks: dict[tuple[str, str], threading.Lock] = {}
        self._record_locks_guard = threading.Lock()
        self._listeners: list[StoreListener] = []

    # ── Read access ──────────────────────────────────────────────────────────

    @property
    def transactions(self) -> list[Transaction]:
        with self._cache_lock:
            return list(self._transactions)

    @property
    def budgets(self) -> list[Budget]:
        with self._cache_lock:
            return list(self._budgets)

    @property
    def dashboard(self) -> DashboardData:
        with self._cache_lock:
            return self._dashboard

    @property
    def closed(self) -> bool:
        return self._closed

    def budget_statuses(self) -> list[BudgetStatus]:
        with self._cache_lock:
            txs = list(self._transactions)
            budgets = list(self._budgets)
        now = self._clock()
        return [budget_status(b, txs, now) for b in budgets]

    def subscribe(self, callback: StoreListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def close(self):
        with self._cache_lock:
            self._closed = True
            self._transactions = []
            self._budgets = []
            self._dashboard = compute_dashboard([], self._clock())
        with self._record_locks_guard:
            self._record_locks.clear()
        self._listeners.clear()
        logger.debug("Closed store for user %s", self.user_id)

    # ── Load ─────────────────────────────────────────────────────────────────

    def load(self) -> OperationResult[None]:
        """Fetch everything for the owner, replacing the cache.

        Failures are kept in `load_error` so the view can offer a retry; the
        lists for any failed fetch stay empty.
        """
        with self._cache_lock:
            self._load_gen += 1
            gen = self._load_gen
            self.loading = True

        tx_result = self._backend.transactions.select_for_owner(self.user_id)
        budget_result = self._backend.budgets.select_for_owner(self.user_id)
        error = tx_result.error or budget_result.error

        with self._cache_lock:
            if self._closed or gen != self._load_gen:
                logger.debug("Discarding superseded load %d for user %s", gen, self.user_id)
                return OperationResult(error=error)
            self._transactions = list(tx_result.data or []) if tx_result.ok else []
            self._budgets = list(budget_result.data or []) if budget_result.ok else []
            self._recompute()
            self.load_error = error.message if error else None
            self.loading = False

        if error:
            logger.warning("Load for user %s failed: %s", self.user_id, error.message)
        else:
            logger.info(
                "Loaded %d transactions and %d budgets for user %s",
                len(self._transactions), len(self._budgets), self.user_id,
            )
        self._notify("full")
        return OperationResult(error=error)

    # ── Transactions ─────────────────────────────────────────────────────────

    def add_transaction(self, data: dict) -> OperationResult[Transaction]:
        result = self._backend.transactions.insert(dict(data, user_id=self.user_id))
        if self._apply(result, lambda tx: self._transactions.insert(0, tx), recompute=True):
            self._notify("transaction")
        return result

    def update_transaction(self, tx_id: str, patch: dict) -> OperationResult[Transaction]:
        with self._record_lock("transaction", tx_id):
            result = self._backend.transactions.update(tx_id, patch)
            applied = self._apply(
                result, lambda tx: _replace_by_id(self._transactions, tx), recompute=True
            )
        if applied:
            self._notify("transaction")
        return result

    def delete_transaction(self, tx_id: str) -> OperationResult[None]:
        with self._record_lock("transaction", tx_id):
            result = self._backend.transactions.delete(tx_id)
            applied = self._apply(
                result, lambda _: _remove_by_id(self._transactions, tx_id),
                recompute=True, require_data=False,
            )
        if result.ok:
            self._drop_record_lock("transaction", tx_id)
        if applied:
            self._notify("transaction")
        return result

    # ── Budgets ──────────────────────────────────────────────────────────────

    def add_budget(self, data: dict) -> OperationResult[Budget]:
        result = self._backend.budgets.insert(dict(data, user_id=self.user_id))
        if self._apply(result, self._budgets.append):
            self._notify("budget")
        return result

    def update_budget(self, budget_id: str, patch: dict) -> OperationResult[Budget]:
        with self._record_lock("budget", budget_id):
            result = self._backend.budgets.update(budget_id, patch)
            applied = self._apply(result, lambda b: _replace_by_id(self._budgets, b))
        if applied:
            self._notify("budget")
        return result

    def delete_budget(self, budget_id: str) -> OperationResult[None]:
        with self._record_lock("budget", budget_id):
            result = self._backend.budgets.delete(budget_id)
            applied = self._apply(
                result, lambda _: _remove_by_id(self._budgets, budget_id), require_data=False
            )
        if result.ok:
            self._drop_record_lock("budget", budget_id)
        if applied:
            self._notify("budget")
        return result

    # ── Internals ────────────────────────────────────────────────────────────

    def _apply(self, result: OperationResult, change, recompute: bool = False,
               require_data: bool = True) -> bool:
        """Apply a confirmed backend result to the cache. Returns True if the cache changed."""
        if not result.ok:
            logger.warning("Backend rejected change for user %s: %s", self.user_id, result.error.message)
            return False
        if require_data and result.data is None:
            return False
        with self._cache_lock:
            if self._closed:
                return False
            change(result.data)
            if recompute:
                self._recompute()
        return True

    def _recompute(self):
        self._dashboard = compute_dashboard(self._transactions, self._clock())

    def _record_lock(self, kind: str, record_id: str) -> threading.Lock:
        with self._record_locks_guard:
            return self._record_locks.setdefault((kind, record_id), threading.Lock())

    def _drop_record_lock(self, kind: str, record_id: str):
        with self._record_locks_guard:
            self._record_locks.pop((kind, record_id), None)

    def _notify(self, scope: str):
        for cb in list(self._listeners):
            try:
                cb(scope)
            except Exception:
                logger.exception("Store listener failed")


def _replace_by_id(records: list, record) -> None:
    for i, existing in enumerate(records):
        if existing.id == record.id:
            records[i] = record


def _remove_by_id(records: list, record_id: str) -> None:
    records[:] = [r for r in records if r.id != record_id]
