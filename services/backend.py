"""Backend collaborator contracts and their local SQLite implementation.

The app talks to persistence and identity only through AuthBackend and
DataBackend. Every operation returns an OperationResult carrying either the
resulting record(s) or a BackendError; nothing here raises to the caller.

The SQLite implementation enforces row-level scoping itself: the data
backend only ever reads or writes rows owned by the signed-in user.
"""
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import bcrypt

from database.budget_dao import BudgetDAO
from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.user_dao import UserDAO
from models.budget import Budget
from models.transaction import Transaction
from models.user import User
from utils.constants import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass
class BackendError:
    message: str
    code: str = ""

    def __str__(self) -> str:
        return self.message


@dataclass
class OperationResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, code: str = "") -> "OperationResult[T]":
        return cls(error=BackendError(message, code))


AuthListener = Callable[[Optional[User]], None]


# ── Contracts ─────────────────────────────────────────────────────────────────

class AuthBackend(ABC):
    @abstractmethod
    def sign_in(self, email: str, password: str) -> OperationResult[User]: ...

    @abstractmethod
    def sign_up(self, email: str, password: str) -> OperationResult[User]: ...

    @abstractmethod
    def sign_out(self) -> None: ...

    @abstractmethod
    def get_session(self) -> Optional[User]:
        """The persisted signed-in user, if any."""

    @abstractmethod
    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a session-change listener; returns an unsubscribe callable."""


class RecordTable(ABC, Generic[T]):
    """Table-like access to one record kind."""

    @abstractmethod
    def insert(self, record: dict) -> OperationResult[T]: ...

    @abstractmethod
    def update(self, record_id: str, patch: dict) -> OperationResult[T]: ...

    @abstractmethod
    def delete(self, record_id: str) -> OperationResult[None]: ...

    @abstractmethod
    def select_for_owner(self, owner_id: str) -> OperationResult[list[T]]: ...


class DataBackend(ABC):
    transactions: RecordTable[Transaction]
    budgets: RecordTable[Budget]


# ── SQLite implementation ─────────────────────────────────────────────────────

def _guarded(action: str, fn: Callable[[], OperationResult]) -> OperationResult:
    """Run fn, turning any exception into an error value."""
    try:
        return fn()
    except sqlite3.IntegrityError as e:
        logger.warning("%s rejected by store: %s", action, e)
        return OperationResult.failure(str(e), "constraint")
    except sqlite3.Error as e:
        logger.error("%s failed: %s", action, e)
        return OperationResult.failure(str(e), "db_error")
    except Exception:
        logger.exception("%s failed unexpectedly", action)
        return OperationResult.failure(UNEXPECTED_ERROR_MESSAGE, "unexpected")


class SQLiteAuthBackend(AuthBackend):
    """Email/password identity with bcrypt hashes; the session survives restarts."""

    SESSION_KEY = "session_user_id"

    def __init__(self, db: DatabaseManager, user_dao: UserDAO):
        self._db = db
        self._dao = user_dao
        self._current: Optional[User] = None
        self._restored = False
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()

    def sign_in(self, email: str, password: str) -> OperationResult[User]:
        email = _normalize_email(email)
        if not email or not password:
            return OperationResult.failure("Email and password are required", "validation")

        def run():
            found = self._dao.get_credentials(email)
            if found is None or not bcrypt.checkpw(password.encode("utf-8"), found[1].encode("utf-8")):
                logger.info("Failed sign-in for %s", email)
                return OperationResult.failure("Invalid login credentials", "invalid_credentials")
            self._set_session(found[0])
            logger.info("Signed in %s", email)
            return OperationResult.success(found[0])

        return _guarded("sign_in", run)

    def sign_up(self, email: str, password: str) -> OperationResult[User]:
        email = _normalize_email(email)
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            return OperationResult.failure("Unable to validate email address: invalid format", "validation")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            return OperationResult.failure(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters", "weak_password"
            )

        def run():
            if self._dao.get_credentials(email) is not None:
                return OperationResult.failure("User already registered", "user_exists")
            hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
            user = self._dao.create(email, hashed)
            self._set_session(user)
            logger.info("Registered %s", email)
            return OperationResult.success(user)

        return _guarded("sign_up", run)

    def sign_out(self) -> None:
        previous = self._current
        try:
            self._db.set_setting(self.SESSION_KEY, "")
        except sqlite3.Error as e:
            logger.error("Could not clear persisted session: %s", e)
        self._current = None
        self._restored = True
        if previous:
            logger.info("Signed out %s", previous.email)
        self._notify(None)

    def get_session(self) -> Optional[User]:
        if not self._restored:
            self._restored = True
            try:
                user_id = self._db.get_setting(self.SESSION_KEY, "")
                self._current = self._dao.get_by_id(user_id) if user_id else None
            except sqlite3.Error as e:
                logger.error("Session restore failed: %s", e)
                self._current = None
        return self._current

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _set_session(self, user: User):
        self._db.set_setting(self.SESSION_KEY, user.id)
        self._current = user
        self._restored = True
        self._notify(user)

    def _notify(self, user: Optional[User]):
        with self._lock:
            listeners = list(self._listeners)
        for cb in listeners:
            cb(user)


class _SQLiteTable(RecordTable[T]):
    def __init__(self, name: str, dao, auth: AuthBackend, create: Callable[[str, dict], Any]):
        self._name = name
        self._dao = dao
        self._auth = auth
        self._create = create

    def _owner(self) -> Optional[str]:
        user = self._auth.get_session()
        return user.id if user else None

    def insert(self, record: dict) -> OperationResult[T]:
        owner = self._owner()
        if owner is None:
            return OperationResult.failure("Not authenticated", "unauthenticated")
        if record.get("user_id", owner) != owner:
            return OperationResult.failure(
                f'new row violates row-level security policy for table "{self._name}"', "rls"
            )
        return _guarded(f"insert into {self._name}",
                        lambda: OperationResult.success(self._create(owner, record)))

    def update(self, record_id: str, patch: dict) -> OperationResult[T]:
        owner = self._owner()
        if owner is None:
            return OperationResult.failure("Not authenticated", "unauthenticated")

        def run():
            updated = self._dao.update(record_id, owner, patch)
            if updated is None:
                return OperationResult.failure("Record not found", "not_found")
            return OperationResult.success(updated)

        return _guarded(f"update {self._name}", run)

    def delete(self, record_id: str) -> OperationResult[None]:
        owner = self._owner()
        if owner is None:
            return OperationResult.failure("Not authenticated", "unauthenticated")

        def run():
            # Deleting a row that is absent (or not ours) is not an error.
            self._dao.delete(record_id, owner)
            return OperationResult.success(None)

        return _guarded(f"delete from {self._name}", run)

    def select_for_owner(self, owner_id: str) -> OperationResult[list[T]]:
        if owner_id != self._owner():
            return OperationResult.success([])
        return _guarded(f"select from {self._name}",
                        lambda: OperationResult.success(self._dao.get_for_owner(owner_id)))


class SQLiteDataBackend(DataBackend):
    def __init__(self, tx_dao: TransactionDAO, budget_dao: BudgetDAO, auth: AuthBackend):
        self.transactions = _SQLiteTable(
            "transactions", tx_dao, auth,
            lambda owner, r: tx_dao.create(
                user_id=owner,
                type_=r["type"],
                amount=r["amount"],
                date=r["date"],
                category=r.get("category", ""),
                description=r.get("description", ""),
            ),
        )
        self.budgets = _SQLiteTable(
            "budgets", budget_dao, auth,
            lambda owner, r: budget_dao.create(
                user_id=owner,
                category=r["category"],
                amount=r["amount"],
                period=r.get("period", "monthly"),
            ),
        )


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()
