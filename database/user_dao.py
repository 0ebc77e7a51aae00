import uuid
from typing import Optional
from database.db_manager import DatabaseManager
from models.user import User


class UserDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> User:
        return User(id=row["id"], email=row["email"], created_at=row["created_at"])

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._db.lock:
            row = self._db.get_connection().execute(
                "SELECT * FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        return self._row_to_model(row) if row else None

    def get_credentials(self, email: str) -> Optional[tuple[User, str]]:
        """Return (user, password_hash) for the email, or None."""
        with self._db.lock:
            row = self._db.get_connection().execute(
                "SELECT * FROM users WHERE email = ?", (email,)
            ).fetchone()
        return (self._row_to_model(row), row["password_hash"]) if row else None

    def create(self, email: str, password_hash: str) -> User:
        user_id = uuid.uuid4().hex
        with self._db.lock:
            conn = self._db.get_connection()
            conn.execute(
                "INSERT INTO users(id, email, password_hash) VALUES (?, ?, ?)",
                (user_id, email, password_hash),
            )
            conn.commit()
            return self.get_by_id(user_id)
