import uuid
from typing import Optional
from database.db_manager import DatabaseManager
from models.transaction import Transaction

_UPDATABLE_COLUMNS = ("type", "amount", "category", "description", "date")


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            type=row["type"],
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            date=row["date"],
            created_at=row["created_at"],
        )

    def get_for_owner(self, user_id: str) -> list[Transaction]:
        """All of one owner's transactions, newest date first."""
        with self._db.lock:
            rows = self._db.get_connection().execute(
                """SELECT * FROM transactions
                   WHERE user_id = ?
                   ORDER BY date DESC, created_at DESC, rowid DESC""",
                (user_id,),
            ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: str, user_id: str) -> Optional[Transaction]:
        with self._db.lock:
            row = self._db.get_connection().execute(
                "SELECT * FROM transactions WHERE id = ? AND user_id = ?",
                (tx_id, user_id),
            ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        user_id: str,
        type_: str,
        amount: float,
        date: str,
        category: str = "",
        description: str = "",
    ) -> Transaction:
        tx_id = uuid.uuid4().hex
        with self._db.lock:
            conn = self._db.get_connection()
            conn.execute(
                """INSERT INTO transactions
                   (id, user_id, type, amount, category, description, date)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (tx_id, user_id, type_, amount, category, description, date),
            )
            conn.commit()
            return self.get_by_id(tx_id, user_id)

    def update(self, tx_id: str, user_id: str, changes: dict) -> Optional[Transaction]:
        """Apply a partial update. Returns the stored row, or None if the owner has no such row."""
        cols = [c for c in _UPDATABLE_COLUMNS if c in changes]
        with self._db.lock:
            conn = self._db.get_connection()
            if cols:
                assignments = ", ".join(f"{c} = ?" for c in cols)
                conn.execute(
                    f"UPDATE transactions SET {assignments} WHERE id = ? AND user_id = ?",
                    [changes[c] for c in cols] + [tx_id, user_id],
                )
                conn.commit()
            return self.get_by_id(tx_id, user_id)

    def delete(self, tx_id: str, user_id: str) -> int:
        with self._db.lock:
            conn = self._db.get_connection()
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?", (tx_id, user_id)
            )
            conn.commit()
            return cursor.rowcount
