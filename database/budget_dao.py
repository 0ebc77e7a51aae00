import uuid
from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget

_UPDATABLE_COLUMNS = ("category", "amount", "period")


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            user_id=row["user_id"],
            category=row["category"],
            amount=row["amount"],
            period=row["period"],
            created_at=row["created_at"],
        )

    def get_for_owner(self, user_id: str) -> list[Budget]:
        with self._db.lock:
            rows = self._db.get_connection().execute(
                """SELECT * FROM budgets
                   WHERE user_id = ?
                   ORDER BY created_at, rowid""",
                (user_id,),
            ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: str, user_id: str) -> Optional[Budget]:
        with self._db.lock:
            row = self._db.get_connection().execute(
                "SELECT * FROM budgets WHERE id = ? AND user_id = ?",
                (budget_id, user_id),
            ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, user_id: str, category: str, amount: float, period: str) -> Budget:
        budget_id = uuid.uuid4().hex
        with self._db.lock:
            conn = self._db.get_connection()
            conn.execute(
                """INSERT INTO budgets(id, user_id, category, amount, period)
                   VALUES (?, ?, ?, ?, ?)""",
                (budget_id, user_id, category, amount, period),
            )
            conn.commit()
            return self.get_by_id(budget_id, user_id)

    def update(self, budget_id: str, user_id: str, changes: dict) -> Optional[Budget]:
        cols = [c for c in _UPDATABLE_COLUMNS if c in changes]
        with self._db.lock:
            conn = self._db.get_connection()
            if cols:
                assignments = ", ".join(f"{c} = ?" for c in cols)
                conn.execute(
                    f"UPDATE budgets SET {assignments} WHERE id = ? AND user_id = ?",
                    [changes[c] for c in cols] + [budget_id, user_id],
                )
                conn.commit()
            return self.get_by_id(budget_id, user_id)

    def delete(self, budget_id: str, user_id: str) -> int:
        with self._db.lock:
            conn = self._db.get_connection()
            cursor = conn.execute(
                "DELETE FROM budgets WHERE id = ? AND user_id = ?", (budget_id, user_id)
            )
            conn.commit()
            return cursor.rowcount
