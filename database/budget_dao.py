from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            period=row["period"],
            start_date=row["start_date"],
            category=row["category"],
            end_date=row["end_date"],
            alert_threshold=row["alert_threshold"],
            created_at=row["created_at"],
        )

    def get_for_user(self, user_id: int) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM budgets
               WHERE user_id = ?
               ORDER BY created_at DESC, id DESC""",
            (user_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM budgets WHERE id = ?", (budget_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        user_id: int,
        amount: float,
        period: str,
        start_date: str,
        category: str | None = None,
        end_date: str | None = None,
        alert_threshold: int | None = None,
    ) -> Budget:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO budgets
               (user_id, category, amount, period, start_date, end_date, alert_threshold)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (user_id, category, amount, period, start_date, end_date, alert_threshold),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        budget_id: int,
        amount: float,
        period: str,
        start_date: str,
        category: str | None = None,
        end_date: str | None = None,
        alert_threshold: int | None = None,
    ) -> Budget:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE budgets
               SET category=?, amount=?, period=?, start_date=?, end_date=?,
                   alert_threshold=?
               WHERE id=?""",
            (category, amount, period, start_date, end_date, alert_threshold, budget_id),
        )
        conn.commit()
        return self.get_by_id(budget_id)

    def delete(self, budget_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        conn.commit()
