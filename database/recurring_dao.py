from typing import Optional
from database.db_manager import DatabaseManager
from models.recurring_expense import RecurringExpense


class RecurringDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringExpense:
        return RecurringExpense(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            category=row["category"],
            payment_method=row["payment_method"],
            frequency=row["frequency"],
            start_date=row["start_date"],
            next_due_date=row["next_due_date"],
            is_active=bool(row["is_active"]),
            description=row["description"],
            day_of_month=row["day_of_month"],
            day_of_week=row["day_of_week"],
            end_date=row["end_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_for_user(self, user_id: int) -> list[RecurringExpense]:
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM recurring_expenses
               WHERE user_id = ?
               ORDER BY next_due_date ASC, id ASC""",
            (user_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_due(self, user_id: int, as_of: str) -> list[RecurringExpense]:
        """Active definitions whose next occurrence is on or before as_of
        and not past their end date."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM recurring_expenses
               WHERE user_id = ?
                 AND is_active = 1
                 AND next_due_date <= ?
                 AND (end_date IS NULL OR next_due_date <= end_date)
               ORDER BY next_due_date ASC, id ASC""",
            (user_id, as_of),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, recurring_id: int) -> Optional[RecurringExpense]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM recurring_expenses WHERE id = ?", (recurring_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        user_id: int,
        amount: float,
        category: str,
        payment_method: str,
        frequency: str,
        start_date: str,
        next_due_date: str,
        description: str | None = None,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
        end_date: str | None = None,
    ) -> RecurringExpense:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO recurring_expenses
               (user_id, amount, category, description, payment_method,
                frequency, day_of_month, day_of_week, start_date, end_date,
                next_due_date)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                user_id, amount, category, description, payment_method,
                frequency, day_of_month, day_of_week, start_date, end_date,
                next_due_date,
            ),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        recurring_id: int,
        amount: float,
        category: str,
        payment_method: str,
        frequency: str,
        start_date: str,
        description: str | None = None,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
        end_date: str | None = None,
        is_active: bool = True,
    ) -> RecurringExpense:
        """User edit. next_due_date is owned by the scheduler and never touched here."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE recurring_expenses SET
               amount=?, category=?, description=?, payment_method=?,
               frequency=?, day_of_month=?, day_of_week=?, start_date=?,
               end_date=?, is_active=?, updated_at=datetime('now')
               WHERE id=?""",
            (
                amount, category, description, payment_method,
                frequency, day_of_month, day_of_week, start_date,
                end_date, 1 if is_active else 0, recurring_id,
            ),
        )
        conn.commit()
        return self.get_by_id(recurring_id)

    def set_active(self, recurring_id: int, is_active: bool):
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE recurring_expenses
               SET is_active = ?, updated_at = datetime('now')
               WHERE id = ?""",
            (1 if is_active else 0, recurring_id),
        )
        conn.commit()

    def advance_next_due(self, recurring_id: int, expected: str, next_due: str) -> bool:
        """Compare-and-swap the next due date. Caller commits.

        Returns False when the stored value no longer equals `expected`,
        i.e. another pass already advanced this definition.
        """
        conn = self._db.get_connection()
        cursor = conn.execute(
            """UPDATE recurring_expenses SET next_due_date = ?
               WHERE id = ? AND next_due_date = ?""",
            (next_due, recurring_id, expected),
        )
        return cursor.rowcount == 1

    def delete(self, recurring_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM recurring_expenses WHERE id = ?", (recurring_id,))
        conn.commit()
