from typing import Optional
from database.db_manager import DatabaseManager
from models.expense import Expense
from utils.constants import EXPENSE_SORT_FIELDS


class ExpenseDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Expense:
        return Expense(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            category=row["category"],
            date=row["date"],
            payment_method=row["payment_method"],
            description=row["description"],
            is_recurring=bool(row["is_recurring"]),
            recurring_id=row["recurring_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _where(
        self,
        user_id: int,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
        search: str | None = None,
    ) -> tuple[str, list]:
        sql = " WHERE user_id = ?"
        params: list = [user_id]

        if category and category != "all":
            sql += " AND category = ?"
            params.append(category)
        if start_date:
            sql += " AND date >= ?"
            params.append(start_date)
        if end_date:
            sql += " AND date <= ?"
            params.append(end_date)
        if min_amount is not None:
            sql += " AND amount >= ?"
            params.append(min_amount)
        if max_amount is not None:
            sql += " AND amount <= ?"
            params.append(max_amount)
        if search:
            escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            sql += " AND COALESCE(description, '') LIKE ? ESCAPE '\\'"
            params.append(f"%{escaped}%")
        return sql, params

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM expenses WHERE id = ?", (expense_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def find(
        self,
        user_id: int,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
        search: str | None = None,
        sort_by: str = "date",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Expense]:
        if sort_by not in EXPENSE_SORT_FIELDS:
            sort_by = "date"
        direction = "ASC" if sort_order == "asc" else "DESC"
        where, params = self._where(
            user_id, category, start_date, end_date, min_amount, max_amount, search
        )
        sql = f"SELECT * FROM expenses{where} ORDER BY {sort_by} {direction}, id {direction}"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        conn = self._db.get_connection()
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def count(
        self,
        user_id: int,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
        search: str | None = None,
    ) -> int:
        where, params = self._where(
            user_id, category, start_date, end_date, min_amount, max_amount, search
        )
        conn = self._db.get_connection()
        return conn.execute(f"SELECT COUNT(*) FROM expenses{where}", params).fetchone()[0]

    def get_by_recurring(self, recurring_id: int) -> list[Expense]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM expenses WHERE recurring_id = ? ORDER BY date ASC, id ASC",
            (recurring_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(
        self,
        user_id: int,
        amount: float,
        category: str,
        date: str,
        payment_method: str,
        description: str | None = None,
    ) -> Expense:
        """Insert a manually entered expense. Caller commits."""
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO expenses
               (user_id, amount, category, date, description, payment_method)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (user_id, amount, category, date, description, payment_method),
        )
        return self.get_by_id(cursor.lastrowid)

    def create_occurrence(
        self,
        user_id: int,
        recurring_id: int,
        amount: float,
        category: str,
        date: str,
        payment_method: str,
        description: str | None = None,
    ) -> Optional[Expense]:
        """Insert a recurring-origin expense. Caller commits.

        Returns None when an expense for (recurring_id, date) already exists.
        """
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT OR IGNORE INTO expenses
               (user_id, amount, category, date, description, payment_method,
                is_recurring, recurring_id)
               VALUES (?, ?, ?, ?, ?, ?, 1, ?)""",
            (user_id, amount, category, date, description, payment_method,
             recurring_id),
        )
        if cursor.rowcount == 0:
            return None
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        expense_id: int,
        amount: float,
        category: str,
        date: str,
        payment_method: str,
        description: str | None = None,
    ) -> Expense:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE expenses
               SET amount=?, category=?, date=?, description=?, payment_method=?,
                   updated_at=datetime('now')
               WHERE id=?""",
            (amount, category, date, description, payment_method, expense_id),
        )
        conn.commit()
        return self.get_by_id(expense_id)

    def delete(self, expense_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        conn.commit()

    # ── Aggregates ────────────────────────────────────────────────────────────

    def get_totals(self, user_id: int, start_date: str, end_date: str) -> dict:
        """Return total, count and average amount for the date range."""
        conn = self._db.get_connection()
        row = conn.execute(
            """SELECT COALESCE(SUM(amount), 0) AS total,
                      COUNT(id)                AS count,
                      COALESCE(AVG(amount), 0) AS average
               FROM expenses
               WHERE user_id = ? AND date >= ? AND date <= ?""",
            (user_id, start_date, end_date),
        ).fetchone()
        return {"total": row["total"], "count": row["count"], "average": row["average"]}

    def get_spent(
        self, user_id: int, start_date: str, end_date: str, category: str | None = None
    ) -> float:
        conn = self._db.get_connection()
        sql = """SELECT COALESCE(SUM(amount), 0) FROM expenses
                 WHERE user_id = ? AND date >= ? AND date <= ?"""
        params: list = [user_id, start_date, end_date]
        if category:
            sql += " AND category = ?"
            params.append(category)
        return conn.execute(sql, params).fetchone()[0]

    def get_by_category(self, user_id: int, start_date: str, end_date: str) -> list[dict]:
        """[{category, total, count}] ordered by total, largest first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT category, SUM(amount) AS total, COUNT(id) AS count
               FROM expenses
               WHERE user_id = ? AND date >= ? AND date <= ?
               GROUP BY category
               ORDER BY total DESC, category ASC""",
            (user_id, start_date, end_date),
        ).fetchall()
        return [dict(r) for r in rows]

    def get_monthly_totals(self, user_id: int, start_date: str, end_date: str) -> dict[str, float]:
        """{'YYYY-MM': total} for months with at least one expense in range."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT strftime('%Y-%m', date) AS month, SUM(amount) AS total
               FROM expenses
               WHERE user_id = ? AND date >= ? AND date <= ?
               GROUP BY month""",
            (user_id, start_date, end_date),
        ).fetchall()
        return {r["month"]: r["total"] for r in rows}

    def get_daily_totals(self, user_id: int, start_date: str, end_date: str) -> list[dict]:
        """[{date, total}] for days with spending, oldest first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT date, SUM(amount) AS total
               FROM expenses
               WHERE user_id = ? AND date >= ? AND date <= ?
               GROUP BY date
               ORDER BY date ASC""",
            (user_id, start_date, end_date),
        ).fetchall()
        return [dict(r) for r in rows]

    def get_earliest_date(self, user_id: int) -> str | None:
        conn = self._db.get_connection()
        return conn.execute(
            "SELECT MIN(date) FROM expenses WHERE user_id = ?", (user_id,)
        ).fetchone()[0]
