import math
import sqlite3
from models.expense import Expense
from database.expense_dao import ExpenseDAO
from utils.constants import (
    CATEGORY_NAMES, DEFAULT_PAGE_SIZE, EXPENSE_SORT_FIELDS, MAX_PAGE_SIZE, PAYMENT_METHODS,
)
from utils.date_helpers import format_date, parse_date, today
from utils.validators import clean_amount, clean_choice, clean_date, clean_description


class ExpenseValidationError(ValueError):
    """Carries one message per offending field."""

    def __init__(self, details: list[dict]):
        super().__init__("; ".join(d["message"] for d in details))
        self.details = details


class ExpenseService:
    def __init__(self, expense_dao: ExpenseDAO):
        self._dao = expense_dao

    def get_by_id(self, expense_id: int) -> Expense | None:
        return self._dao.get_by_id(expense_id)

    def list_for_user(
        self,
        user_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
        search: str | None = None,
        sort_by: str = "date",
        sort_order: str = "desc",
    ) -> dict:
        """Return {expenses, pagination} for one page of the owner's expenses."""
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        if sort_by not in EXPENSE_SORT_FIELDS:
            raise ValueError(f"Cannot sort by {sort_by}.")
        if sort_order not in ("asc", "desc"):
            raise ValueError("Sort order must be asc or desc.")
        for label, value in (("start date", start_date), ("end date", end_date)):
            if value and not parse_date(value):
                raise ValueError(f"Invalid {label}. Use YYYY-MM-DD.")

        filters = dict(
            category=category,
            start_date=format_date(parse_date(start_date)) if start_date else None,
            end_date=format_date(parse_date(end_date)) if end_date else None,
            min_amount=min_amount,
            max_amount=max_amount,
            search=search,
        )
        expenses = self._dao.find(
            user_id, sort_by=sort_by, sort_order=sort_order,
            limit=limit, offset=(page - 1) * limit, **filters,
        )
        total = self._dao.count(user_id, **filters)
        return {
            "expenses": expenses,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def create(self, user_id: int, data: dict) -> Expense:
        fields = self._validate(data)
        conn = self._dao._db.get_connection()
        try:
            expense = self._dao.create(user_id=user_id, **fields)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return expense

    def update(self, expense_id: int, data: dict) -> Expense:
        fields = self._validate(data)
        try:
            return self._dao.update(expense_id, **fields)
        except sqlite3.IntegrityError:
            self._dao._db.get_connection().rollback()
            raise ExpenseValidationError([{
                "field": "date",
                "message": "This recurring expense already has an entry on that date.",
            }])

    def delete(self, expense_id: int):
        self._dao.delete(expense_id)

    def _validate(self, data: dict) -> dict:
        """Validate every field, collecting all problems before raising."""
        fields: dict = {}
        details: list[dict] = []

        checks = (
            ("amount", lambda: clean_amount(data.get("amount"))),
            ("category", lambda: clean_choice(data.get("category"), CATEGORY_NAMES, "category")),
            ("date", lambda: self._clean_expense_date(data.get("date"))),
            ("description", lambda: clean_description(data.get("description"))),
            ("payment_method", lambda: clean_choice(
                data.get("payment_method"), PAYMENT_METHODS, "payment method")),
        )
        for field, check in checks:
            try:
                fields[field] = check()
            except ValueError as e:
                details.append({"field": field, "message": str(e)})

        if details:
            raise ExpenseValidationError(details)
        return fields

    def _clean_expense_date(self, value) -> str:
        if value is None or value == "":
            raise ValueError("Date is required.")
        d = clean_date(value)
        if d > today():
            raise ValueError("Date cannot be in the future.")
        return format_date(d)
