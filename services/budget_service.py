from datetime import date
from models.budget import Budget
from database.budget_dao import BudgetDAO
from database.expense_dao import ExpenseDAO
from utils.constants import BUDGET_PERIODS, CATEGORY_NAMES
from utils.date_helpers import (
    format_date, month_bounds, parse_date, today, week_bounds, year_bounds,
)
from utils.validators import clean_amount, clean_choice, clean_date, clean_optional_int


def period_range(period: str, start_date: str, end_date: str | None = None,
                 ref: date | None = None) -> tuple[date, date]:
    """The window a budget's spending is measured over, as of ref (default: today).

    Recognised periods track the calendar month, Monday-based week or calendar
    year containing ref. Anything else falls back to the budget's own dates,
    ending at the close of the start month when no end date is set.
    """
    ref = ref or today()
    if period == "monthly":
        return month_bounds(ref)
    if period == "weekly":
        return week_bounds(ref)
    if period == "yearly":
        return year_bounds(ref)
    start = parse_date(start_date) or ref
    end = parse_date(end_date) if end_date else None
    return start, end or month_bounds(start)[1]


class BudgetService:
    def __init__(self, budget_dao: BudgetDAO, expense_dao: ExpenseDAO):
        self._budget_dao = budget_dao
        self._expense_dao = expense_dao

    def get_by_id(self, budget_id: int) -> Budget | None:
        return self._budget_dao.get_by_id(budget_id)

    def get_budget_status(self, user_id: int, ref: date | None = None) -> list[Budget]:
        """Return the owner's budgets with spent amounts for their current period."""
        budgets = self._budget_dao.get_for_user(user_id)
        for b in budgets:
            start, end = period_range(b.period, b.start_date, b.end_date, ref)
            b.spent = self._expense_dao.get_spent(
                user_id, format_date(start), format_date(end), b.category
            )
        return budgets

    def create(self, user_id: int, data: dict) -> Budget:
        fields = self._validate(
            amount=data.get("amount"),
            period=data.get("period"),
            category=data.get("category"),
            start_date=data.get("start_date") or format_date(today()),
            end_date=data.get("end_date"),
            alert_threshold=data.get("alert_threshold"),
        )
        return self._budget_dao.create(user_id=user_id, **fields)

    def update(self, budget: Budget, changes: dict) -> Budget:
        """Partial edit; absent or null keys keep the stored value."""
        def pick(key, current):
            value = changes.get(key)
            return current if value is None else value

        fields = self._validate(
            amount=pick("amount", budget.amount),
            period=pick("period", budget.period),
            category=pick("category", budget.category),
            start_date=pick("start_date", budget.start_date),
            end_date=pick("end_date", budget.end_date),
            alert_threshold=(changes["alert_threshold"] if "alert_threshold" in changes
                             else budget.alert_threshold),
        )
        return self._budget_dao.update(budget.id, **fields)

    def delete(self, budget_id: int):
        self._budget_dao.delete(budget_id)

    def _validate(self, amount, period, category, start_date, end_date, alert_threshold) -> dict:
        if period not in BUDGET_PERIODS:
            raise ValueError("Invalid period.")
        start = clean_date(start_date, "start date")
        end = clean_date(end_date, "end date") if end_date else None
        if end and end < start:
            raise ValueError("End date cannot be before start date.")
        return {
            "amount": clean_amount(amount),
            "period": period,
            "category": clean_choice(category, CATEGORY_NAMES, "category") if category else None,
            "start_date": format_date(start),
            "end_date": format_date(end) if end else None,
            "alert_threshold": clean_optional_int(alert_threshold, 1, 100, "alert threshold"),
        }
