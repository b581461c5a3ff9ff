from datetime import date
from database.expense_dao import ExpenseDAO
from utils.constants import STATS_MONTHS, STATS_PERIODS
from utils.date_helpers import (
    days_between, format_date, month_bounds, parse_date, parse_month, recent_months,
    today, year_bounds,
)

ALL_TIME_START = date(1970, 1, 1)


class ReportService:
    def __init__(self, expense_dao: ExpenseDAO):
        self._dao = expense_dao

    def get_period_bounds(self, period: str, ref: date | None = None) -> tuple[date, date]:
        ref = ref or today()
        if period == "month":
            return month_bounds(ref)
        if period == "year":
            return year_bounds(ref)
        if period == "all":
            return ALL_TIME_START, ref
        raise ValueError(f"Invalid period: {period}")

    def get_stats(self, user_id: int, period: str = "month", ref: date | None = None) -> dict:
        """Aggregate the owner's spending for the analytics page."""
        if period not in STATS_PERIODS:
            raise ValueError(f"Invalid period: {period}")
        ref = ref or today()
        start, end = self.get_period_bounds(period, ref)
        start_str, end_str = format_date(start), format_date(end)

        totals = self._dao.get_totals(user_id, start_str, end_str)
        by_category = self._dao.get_by_category(user_id, start_str, end_str)
        top = by_category[0] if by_category else {"category": "N/A", "total": 0.0}

        return {
            "total": totals["total"],
            "count": totals["count"],
            "average": totals["average"],
            "avg_daily_spending": self._avg_daily(user_id, period, start, end, totals["total"], ref),
            "most_expensive_category": {"category": top["category"], "amount": top["total"]},
            "by_category": by_category,
            "monthly_expenses": self.get_monthly_totals(user_id, STATS_MONTHS, ref),
            "daily_spending": self.get_daily_spending(user_id, ref),
        }

    def get_category_breakdown(self, user_id: int, period: str = "month",
                               ref: date | None = None) -> list[dict]:
        """[{category, total, count}] for the period, largest first."""
        start, end = self.get_period_bounds(period, ref)
        return self._dao.get_by_category(user_id, format_date(start), format_date(end))

    def get_monthly_totals(self, user_id: int, months: int = STATS_MONTHS,
                           ref: date | None = None) -> list[dict]:
        """[{month, total}] for the last N months including ref's, zero-filled."""
        ref = ref or today()
        labels = recent_months(ref, months)
        first = parse_month(labels[0])
        last = month_bounds(ref)[1]
        totals = self._dao.get_monthly_totals(user_id, format_date(first), format_date(last))
        return [{"month": m, "total": totals.get(m, 0.0)} for m in labels]

    def get_daily_spending(self, user_id: int, ref: date | None = None) -> list[dict]:
        """[{date, total}] for days in ref's month that have spending."""
        start, end = month_bounds(ref or today())
        return self._dao.get_daily_totals(user_id, format_date(start), format_date(end))

    def _avg_daily(self, user_id, period, start, end, total, ref) -> float:
        if period == "all":
            earliest = parse_date(self._dao.get_earliest_date(user_id) or "")
            if earliest is None:
                return 0.0
            days = days_between(earliest, max(ref, earliest))
        else:
            days = days_between(start, end)
        return total / days if days > 0 else 0.0
