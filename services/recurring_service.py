import logging
from datetime import date, datetime, timedelta
from models.expense import Expense
from models.recurring_expense import RecurringExpense
from database.recurring_dao import RecurringDAO
from database.expense_dao import ExpenseDAO
from utils.constants import (
    CATEGORY_NAMES, FREQUENCIES, MAX_SCHEDULE_YEAR, PAYMENT_METHODS,
    RECURRING_CATCHUP_LIMIT,
)
from utils.date_helpers import add_months, add_years, format_date, parse_date, start_of_day, today
from utils.validators import (
    clean_amount, clean_choice, clean_date, clean_description, clean_optional_int,
)

logger = logging.getLogger(__name__)


def next_due_date(
    current: date | datetime,
    frequency: str,
    day_of_month: int | None = None,
    day_of_week: int | None = None,
) -> date:
    """Return the occurrence after `current` for the given frequency.

    Total: never raises. An unknown frequency advances one calendar month.
    day_of_week is accepted for symmetry with the stored definition but
    weekly schedules always step exactly 7 days. A step that would pass the
    last representable date saturates at date.max.
    """
    base = start_of_day(current)
    try:
        return _advance(base, frequency, day_of_month)
    except (OverflowError, ValueError):
        logger.warning("Next due date after %s is out of range", base)
        return date.max


def _advance(base: date, frequency: str, day_of_month: int | None) -> date:
    if frequency == "daily":
        return base + timedelta(days=1)
    if frequency == "weekly":
        return base + timedelta(weeks=1)
    if frequency == "yearly":
        return add_years(base, 1)
    if frequency != "monthly":
        logger.warning("Unknown frequency %r, advancing monthly", frequency)
        return add_months(base, 1)

    nxt = add_months(base, 1)
    if isinstance(day_of_month, int) and 1 <= day_of_month <= 28:
        nxt = nxt.replace(day=day_of_month)
    return nxt


class MaterializationError(RuntimeError):
    """One or more recurring definitions could not be materialized."""

    def __init__(self, failed_ids: list[int]):
        super().__init__(
            f"Failed to materialize recurring expenses: {', '.join(map(str, failed_ids))}"
        )
        self.failed_ids = failed_ids


class RecurringService:
    def __init__(
        self,
        recurring_dao: RecurringDAO,
        expense_dao: ExpenseDAO,
        catch_up: bool = False,
    ):
        self._dao = recurring_dao
        self._expense_dao = expense_dao
        self._catch_up = catch_up

    def get_by_id(self, recurring_id: int) -> RecurringExpense | None:
        return self._dao.get_by_id(recurring_id)

    def list_for_user(
        self, user_id: int, reference_date: date | None = None
    ) -> list[RecurringExpense]:
        """Materialize anything due, then return the owner's definitions."""
        self.materialize_due(user_id, reference_date)
        return self._dao.get_for_user(user_id)

    def create(
        self,
        user_id: int,
        amount,
        category: str,
        payment_method: str,
        frequency: str,
        start_date: str | None = None,
        description: str | None = None,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
        end_date: str | None = None,
    ) -> RecurringExpense:
        fields = self._validate(
            amount, category, payment_method, frequency,
            start_date or format_date(today()),
            description, day_of_month, day_of_week, end_date,
        )
        first_due = next_due_date(
            parse_date(fields["start_date"]), frequency,
            fields["day_of_month"], fields["day_of_week"],
        )
        rec = self._dao.create(
            user_id=user_id, next_due_date=format_date(first_due), **fields
        )
        logger.info("Created recurring expense %s for user %s, first due %s",
                    rec.id, user_id, rec.next_due_date)
        return rec

    def update(self, rec: RecurringExpense, changes: dict) -> RecurringExpense:
        """Apply a partial edit. Keys missing from `changes` keep their stored value."""
        def pick(key, current):
            value = changes.get(key)
            return current if value is None else value

        merged = {
            "amount": pick("amount", rec.amount),
            "category": pick("category", rec.category),
            "payment_method": pick("payment_method", rec.payment_method),
            "frequency": pick("frequency", rec.frequency),
            "start_date": pick("start_date", rec.start_date),
            "description": pick("description", rec.description),
            "day_of_month": changes["day_of_month"] if "day_of_month" in changes else rec.day_of_month,
            "day_of_week": changes["day_of_week"] if "day_of_week" in changes else rec.day_of_week,
            "end_date": pick("end_date", rec.end_date),
        }
        fields = self._validate(**merged)
        is_active = pick("is_active", rec.is_active)
        if not isinstance(is_active, bool):
            raise ValueError("is_active must be true or false.")
        return self._dao.update(recurring_id=rec.id, is_active=is_active, **fields)

    def toggle_active(self, rec: RecurringExpense) -> RecurringExpense:
        self._dao.set_active(rec.id, not rec.is_active)
        return self._dao.get_by_id(rec.id)

    def delete(self, recurring_id: int):
        """Past materialized expenses are kept; their back-reference is cleared."""
        self._dao.delete(recurring_id)

    # ── Materialization ──────────────────────────────────────────────────────

    def materialize_due(
        self, user_id: int, reference_date: date | None = None
    ) -> list[Expense]:
        """Create expenses for every due occurrence of the owner's active definitions.

        By default each definition advances at most one occurrence per call,
        so a backlog drains over successive calls. With catch_up enabled a
        definition is advanced until its next due date passes the reference
        date. Definitions are independent: a failure on one is logged, rolled
        back and reported via MaterializationError once the others are done.
        """
        ref = start_of_day(reference_date or today())
        ref_str = format_date(ref)
        created: list[Expense] = []
        failed: list[int] = []

        for rec in self._dao.get_due(user_id, ref_str):
            try:
                created.extend(self._materialize_definition(rec, ref))
            except Exception:
                logger.exception("Failed to materialize recurring expense %s", rec.id)
                failed.append(rec.id)

        if created:
            logger.info("Materialized %d recurring expense(s) for user %s",
                        len(created), user_id)
        if failed:
            raise MaterializationError(failed)
        return created

    def _materialize_definition(self, rec: RecurringExpense, ref: date) -> list[Expense]:
        created: list[Expense] = []
        due = parse_date(rec.next_due_date)
        end = parse_date(rec.end_date) if rec.end_date else None
        steps = RECURRING_CATCHUP_LIMIT if self._catch_up else 1

        for _ in range(steps):
            if due > ref or (end is not None and due > end):
                break
            nxt = next_due_date(due, rec.frequency, rec.day_of_month, rec.day_of_week)
            advanced, expense = self._materialize_occurrence(rec, due, nxt)
            if not advanced:
                break
            if expense is not None:
                created.append(expense)
            due = nxt
        return created

    def _materialize_occurrence(
        self, rec: RecurringExpense, due: date, nxt: date
    ) -> tuple[bool, Expense | None]:
        """Advance one occurrence atomically.

        The due date is compare-and-swapped against the value this pass read,
        so a concurrent or stale pass that lost the race creates nothing and
        returns (False, None). (True, None) means the due date moved on but an
        expense for this occurrence was already on record.
        """
        due_str = format_date(due)
        conn = self._dao._db.get_connection()
        try:
            if not self._dao.advance_next_due(rec.id, due_str, format_date(nxt)):
                conn.rollback()
                logger.info("Recurring expense %s already advanced past %s", rec.id, due_str)
                return False, None
            expense = self._expense_dao.create_occurrence(
                user_id=rec.user_id,
                recurring_id=rec.id,
                amount=rec.amount,
                category=rec.category,
                date=due_str,
                payment_method=rec.payment_method,
                description=rec.description,
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise

        if expense is None:
            logger.warning("Occurrence %s of recurring expense %s already recorded",
                           due_str, rec.id)
        return True, expense

    def _validate(
        self,
        amount,
        category,
        payment_method,
        frequency,
        start_date,
        description=None,
        day_of_month=None,
        day_of_week=None,
        end_date=None,
    ) -> dict:
        start = clean_date(start_date, "start date")
        end = clean_date(end_date, "end date") if end_date else None
        if end and end < start:
            raise ValueError("End date cannot be before start date.")
        if max(start, end or start).year > MAX_SCHEDULE_YEAR:
            raise ValueError(f"Dates after {MAX_SCHEDULE_YEAR} are not supported.")
        return {
            "amount": clean_amount(amount),
            "category": clean_choice(category, CATEGORY_NAMES, "category"),
            "payment_method": clean_choice(payment_method, PAYMENT_METHODS, "payment method"),
            "frequency": clean_choice(frequency, FREQUENCIES, "frequency"),
            "start_date": format_date(start),
            "description": clean_description(description),
            "day_of_month": clean_optional_int(day_of_month, 1, 28, "day of month"),
            "day_of_week": clean_optional_int(day_of_week, 0, 6, "day of week"),
            "end_date": format_date(end) if end else None,
        }
