from datetime import date, datetime, timedelta
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT


def today() -> date:
    return date.today()


def start_of_day(value: date | datetime) -> date:
    """Drop any time-of-day component."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure.

    A full ISO timestamp (as sent by browsers) is accepted and truncated to its day.
    """
    if not date_str or not isinstance(date_str, str):
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_month(month_str: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str:
        return None
    try:
        return datetime.strptime(month_str, MONTH_FORMAT).date()
    except ValueError:
        return None


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def add_years(d: date, n: int) -> date:
    """Add n years to date d; Feb 29 becomes Feb 28 in a non-leap year."""
    return add_months(d, 12 * n)


# ── Period boundaries ─────────────────────────────────────────────────────────

def month_bounds(d: date) -> tuple[date, date]:
    first = d.replace(day=1)
    last = d.replace(day=calendar.monthrange(d.year, d.month)[1])
    return first, last


def week_bounds(d: date) -> tuple[date, date]:
    """Monday-to-Sunday week containing d."""
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def year_bounds(d: date) -> tuple[date, date]:
    return date(d.year, 1, 1), date(d.year, 12, 31)


def recent_months(ref: date, count: int) -> list[str]:
    """The last `count` YYYY-MM strings ending with ref's month, oldest first."""
    first = ref.replace(day=1)
    return [format_month(add_months(first, -i)) for i in range(count - 1, -1, -1)]


def days_between(start: date, end: date) -> int:
    """Inclusive day count of [start, end]."""
    return (end - start).days + 1
