from decimal import Decimal, InvalidOperation
from datetime import date
from utils.constants import MAX_AMOUNT, MAX_DESCRIPTION_LENGTH
from utils.date_helpers import parse_date


def clean_amount(value) -> float:
    """Return a positive amount with at most two decimals, or raise ValueError."""
    if isinstance(value, bool) or value is None or value == "":
        raise ValueError("Amount must be a positive number.")
    try:
        dec = Decimal(str(value))
    except InvalidOperation:
        raise ValueError("Amount must be a positive number.")
    if not dec.is_finite() or dec <= 0:
        raise ValueError("Amount must be a positive number.")
    if dec > MAX_AMOUNT:
        raise ValueError(f"Amount cannot exceed {MAX_AMOUNT:,}.")
    if dec != dec.quantize(Decimal("0.01")):
        raise ValueError("Amount can have at most 2 decimal places.")
    return float(dec)


def clean_description(value) -> str | None:
    """Trim; blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Description must be text.")
    value = value.strip()
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters."
        )
    return value or None


def clean_choice(value, choices, label: str) -> str:
    if value not in choices:
        raise ValueError(f"Invalid {label}.")
    return value


def clean_date(value, label: str = "date") -> date:
    if isinstance(value, date):
        return value
    d = parse_date(value)
    if d is None:
        raise ValueError(f"Invalid {label}. Use YYYY-MM-DD.")
    return d


def clean_optional_int(value, low: int, high: int, label: str) -> int | None:
    """None stays None; anything else must be an int in [low, high]."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label}.")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {label}.")
    if n != value and str(n) != str(value).strip():
        raise ValueError(f"Invalid {label}.")
    if not low <= n <= high:
        raise ValueError(f"{label.capitalize()} must be between {low} and {high}.")
    return n
