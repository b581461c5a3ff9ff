APP_NAME = "Pennywise"
DB_FILE = "pennywise.db"

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

MAX_AMOUNT = 1_000_000
MAX_DESCRIPTION_LENGTH = 200
MIN_PASSWORD_LENGTH = 8

BUDGET_ALERT_THRESHOLD = 80  # percent
BUDGET_PROGRESS_CAP = 999

RECURRING_CATCHUP_LIMIT = 366
MAX_SCHEDULE_YEAR = 9000
STATS_MONTHS = 6

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

CATEGORIES = [
    {"name": "Food & Dining",  "color_hex": "#F97316"},
    {"name": "Transportation", "color_hex": "#3B82F6"},
    {"name": "Entertainment",  "color_hex": "#A855F7"},
    {"name": "Housing/Rent",   "color_hex": "#EF4444"},
    {"name": "Utilities",      "color_hex": "#EAB308"},
    {"name": "Shopping",       "color_hex": "#EC4899"},
    {"name": "Healthcare",     "color_hex": "#22C55E"},
    {"name": "Education",      "color_hex": "#6366F1"},
    {"name": "Travel",         "color_hex": "#06B6D4"},
    {"name": "Other",          "color_hex": "#6B7280"},
]
CATEGORY_NAMES = [c["name"] for c in CATEGORIES]
CATEGORY_COLORS = {c["name"]: c["color_hex"] for c in CATEGORIES}

PAYMENT_METHODS = [
    "Cash",
    "Credit Card",
    "Debit Card",
    "Bank Transfer",
    "Digital Wallet",
    "Other",
]

FREQUENCIES = ["daily", "weekly", "monthly", "yearly"]
BUDGET_PERIODS = ["monthly", "weekly", "yearly"]
STATS_PERIODS = ["month", "year", "all"]

EXPENSE_SORT_FIELDS = ("date", "amount", "category", "created_at")
