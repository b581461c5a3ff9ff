import sqlite3
from utils.constants import DB_FILE


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema. Safe to call on every startup."""
        conn = self.get_connection()
        self._create_schema(conn)
        conn.commit()

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                email         TEXT NOT NULL UNIQUE COLLATE NOCASE,
                name          TEXT,
                password_hash TEXT NOT NULL DEFAULT '',
                created_at    TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS recurring_expenses (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id        INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                amount         REAL NOT NULL CHECK(amount > 0),
                category       TEXT NOT NULL,
                description    TEXT,
                payment_method TEXT NOT NULL,
                frequency      TEXT NOT NULL,
                day_of_month   INTEGER,
                day_of_week    INTEGER,
                start_date     TEXT NOT NULL,
                end_date       TEXT,
                is_active      INTEGER NOT NULL DEFAULT 1,
                next_due_date  TEXT NOT NULL,
                created_at     TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at     TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS expenses (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id        INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                amount         REAL NOT NULL CHECK(amount > 0),
                category       TEXT NOT NULL,
                date           TEXT NOT NULL,
                description    TEXT,
                payment_method TEXT NOT NULL,
                is_recurring   INTEGER NOT NULL DEFAULT 0,
                recurring_id   INTEGER REFERENCES recurring_expenses(id) ON DELETE SET NULL,
                created_at     TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at     TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS budgets (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id         INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                category        TEXT,
                amount          REAL NOT NULL CHECK(amount > 0),
                period          TEXT NOT NULL CHECK(period IN ('monthly','weekly','yearly')),
                start_date      TEXT NOT NULL,
                end_date        TEXT,
                alert_threshold INTEGER,
                created_at      TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_expenses_user_date      ON expenses(user_id, date);
            CREATE INDEX IF NOT EXISTS idx_expenses_category       ON expenses(category);
            CREATE INDEX IF NOT EXISTS idx_recurring_user_due      ON recurring_expenses(user_id, next_due_date);
            CREATE INDEX IF NOT EXISTS idx_budgets_user            ON budgets(user_id);

            -- one materialized expense per (definition, occurrence)
            CREATE UNIQUE INDEX IF NOT EXISTS idx_expenses_occurrence
                ON expenses(recurring_id, date) WHERE recurring_id IS NOT NULL;
        """)

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
