import logging
import os
import sqlite3

from utils.constants import DB_FILE, UPCOMING_DAYS

logger = logging.getLogger(__name__)

# Columns introduced after the first schema, as (name, definition)
ADDED_COLUMNS = [
    ("emoji", "TEXT NOT NULL DEFAULT ''"),
    ("updated_at", "TEXT NOT NULL DEFAULT ''"),
]

DEFAULT_SETTINGS = {
    "currency_symbol": "$",
    "upcoming_days": str(UPCOMING_DAYS),
}


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
            logger.debug("Opened database %s", self.db_path)
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._migrate_schema(conn)
        self._seed_defaults(conn)
        conn.commit()

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Add columns that older databases lack; safe to run repeatedly."""
        existing = {row["name"] for row in conn.execute("PRAGMA table_info(transactions)")}
        for column, ddl in ADDED_COLUMNS:
            if column not in existing:
                logger.info("Adding transactions.%s column", column)
                conn.execute(f"ALTER TABLE transactions ADD COLUMN {column} {ddl}")

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS transactions (
                id          TEXT PRIMARY KEY,
                type        TEXT NOT NULL CHECK(type IN ('income','expense')),
                name        TEXT NOT NULL,
                amount      REAL NOT NULL CHECK(amount > 0),
                category    TEXT NOT NULL DEFAULT '',
                frequency   TEXT NOT NULL,
                date        TEXT NOT NULL,
                emoji       TEXT NOT NULL DEFAULT '',
                created_at  TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_type ON transactions(type);
            CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date);

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        conn.executemany(
            "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
            DEFAULT_SETTINGS.items(),
        )

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (and creates if needed) the app database.

        db_folder: if provided, the DB file lives in that directory instead of CWD.
        """
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
