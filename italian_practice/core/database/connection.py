"""
Database connection manager for the Italian practice core
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from ...config import get_database_path

logger = logging.getLogger(__name__)

STATISTICS_TABLES = {
    "verb_statistics": "verbs",
    "noun_statistics": "nouns",
    "adjective_statistics": "adjectives",
}


def _adapt_iso(val):
    return val.isoformat()


def _convert_date(val):
    try:
        return date.fromisoformat(val.decode())
    except ValueError:
        date_str = val.decode()
        for fmt in ["%Y-%m-%d", "%Y-%m-%d %H:%M:%S"]:
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Invalid date format: {date_str}") from None


def _convert_datetime(val):
    try:
        return datetime.fromisoformat(val.decode())
    except ValueError:
        datetime_str = val.decode()
        for fmt in [
            "%Y-%m-%d %H:%M:%S",
            "%Y-%m-%d %H:%M:%S.%f",
            "%Y-%m-%d",
        ]:
            try:
                return datetime.strptime(datetime_str, fmt)
            except ValueError:
                continue
        raise ValueError(f"Invalid datetime format: {datetime_str}") from None


sqlite3.register_adapter(date, _adapt_iso)
sqlite3.register_adapter(datetime, _adapt_iso)
sqlite3.register_converter("date", _convert_date)
sqlite3.register_converter("datetime", _convert_datetime)
sqlite3.register_converter("timestamp", _convert_datetime)


class DatabaseConnection:
    """Manages SQLite database connections and settings"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_database_path()
        self._ensure_database_directory()
        self._init_connection_settings()

    def _ensure_database_directory(self) -> None:
        """Ensure the database directory exists"""
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _init_connection_settings(self) -> None:
        """Initialize persistent database settings"""
        with self.get_connection() as conn:
            # WAL is persistent per database file
            conn.execute("PRAGMA journal_mode=WAL")

    @contextmanager
    def get_connection(self):
        """Get database connection with proper cleanup"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES)
            conn.row_factory = sqlite3.Row
            # Foreign keys are per-connection; cascades depend on them
            conn.execute("PRAGMA foreign_keys=ON")
            conn.execute("PRAGMA busy_timeout=30000")
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def init_database(self) -> None:
        """Initialize database tables"""
        with self.get_connection() as conn:
            self._create_tables(conn)
            self._run_migrations(conn)
            self._create_indexes(conn)
            conn.commit()

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create database tables"""
        tables = [
            """
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                is_admin BOOLEAN DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS user_settings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                mastery_threshold INTEGER DEFAULT 10,
                enabled_verb_tenses TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                UNIQUE(user_id)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS verbs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                italian TEXT UNIQUE NOT NULL,
                regular BOOLEAN NOT NULL DEFAULT 1,
                reflexive BOOLEAN NOT NULL DEFAULT 0,
                tr_ptBR TEXT NOT NULL,
                tr_en TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS nouns (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                italian TEXT UNIQUE NOT NULL,
                singolare TEXT NOT NULL,
                plurale TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS adjectives (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                italian TEXT UNIQUE NOT NULL,
                maschile TEXT NOT NULL,
                femminile TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS verb_conjugations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                verb_id INTEGER NOT NULL,
                conjugation TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (verb_id) REFERENCES verbs(id) ON DELETE CASCADE,
                UNIQUE(verb_id)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS conjugation_statistics (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                verb_id INTEGER NOT NULL,
                mood TEXT NOT NULL,
                tense TEXT NOT NULL,
                person TEXT NOT NULL,
                correct_attempts INTEGER DEFAULT 0,
                wrong_attempts INTEGER DEFAULT 0,
                last_practiced TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                FOREIGN KEY (verb_id) REFERENCES verbs(id) ON DELETE CASCADE,
                UNIQUE(user_id, verb_id, mood, tense, person)
            )
            """,
        ]

        for table, parent in STATISTICS_TABLES.items():
            tables.append(
                f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    item_id INTEGER NOT NULL,
                    correct_attempts INTEGER DEFAULT 0,
                    wrong_attempts INTEGER DEFAULT 0,
                    last_practiced TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                    FOREIGN KEY (item_id) REFERENCES {parent}(id) ON DELETE CASCADE,
                    UNIQUE(user_id, item_id)
                )
                """  # noqa: S608  # Safe: table names come from STATISTICS_TABLES
            )

        for table_sql in tables:
            conn.execute(table_sql)

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create database indexes for performance"""
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_verbs_italian ON verbs(italian)",
            "CREATE INDEX IF NOT EXISTS idx_nouns_italian ON nouns(italian)",
            "CREATE INDEX IF NOT EXISTS idx_adjectives_italian ON adjectives(italian)",
            (
                "CREATE INDEX IF NOT EXISTS idx_conjugation_statistics_user "
                "ON conjugation_statistics(user_id, verb_id)"
            ),
        ]
        indexes.extend(
            f"CREATE INDEX IF NOT EXISTS idx_{table}_user ON {table}(user_id)"
            for table in STATISTICS_TABLES
        )

        for index_sql in indexes:
            try:
                conn.execute(index_sql)
            except sqlite3.OperationalError as e:
                logger.warning(f"Failed to create index: {index_sql}, error: {e}")

    def _run_migrations(self, conn: sqlite3.Connection) -> None:
        """Run database migrations for schema updates"""
        cursor = conn.execute("PRAGMA table_info(verbs)")
        verb_columns = {row[1] for row in cursor.fetchall()}

        if "tr_en" not in verb_columns:
            logger.info("Adding missing tr_en column to verbs table")
            conn.execute("ALTER TABLE verbs ADD COLUMN tr_en TEXT")
            logger.info("Successfully added tr_en column to verbs table")

        cursor = conn.execute("PRAGMA table_info(user_settings)")
        settings_columns = {row[1] for row in cursor.fetchall()}

        if "enabled_verb_tenses" not in settings_columns:
            logger.info("Adding missing enabled_verb_tenses column to user_settings table")
            conn.execute("ALTER TABLE user_settings ADD COLUMN enabled_verb_tenses TEXT")
            logger.info(
                "Successfully added enabled_verb_tenses column to user_settings table"
            )
