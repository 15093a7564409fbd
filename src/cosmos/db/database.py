"""SQLite database connection and schema management.

Provides connection management and schema initialization for Cosmos Reader.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/cosmos.db")

# Current database path (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/cosmos.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Return the active database path."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM books").fetchall()
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- books: one row per uploaded book, owned by a single user
        CREATE TABLE IF NOT EXISTS books (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            author TEXT,
            total_pages INTEGER NOT NULL DEFAULT 0,
            content TEXT,
            file_url TEXT,
            book_type TEXT NOT NULL CHECK(book_type IN ('pdf', 'text')),
            language TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- reading_progress: one row per (user, book)
        CREATE TABLE IF NOT EXISTS reading_progress (
            user_id TEXT NOT NULL,
            book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
            current_page INTEGER NOT NULL DEFAULT 1 CHECK(current_page >= 1),
            pages_read INTEGER NOT NULL DEFAULT 0 CHECK(pages_read >= 0),
            last_read_at TEXT NOT NULL,
            PRIMARY KEY (user_id, book_id)
        );

        -- user_stats: per-user glossary interaction counters
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id TEXT PRIMARY KEY,
            keyword_clicks INTEGER NOT NULL DEFAULT 0,
            hubble_clicks INTEGER NOT NULL DEFAULT 0,
            chandra_clicks INTEGER NOT NULL DEFAULT 0,
            jwst_clicks INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- keyword_click_events: append-only click log for time-windowed boards
        CREATE TABLE IF NOT EXISTS keyword_click_events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            keyword TEXT NOT NULL,
            clicked_at TEXT NOT NULL
        );

        -- user_achievements: display cache of derived badges
        CREATE TABLE IF NOT EXISTS user_achievements (
            user_id TEXT NOT NULL,
            badge TEXT NOT NULL,
            unlocked_at TEXT NOT NULL,
            PRIMARY KEY (user_id, badge)
        );

        CREATE INDEX IF NOT EXISTS idx_books_user ON books(user_id);
        CREATE INDEX IF NOT EXISTS idx_progress_last_read ON reading_progress(last_read_at);
        CREATE INDEX IF NOT EXISTS idx_click_events_clicked ON keyword_click_events(clicked_at);
        """
    )
