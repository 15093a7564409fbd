"""Repository functions for reading_progress table."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cosmos.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class ProgressRecord:
    """Reading progress for one (user, book) pair."""

    user_id: str
    book_id: str
    current_page: int
    pages_read: int
    last_read_at: str


def get_progress(user_id: str, book_id: str) -> ProgressRecord | None:
    """Get progress row for a user and book, or None if never opened."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM reading_progress WHERE user_id = ? AND book_id = ?",
            (user_id, book_id),
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def upsert_progress(
    user_id: str,
    book_id: str,
    current_page: int,
    pages_read: int,
    last_read_at: str,
) -> None:
    """Insert or update the progress row keyed on (user_id, book_id)."""
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO reading_progress (
                user_id, book_id, current_page, pages_read, last_read_at
            ) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, book_id) DO UPDATE SET
                current_page = excluded.current_page,
                pages_read = excluded.pages_read,
                last_read_at = excluded.last_read_at
            """,
            (user_id, book_id, current_page, pages_read, last_read_at),
        )

    logger.debug(
        "progress.upserted",
        user_id=user_id,
        book_id=book_id,
        current_page=current_page,
        pages_read=pages_read,
    )


def list_progress_since(since: str) -> list[ProgressRecord]:
    """Progress rows with last_read_at at or after an ISO timestamp."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM reading_progress WHERE last_read_at >= ?", (since,)
        ).fetchall()
    return [_row_to_record(row) for row in rows]


def _row_to_record(row) -> ProgressRecord:
    return ProgressRecord(
        user_id=row["user_id"],
        book_id=row["book_id"],
        current_page=row["current_page"],
        pages_read=row["pages_read"],
        last_read_at=row["last_read_at"],
    )
