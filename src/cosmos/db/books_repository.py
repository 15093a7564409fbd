"""Repository functions for books table.

Provides CRUD operations for the books table.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from cosmos.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class BookRecord:
    """Book record from database."""

    id: str
    user_id: str
    title: str
    author: str | None
    total_pages: int
    content: str | None
    file_url: str | None
    book_type: str
    language: str | None
    created_at: str

    @property
    def is_text(self) -> bool:
        return self.book_type == "text"


def insert_book(
    user_id: str,
    title: str,
    book_type: str,
    total_pages: int,
    author: str | None = None,
    content: str | None = None,
    file_url: str | None = None,
    language: str | None = None,
    book_id: str | None = None,
) -> BookRecord:
    """Insert a new book record.

    Args:
        user_id: Owner of the book
        title: Book title
        book_type: 'pdf' or 'text'
        total_pages: Page count (rendered document or user-entered)
        author: Optional author name
        content: Full text for text books
        file_url: Storage key or URL for PDF books
        language: ISO 639-1 language code if detected
        book_id: Explicit id (UUID v4 generated when omitted)

    Returns:
        The inserted BookRecord

    Raises:
        sqlite3.IntegrityError: If book_id already exists or book_type is invalid
    """
    record = BookRecord(
        id=book_id or str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        author=author or None,
        total_pages=total_pages,
        content=content,
        file_url=file_url,
        book_type=book_type,
        language=language,
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO books (
                id, user_id, title, author, total_pages,
                content, file_url, book_type, language, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.user_id,
                record.title,
                record.author,
                record.total_pages,
                record.content,
                record.file_url,
                record.book_type,
                record.language,
                record.created_at,
            ),
        )

    logger.debug("books.inserted", book_id=record.id, user_id=user_id)
    return record


def get_book_by_id(book_id: str, user_id: str | None = None) -> BookRecord | None:
    """Get book by ID, optionally restricted to its owner.

    Returns:
        BookRecord if found, None otherwise
    """
    query = "SELECT * FROM books WHERE id = ?"
    params: tuple = (book_id,)
    if user_id is not None:
        query += " AND user_id = ?"
        params = (book_id, user_id)

    with get_db() as conn:
        row = conn.execute(query, params).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_books(user_id: str | None = None) -> list[BookRecord]:
    """List books, newest first. All users' books when user_id is None."""
    with get_db() as conn:
        if user_id is None:
            rows = conn.execute(
                "SELECT * FROM books ORDER BY created_at DESC"
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM books WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            ).fetchall()

    return [_row_to_record(row) for row in rows]


def count_books(user_id: str) -> int:
    """Count books owned by a user."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM books WHERE user_id = ?", (user_id,)
        ).fetchone()
    return int(row["n"])


def list_book_owners() -> list[dict[str, str]]:
    """Get one {user_id} row per book, for leaderboard aggregation."""
    with get_db() as conn:
        rows = conn.execute("SELECT user_id FROM books").fetchall()
    return [{"user_id": row["user_id"]} for row in rows]


def delete_book(book_id: str, user_id: str) -> bool:
    """Delete a user's book by ID.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM books WHERE id = ? AND user_id = ?", (book_id, user_id)
        )

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("books.deleted", book_id=book_id)

    return deleted


def _row_to_record(row) -> BookRecord:
    """Convert database row to BookRecord."""
    return BookRecord(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        author=row["author"],
        total_pages=row["total_pages"],
        content=row["content"],
        file_url=row["file_url"],
        book_type=row["book_type"],
        language=row["language"],
        created_at=row["created_at"],
    )
