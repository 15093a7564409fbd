"""Book creation for a user's library.

Responsibilities:
- Validate required fields before anything is stored
- Text books: store content, estimate total_pages when not given
- PDF books: copy the file under uploads/{user_id}/, read page count
  and metadata with PyMuPDF
- Register the book in SQLite
"""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from cosmos.config import load_app_config
from cosmos.core.pagination import estimate_text_pages
from cosmos.core.pdf_extractor import detect_language, inspect_pdf
from cosmos.db.books_repository import BookRecord, insert_book

if TYPE_CHECKING:
    from cosmos.core.session import Session

logger = structlog.get_logger(__name__)

UPLOADS_DIR = Path("data/uploads")


class BookImportError(Exception):
    """Base exception for book import errors."""

    pass


class InvalidBookError(BookImportError):
    """Raised when a required field is missing or invalid."""

    pass


class UnsupportedFormatError(BookImportError):
    """Raised when an uploaded file is not a PDF."""

    def __init__(self, file_path: Path):
        self.file_path = file_path
        super().__init__(f"Unsupported format: {file_path.suffix or '(none)'} (expected .pdf)")


def add_text_book(
    session: Session,
    title: str,
    content: str,
    author: str | None = None,
    total_pages: int | None = None,
) -> BookRecord:
    """Create a text book from pasted content.

    Raises:
        InvalidBookError: If title or content is empty, or total_pages < 0
    """
    title = (title or "").strip()
    if not title:
        raise InvalidBookError("Title is required")
    if not content or not content.strip():
        raise InvalidBookError("Content is required for text books")
    if total_pages is not None and total_pages < 0:
        raise InvalidBookError("total_pages must be >= 0")

    pages = total_pages or estimate_text_pages(content)

    book = insert_book(
        user_id=session.user_id,
        title=title,
        author=(author or "").strip() or None,
        content=content,
        total_pages=pages,
        book_type="text",
        language=detect_language(content),
    )

    logger.info("book_importer.text_added", book_id=book.id, total_pages=pages)
    return book


def add_pdf_book(
    session: Session,
    title: str | None = None,
    file_path: Path | None = None,
    author: str | None = None,
    total_pages: int | None = None,
    file_url: str | None = None,
    uploads_dir: Path | None = None,
) -> BookRecord:
    """Create a PDF book from an uploaded file or an existing storage URL.

    With a file, the PDF is copied to ``uploads/{user_id}/{millis}.pdf``
    and its page count is read from the document unless total_pages is
    given. Without a file, file_url and the user-entered page count
    (default 0) are stored as-is.

    Raises:
        InvalidBookError: If no title can be determined or nothing to store
        UnsupportedFormatError: If file_path is not a .pdf
        ProtectedPdfError: If the PDF is encrypted
    """
    if file_path is None and not file_url:
        raise InvalidBookError("A PDF file or file URL is required")
    if total_pages is not None and total_pages < 0:
        raise InvalidBookError("total_pages must be >= 0")

    language = None
    if file_path is not None:
        if file_path.suffix.lower() != ".pdf":
            raise UnsupportedFormatError(file_path)

        info = inspect_pdf(file_path)
        title = title or info.title
        author = author or info.author
        language = info.language
        if total_pages is None:
            total_pages = info.total_pages

    title = (title or "").strip()
    if not title:
        raise InvalidBookError("Title is required")

    if file_path is not None:
        file_url = _store_upload(session.user_id, file_path, uploads_dir or _uploads_dir())

    book = insert_book(
        user_id=session.user_id,
        title=title,
        author=(author or "").strip() or None,
        file_url=file_url,
        total_pages=total_pages or 0,
        book_type="pdf",
        language=language,
    )

    logger.info(
        "book_importer.pdf_added",
        book_id=book.id,
        total_pages=book.total_pages,
        file_url=file_url,
    )
    return book


def _uploads_dir() -> Path:
    return Path(load_app_config().paths.get("uploads_dir") or UPLOADS_DIR)


def _store_upload(user_id: str, file_path: Path, uploads_dir: Path) -> str:
    """Copy an upload into the user's folder and return its storage key."""
    key = f"{user_id}/{int(time.time() * 1000)}.pdf"
    target = uploads_dir / key
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(file_path, target)
    return key
