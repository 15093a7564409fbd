"""Pagination of book content.

Text books are split into fixed windows of words. PDF books are paginated
by the external renderer; only their page count is used here.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cosmos.db.books_repository import BookRecord

WORDS_PER_PAGE = 300

# Characters per page used to estimate total_pages for pasted text
CHARS_PER_ESTIMATED_PAGE = 2000


def split_text_into_pages(text: str, words_per_page: int = WORDS_PER_PAGE) -> list[str]:
    """Split free-form text into pages of at most words_per_page words.

    The final partial window is kept as a short page. Content with no
    words yields a single page holding the original string.

    Args:
        text: Book content
        words_per_page: Window size in words

    Returns:
        List of page strings (never empty)
    """
    if words_per_page < 1:
        raise ValueError("words_per_page must be >= 1")

    words = text.split()
    pages = [
        " ".join(words[i : i + words_per_page])
        for i in range(0, len(words), words_per_page)
    ]

    return pages if pages else [text]


def text_page_count(text: str, words_per_page: int = WORDS_PER_PAGE) -> int:
    """Page count for text content: max(1, ceil(words / words_per_page))."""
    return max(1, math.ceil(len(text.split()) / words_per_page))


def clamp_page(page: int, total_pages: int) -> int:
    """Nearest valid 1-based page; a book with no pages still reports page 1."""
    return min(max(1, page), max(1, total_pages))


def estimate_text_pages(text: str) -> int:
    """Rough page estimate stored when a text book has no explicit page count."""
    return math.ceil(len(text) / CHARS_PER_ESTIMATED_PAGE)


def total_pages_for(book: BookRecord, words_per_page: int = WORDS_PER_PAGE) -> int:
    """Number of navigable pages for a book.

    Text books are measured from their content; PDF books use the stored
    page count from the rendered document or user-entered metadata.
    """
    if book.is_text:
        return text_page_count(book.content or "", words_per_page)
    return max(0, book.total_pages)


def get_page(book: BookRecord, page: int, words_per_page: int = WORDS_PER_PAGE) -> str | None:
    """Text of a 1-based page of a text book.

    Returns None for PDF books or pages outside the book.
    """
    if not book.is_text:
        return None

    pages = split_text_into_pages(book.content or "", words_per_page)
    if page < 1 or page > len(pages):
        return None
    return pages[page - 1]


def progress_percent(pages_read: int, total_pages: int) -> float:
    """Share of the book read, as a percentage (0 for empty books)."""
    if total_pages <= 0:
        return 0.0
    return pages_read / total_pages * 100
