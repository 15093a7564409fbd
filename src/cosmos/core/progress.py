"""Reading progress tracker.

Keeps the current page of one book for one reader and persists a
monotonic pages-read high-water-mark. Persistence failures never block
navigation: the page still advances and the error is logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import structlog

from cosmos.core.pagination import clamp_page
from cosmos.db import progress_repository

logger = structlog.get_logger(__name__)

# (user_id, book_id, current_page, pages_read, last_read_at) -> None
ProgressWriter = Callable[[str, str, int, int, str], None]


@dataclass
class ProgressState:
    """Snapshot of a reader's position in a book."""

    current_page: int
    pages_read: int
    total_pages: int


class ProgressTracker:
    """Tracks navigation within a single book.

    Args:
        user_id: Reader owning the progress row
        book_id: Book being read
        total_pages: Navigable page count (see pagination.total_pages_for)
        current_page: Starting page
        pages_read: Stored high-water-mark
        writer: Persistence function (defaults to the reading_progress upsert)
    """

    def __init__(
        self,
        user_id: str,
        book_id: str,
        total_pages: int,
        current_page: int = 1,
        pages_read: int = 0,
        writer: ProgressWriter | None = None,
    ):
        self.user_id = user_id
        self.book_id = book_id
        self.total_pages = max(0, total_pages)
        self.current_page = clamp_page(current_page, self.total_pages)
        self.pages_read = min(max(0, pages_read), self.total_pages)
        self._writer = writer or progress_repository.upsert_progress
        self.last_write_ok: bool | None = None

    @classmethod
    def load(
        cls,
        user_id: str,
        book_id: str,
        total_pages: int,
        writer: ProgressWriter | None = None,
    ) -> ProgressTracker:
        """Restore a tracker from the stored progress row, if any."""
        record = progress_repository.get_progress(user_id, book_id)
        if record is None:
            return cls(user_id, book_id, total_pages, writer=writer)

        return cls(
            user_id,
            book_id,
            total_pages,
            current_page=record.current_page or 1,
            pages_read=record.pages_read or 0,
            writer=writer,
        )

    @property
    def state(self) -> ProgressState:
        return ProgressState(
            current_page=self.current_page,
            pages_read=self.pages_read,
            total_pages=self.total_pages,
        )

    def go_to_page(self, page: int) -> bool:
        """Move to a page and record progress.

        Targets outside [1, total_pages] are ignored.

        Returns:
            True if the page was accepted, False if rejected
        """
        if page < 1 or page > self.total_pages:
            logger.debug(
                "progress.page_rejected",
                book_id=self.book_id,
                page=page,
                total_pages=self.total_pages,
            )
            return False

        self.current_page = page
        self.record_progress(page)
        return True

    def record_progress(self, page: int) -> bool:
        """Persist position and the pages-read high-water-mark.

        Returns:
            True if the write succeeded, False if it failed and was logged
        """
        pages_read = min(max(self.pages_read, page), self.total_pages)
        now = datetime.now(timezone.utc).isoformat()

        try:
            self._writer(self.user_id, self.book_id, page, pages_read, now)
        except Exception as e:
            logger.warning(
                "progress.persist_failed",
                user_id=self.user_id,
                book_id=self.book_id,
                page=page,
                error=str(e),
            )
            self.last_write_ok = False
            return False

        self.pages_read = pages_read
        self.last_write_ok = True
        return True
