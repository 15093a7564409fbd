"""Tests for the reading progress tracker."""

from unittest.mock import MagicMock

from cosmos.core.progress import ProgressTracker
from cosmos.db import books_repository, progress_repository


class TestGoToPage:
    """Tests for navigation with an injected writer."""

    def test_valid_page_moves_and_persists(self):
        """Accepted page updates position and writes once."""
        writer = MagicMock()
        tracker = ProgressTracker("u1", "b1", total_pages=3, writer=writer)

        assert tracker.go_to_page(2) is True
        assert tracker.current_page == 2
        assert tracker.pages_read == 2
        assert tracker.last_write_ok is True

        args = writer.call_args.args
        assert args[:4] == ("u1", "b1", 2, 2)

    def test_out_of_range_is_no_op(self):
        """Pages below 1 or above total leave state untouched and write nothing."""
        writer = MagicMock()
        tracker = ProgressTracker("u1", "b1", total_pages=3, writer=writer)

        assert tracker.go_to_page(0) is False
        assert tracker.go_to_page(4) is False
        assert tracker.current_page == 1
        assert tracker.pages_read == 0
        writer.assert_not_called()

    def test_pages_read_never_decreases(self):
        """Going back keeps the high-water-mark."""
        writer = MagicMock()
        tracker = ProgressTracker("u1", "b1", total_pages=5, writer=writer)

        tracker.go_to_page(4)
        tracker.go_to_page(2)

        assert tracker.current_page == 2
        assert tracker.pages_read == 4
        assert writer.call_args.args[2:4] == (2, 4)

    def test_failed_write_still_moves(self):
        """Persistence failure is logged, navigation still happens."""
        writer = MagicMock(side_effect=RuntimeError("db down"))
        tracker = ProgressTracker("u1", "b1", total_pages=3, writer=writer)

        assert tracker.go_to_page(3) is True
        assert tracker.current_page == 3
        assert tracker.pages_read == 0
        assert tracker.last_write_ok is False

    def test_empty_pdf_rejects_every_page(self):
        """A PDF with no page count cannot be navigated."""
        writer = MagicMock()
        tracker = ProgressTracker("u1", "b1", total_pages=0, writer=writer)

        assert tracker.go_to_page(1) is False
        writer.assert_not_called()

    def test_constructor_clamps_inputs(self):
        tracker = ProgressTracker("u1", "b1", total_pages=3, current_page=9, pages_read=7)
        assert tracker.current_page == 3
        assert tracker.pages_read == 3


class TestPersistence:
    """Tests against the reading_progress table."""

    def test_load_without_row_starts_at_page_one(self, db_path, session):
        tracker = ProgressTracker.load(session.user_id, "missing", total_pages=3)
        assert tracker.state.current_page == 1
        assert tracker.state.pages_read == 0

    def test_round_trip_through_database(self, db_path, session, sample_text):
        book = books_repository.insert_book(
            user_id=session.user_id,
            title="Auroras",
            book_type="text",
            total_pages=1,
            content=sample_text,
        )
        tracker = ProgressTracker.load(session.user_id, book.id, total_pages=3)
        tracker.go_to_page(3)
        tracker.go_to_page(1)

        record = progress_repository.get_progress(session.user_id, book.id)
        assert record.current_page == 1
        assert record.pages_read == 3

        reloaded = ProgressTracker.load(session.user_id, book.id, total_pages=3)
        assert reloaded.current_page == 1
        assert reloaded.pages_read == 3
