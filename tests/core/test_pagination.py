"""Tests for text pagination."""

import pytest

from cosmos.core.pagination import (
    WORDS_PER_PAGE,
    clamp_page,
    estimate_text_pages,
    get_page,
    progress_percent,
    split_text_into_pages,
    text_page_count,
    total_pages_for,
)
from cosmos.db.books_repository import BookRecord


def _book(book_type="text", content=None, total_pages=0) -> BookRecord:
    return BookRecord(
        id="book-1",
        user_id="user-1",
        title="Space Weather",
        author=None,
        total_pages=total_pages,
        content=content,
        file_url=None,
        book_type=book_type,
        language=None,
        created_at="2026-01-01T00:00:00+00:00",
    )


class TestSplitTextIntoPages:
    """Tests for split_text_into_pages."""

    def test_650_words_make_three_pages(self, sample_text):
        """300 + 300 + 50 words."""
        pages = split_text_into_pages(sample_text)

        assert len(pages) == 3
        assert len(pages[0].split()) == 300
        assert len(pages[1].split()) == 300
        assert len(pages[2].split()) == 50

    def test_exact_multiple_has_no_empty_page(self):
        """600 words is exactly two full pages."""
        text = " ".join(["star"] * 600)
        pages = split_text_into_pages(text)

        assert len(pages) == 2
        assert all(len(p.split()) == WORDS_PER_PAGE for p in pages)

    def test_whitespace_runs_collapse(self):
        """Any run of whitespace separates words, joined by single spaces."""
        pages = split_text_into_pages("solar\n\n  wind\tand   aurora")
        assert pages == ["solar wind and aurora"]

    def test_empty_content_yields_single_page(self):
        """No words: one page holding the original string."""
        assert split_text_into_pages("") == [""]
        assert split_text_into_pages("   \n ") == ["   \n "]

    def test_custom_window(self):
        """words_per_page controls the window size."""
        pages = split_text_into_pages("a b c d e", words_per_page=2)
        assert pages == ["a b", "c d", "e"]

    def test_rejects_zero_window(self):
        """A page must hold at least one word."""
        with pytest.raises(ValueError):
            split_text_into_pages("a b", words_per_page=0)


class TestPageCounts:
    """Tests for page count helpers."""

    def test_text_page_count_rounds_up(self, sample_text):
        assert text_page_count(sample_text) == 3

    def test_text_page_count_minimum_one(self):
        """Empty text still has one navigable page."""
        assert text_page_count("") == 1

    def test_estimate_uses_characters(self):
        """Pasted text estimate: one page per 2000 characters, rounded up."""
        assert estimate_text_pages("x" * 2000) == 1
        assert estimate_text_pages("x" * 2001) == 2
        assert estimate_text_pages("") == 0

    def test_total_pages_for_text_book_uses_content(self, sample_text):
        """Stored total_pages is ignored for text books."""
        book = _book(content=sample_text, total_pages=99)
        assert total_pages_for(book) == 3

    def test_total_pages_for_pdf_uses_stored_count(self):
        assert total_pages_for(_book(book_type="pdf", total_pages=42)) == 42

    def test_total_pages_for_pdf_without_count_is_zero(self):
        assert total_pages_for(_book(book_type="pdf", total_pages=0)) == 0

    def test_clamp_page(self):
        assert clamp_page(2, 3) == 2
        assert clamp_page(99, 3) == 3
        assert clamp_page(0, 3) == 1
        assert clamp_page(5, 0) == 1


class TestGetPage:
    """Tests for get_page."""

    def test_returns_requested_page(self, sample_text):
        book = _book(content=sample_text)
        last = get_page(book, 3)

        assert last is not None
        assert len(last.split()) == 50

    def test_out_of_range_returns_none(self, sample_text):
        book = _book(content=sample_text)
        assert get_page(book, 0) is None
        assert get_page(book, 4) is None

    def test_pdf_has_no_text_pages(self):
        assert get_page(_book(book_type="pdf", total_pages=10), 1) is None


class TestProgressPercent:
    """Tests for progress_percent."""

    def test_percentage(self):
        assert progress_percent(1, 4) == 25.0

    def test_empty_book_is_zero(self):
        assert progress_percent(0, 0) == 0.0
