"""Fixtures for core library tests."""

from unittest.mock import MagicMock

import pytest

from cosmos.db.books_repository import BookRecord


def _make_book(
    title="Space Weather",
    author=None,
    content=None,
    book_type="text",
    book_id="book-1",
) -> BookRecord:
    return BookRecord(
        id=book_id,
        user_id="user-1",
        title=title,
        author=author,
        total_pages=0,
        content=content,
        file_url=None,
        book_type=book_type,
        language=None,
        created_at="2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def make_book():
    """Factory for in-memory book records."""
    return _make_book


@pytest.fixture
def space_book() -> BookRecord:
    """Text book about space weather."""
    return _make_book(
        title="Auroras and the Solar Wind",
        author="Ada Lovelace",
        content=(
            "Auroras appear when solar particles reach the magnetosphere. "
            "Solar storms disturb satellites. Satellites orbit Earth. "
            "The 2024 storm was strong; storm storm storm!"
        ),
    )


@pytest.fixture
def mock_llm_client():
    """Mock LLM client that never calls a real server."""
    client = MagicMock()
    client.config = MagicMock()
    client.config.provider = "lmstudio"
    client.config.model = "test-model"
    return client
