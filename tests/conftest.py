"""Shared pytest fixtures.

Every test that touches persistence gets its own SQLite file under
tmp_path, so tests never see each other's rows.
"""

from pathlib import Path

import pytest

from cosmos.config import clear_config_cache
from cosmos.core.session import Session
from cosmos.db import init_db


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized empty database."""
    path = tmp_path / "cosmos.db"
    init_db(path)
    return path


@pytest.fixture
def session() -> Session:
    """Signed-in reader."""
    return Session(user_id="user-aaaa-1111", email="reader@example.com")


@pytest.fixture
def other_session() -> Session:
    """A second reader for isolation checks."""
    return Session(user_id="user-bbbb-2222", email="other@example.com")


@pytest.fixture
def sample_text() -> str:
    """650 words with glossary terms in the first page."""
    intro = "The aurora lights the ionosphere while solar radiation reaches the magnetosphere."
    filler = " ".join(f"word{i}" for i in range(650 - len(intro.split())))
    return f"{intro} {filler}"


@pytest.fixture(autouse=True)
def _fresh_config():
    """Never leak a cached AppConfig between tests."""
    clear_config_cache()
    yield
    clear_config_cache()
