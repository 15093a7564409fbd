"""Fixtures for Web API tests."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cosmos.web.api import create_app
from cosmos.web.deps import get_llm_client


@pytest.fixture
def mock_llm_client():
    """LLM client stand-in injected through dependency overrides."""
    return MagicMock()


@pytest.fixture
def app(tmp_path, mock_llm_client):
    """App bound to a fresh database."""
    app = create_app(db_path=tmp_path / "api.db")
    app.dependency_overrides[get_llm_client] = lambda: mock_llm_client
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def headers(session):
    """Identity headers for the default reader."""
    return {"X-User-Id": session.user_id, "X-User-Email": session.email}


@pytest.fixture
def other_headers(other_session):
    return {"X-User-Id": other_session.user_id, "X-User-Email": other_session.email}


@pytest.fixture
def text_book(client, headers, sample_text):
    """A 3-page text book created through the API."""
    response = client.post(
        "/api/books",
        json={"title": "Auroras", "book_type": "text", "content": sample_text},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()
