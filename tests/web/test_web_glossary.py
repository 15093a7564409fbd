"""Tests for glossary and keyword endpoints."""

from cosmos.llm.client import LLMConnectionError


class TestGlossary:
    """Tests for /api/glossary."""

    def test_list(self, client):
        data = client.get("/api/glossary").json()
        assert data["count"] == len(data["entries"])
        assert "Aurora" in [e["term"] for e in data["entries"]]

    def test_lookup_found(self, client):
        data = client.get("/api/glossary/Aurora!").json()
        assert data["key"] == "aurora"
        assert data["entry"]["category"] == "Phenomenon"

    def test_lookup_missing_is_null_not_404(self, client):
        response = client.get("/api/glossary/radiação")
        assert response.status_code == 200
        assert response.json()["entry"] is None

    def test_click_counts_and_unlocks(self, client, headers):
        data = client.post("/api/glossary/Hubble/click", headers=headers).json()

        assert data["counters"] == ["keyword_clicks", "hubble_clicks"]
        assert data["unlocked"] == ["hubble-explorer"]

        again = client.post("/api/glossary/Hubble/click", headers=headers).json()
        assert again["unlocked"] == []

    def test_click_requires_identity(self, client):
        assert client.post("/api/glossary/aurora/click").status_code == 401


class TestKeywords:
    """Tests for /api/keywords."""

    def test_frequency_default(self, client, headers, text_book):
        data = client.get("/api/keywords", headers=headers).json()

        assert data["strategy"] == "frequency"
        words = [k["keyword"] for k in data["keywords"]]
        assert words == sorted(words)
        assert data["count"] == len(words) <= 50
        aurora = next(k for k in data["keywords"] if k["keyword"] == "aurora")
        assert aurora["has_glossary_entry"] is True

    def test_static(self, client, headers, text_book):
        data = client.get("/api/keywords?strategy=static", headers=headers).json()
        assert [k["keyword"] for k in data["keywords"]] == ["aurora"]

    def test_ai_uses_injected_client(self, client, headers, text_book, mock_llm_client):
        mock_llm_client.simple_json.side_effect = [
            {"keywords": ["solar wind"]},
            {"definition": "Stream of charged particles", "category": "Sun"},
        ]

        data = client.get("/api/keywords?strategy=ai", headers=headers).json()

        (keyword,) = data["keywords"]
        assert keyword["keyword"] == "solar wind"
        assert keyword["source"] == "ai"
        assert keyword["definition"] == "Stream of charged particles"

    def test_ai_failure_falls_back(self, client, headers, text_book, mock_llm_client):
        mock_llm_client.simple_json.side_effect = LLMConnectionError("offline")

        data = client.get("/api/keywords?strategy=ai", headers=headers).json()
        assert data["count"] > 0
        assert {k["source"] for k in data["keywords"]} == {"frequency"}

    def test_unknown_strategy_is_400(self, client, headers):
        response = client.get("/api/keywords?strategy=magic", headers=headers)
        assert response.status_code == 400

    def test_empty_library(self, client, headers):
        assert client.get("/api/keywords", headers=headers).json()["count"] == 0
