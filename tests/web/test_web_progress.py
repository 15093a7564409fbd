"""Tests for progress endpoints."""


class TestProgress:
    """Tests for GET/PUT /api/progress/{book_id}."""

    def test_initial_state(self, client, headers, text_book):
        data = client.get(f"/api/progress/{text_book['id']}", headers=headers).json()

        assert data["current_page"] == 1
        assert data["pages_read"] == 0
        assert data["total_pages"] == 3
        assert data["percent"] == 0.0

    def test_move_forward_and_back(self, client, headers, text_book):
        url = f"/api/progress/{text_book['id']}"

        forward = client.put(url, json={"page": 3}, headers=headers).json()
        back = client.put(url, json={"page": 2}, headers=headers).json()

        assert forward["moved"] is True
        assert forward["persisted"] is True
        assert back["current_page"] == 2
        assert back["pages_read"] == 3
        assert back["percent"] == 100.0

        state = client.get(url, headers=headers).json()
        assert state["current_page"] == 2
        assert state["pages_read"] == 3

    def test_out_of_range_is_not_moved(self, client, headers, text_book):
        url = f"/api/progress/{text_book['id']}"
        data = client.put(url, json={"page": 9}, headers=headers).json()

        assert data["moved"] is False
        assert data["current_page"] == 1
        assert client.get(url, headers=headers).json()["pages_read"] == 0

    def test_progress_shows_in_book_list(self, client, headers, text_book):
        client.put(f"/api/progress/{text_book['id']}", json={"page": 2}, headers=headers)

        book = client.get("/api/books", headers=headers).json()["books"][0]
        assert book["progress"]["pages_read"] == 2

    def test_unknown_book(self, client, headers):
        assert client.get("/api/progress/nope", headers=headers).status_code == 404
        assert client.put("/api/progress/nope", json={"page": 1}, headers=headers).status_code == 404
