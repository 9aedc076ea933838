"""Tests for the author and book blueprints through the Flask test client."""

from __future__ import annotations

import uuid
from unittest.mock import patch

import pytest

from backend.app import create_app


@pytest.fixture
def client(services, cache_store):
    app = create_app(config={"TESTING": True}, cache_store=cache_store)
    with patch(
        "backend.factories.service_factory.ServiceFactory.create_catalog_services",
        return_value=services,
    ):
        yield app.test_client()


@pytest.fixture
def author_id(client, author_payload):
    response = client.post("/authors", json=author_payload)
    assert response.status_code == 201
    return response.get_json()["_id"]


class TestAuthorRoutes:
    def test_create_and_fetch(self, client, author_id):
        response = client.get(f"/authors/{author_id}")
        assert response.status_code == 200
        body = response.get_json()
        assert body["first_name"] == "Jane"
        assert body["numOfBooks"] == 0

    def test_list_and_search(self, client, author_id):
        assert [a["_id"] for a in client.get("/authors").get_json()] == [author_id]
        assert [a["_id"] for a in client.get("/authors/search?term=DOE").get_json()] == [author_id]

    def test_validation_error_is_400(self, client, author_payload):
        author_payload["date_of_birth"] = "not a date"
        response = client.post("/authors", json=author_payload)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid date_of_birth", "code": "BAD_REQUEST"}

    @pytest.mark.parametrize("body", ["{not json", "[\"a\", \"b\"]", "42"])
    def test_body_must_be_a_json_object(self, client, author_id, body):
        for method, url in ((client.post, "/authors"), (client.patch, f"/authors/{author_id}")):
            response = method(url, data=body, content_type="application/json")
            assert response.status_code == 400
            assert response.get_json() == {"error": "Request body must be a JSON object", "code": "BAD_REQUEST"}

    def test_missing_author_is_404(self, client):
        response = client.get(f"/authors/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.get_json()["code"] == "NOT_FOUND"

    def test_edit(self, client, author_id):
        response = client.patch(f"/authors/{author_id}", json={"hometownCity": "Dallas"})
        assert response.status_code == 200
        assert response.get_json()["hometownCity"] == "Dallas"

    def test_books_limit_must_be_positive(self, client, author_id):
        assert client.get(f"/authors/{author_id}/books?limit=0").status_code == 400
        assert client.get(f"/authors/{author_id}/books?limit=abc").status_code == 400
        assert client.get(f"/authors/{author_id}/books").get_json() == []

    def test_remove_cascades(self, client, author_id, make_book_payload):
        book_id = client.post("/books", json=make_book_payload(author_id)).get_json()["_id"]

        response = client.delete(f"/authors/{author_id}")

        assert response.status_code == 200
        assert [b["_id"] for b in response.get_json()["books"]] == [book_id]
        assert client.get(f"/books/{book_id}").status_code == 404

    def test_unexpected_error_is_500(self, client, services):
        with patch.object(services.authors, "get_authors", side_effect=RuntimeError("boom")):
            response = client.get("/authors")
        assert response.status_code == 500
        assert response.get_json() == {"error": "boom"}


class TestBookRoutes:
    def test_create_counts_against_author(self, client, author_id, make_book_payload):
        response = client.post("/books", json=make_book_payload(author_id))
        assert response.status_code == 201
        book_id = response.get_json()["_id"]

        author = client.get(f"/authors/{author_id}").get_json()
        assert author["numOfBooks"] == 1 and author["books"] == [book_id]
        assert client.get(f"/books/{book_id}/author").get_json()["_id"] == author_id

    def test_views(self, client, author_id, make_book_payload):
        client.post("/books", json=make_book_payload(author_id, price=12.5))
        assert len(client.get("/books/genre/fiction").get_json()) == 1
        assert len(client.get("/books/price?min=10&max=20").get_json()) == 1
        assert client.get("/books/price?min=10&max=5").status_code == 400
        assert client.get("/books/price").status_code == 400

    def test_edit_and_remove(self, client, author_id, make_book_payload):
        book_id = client.post("/books", json=make_book_payload(author_id)).get_json()["_id"]

        response = client.patch(f"/books/{book_id}", json={"title": "New Title"})
        assert response.status_code == 200
        assert response.get_json()["title"] == "New Title"

        assert client.delete(f"/books/{book_id}").status_code == 200
        assert client.get(f"/authors/{author_id}").get_json()["numOfBooks"] == 0
        assert client.get("/books").get_json() == []

    def test_book_body_must_be_a_json_object(self, client, author_id, make_book_payload):
        book_id = client.post("/books", json=make_book_payload(author_id)).get_json()["_id"]
        assert client.post("/books", data="{not json", content_type="application/json").status_code == 400
        response = client.patch(f"/books/{book_id}", json=["title"])
        assert response.status_code == 400
        assert response.get_json()["code"] == "BAD_REQUEST"

    def test_bad_book_id(self, client):
        response = client.delete("/books/not-a-uuid")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid book ID"


class TestConfig:
    def test_ttls_come_from_environment(self, monkeypatch, cache_store):
        monkeypatch.setenv("CACHE_ENTITY_TTL", "120")
        app = create_app(cache_store=cache_store)
        assert app.config["CACHE_ENTITY_TTL"] == 120
        assert app.config["CACHE_LISTING_TTL"] == 3600

    @pytest.mark.parametrize("key", ["CACHE_LISTING_TTL", "CACHE_ENTITY_TTL", "CACHE_VIEW_TTL", "REDIS_SOCKET_TIMEOUT"])
    def test_non_positive_settings_are_rejected(self, cache_store, key):
        with pytest.raises(ValueError, match=key):
            create_app(config={key: 0}, cache_store=cache_store)

    def test_zero_ttl_from_environment_is_rejected(self, monkeypatch, cache_store):
        monkeypatch.setenv("CACHE_ENTITY_TTL", "0")
        with pytest.raises(ValueError, match="CACHE_ENTITY_TTL"):
            create_app(cache_store=cache_store)
