"""
tests/test_movie_routes.py -- Integration tests for the movie catalog routes.

Covers:
  - 401 on every movie route without a session
  - POST 201 with the stored fields, GET list with updated_by, PUT 200/404
  - body validation (missing fields, over-long fields, unknown fields) -> 400

Fixtures used (from conftest.py): api_client, user_token, admin_token.
"""

from __future__ import annotations

import pytest

MOVIE = {
    "name": "The Matrix",
    "actor": "Keanu Reeves",
    "genre": "Sci-Fi",
    "description": "A hacker learns the truth about his reality.",
}


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestMovieAuthFailure:
    """Unauthenticated requests to movie routes must return 401."""

    def test_list_unauthenticated(self, api_client) -> None:
        assert api_client.client.get("/api/movies").status_code == 401

    def test_create_unauthenticated(self, api_client) -> None:
        assert api_client.client.post("/api/movies", json=MOVIE).status_code == 401

    def test_update_unauthenticated(self, api_client) -> None:
        assert api_client.client.put("/api/movies/1", json=MOVIE).status_code == 401


class TestMovieRoutes:
    def test_create_movie(self, api_client, user_token) -> None:
        resp = api_client.client.post("/api/movies", json=MOVIE, headers=_auth(user_token))
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert isinstance(data["id"], int)
        assert {k: data[k] for k in MOVIE} == MOVIE
        assert data["updated_by"] == "testuser", "Create must return the stored row, author included"
        assert data["created_at"] and data["created_at"] == data["updated_at"]
        stored = api_client.movie_store.get_movie(data["id"])
        assert data["created_at"] == stored.created_at

    def test_list_movies(self, api_client, user_token) -> None:
        created = api_client.client.post(
            "/api/movies", json={**MOVIE, "name": "Speed"}, headers=_auth(user_token)
        ).json()
        resp = api_client.client.get("/api/movies", headers=_auth(user_token))
        assert resp.status_code == 200
        movies = resp.json()
        assert isinstance(movies, list)
        assert movies[0]["id"] == created["id"], "Newest movie must come first"
        assert movies[0]["updated_by"] == "testuser"
        assert movies[0]["created_at"] and movies[0]["updated_at"]

    def test_update_movie(self, api_client, user_token, admin_token) -> None:
        movie_id = api_client.client.post("/api/movies", json=MOVIE, headers=_auth(user_token)).json()["id"]
        changed = {**MOVIE, "genre": "Action", "description": "Whoa."}
        resp = api_client.client.put(f"/api/movies/{movie_id}", json=changed, headers=_auth(admin_token))
        assert resp.status_code == 200
        assert resp.json() == {"message": "Movie updated successfully"}

        stored = api_client.movie_store.get_movie(movie_id)
        assert (stored.genre, stored.description) == ("Action", "Whoa.")
        assert stored.updated_by == "testadmin", "updated_by must record the last editor"

    def test_update_missing_movie(self, api_client, user_token) -> None:
        resp = api_client.client.put("/api/movies/999999", json=MOVIE, headers=_auth(user_token))
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Movie not found"

    def test_update_non_integer_id(self, api_client, user_token) -> None:
        resp = api_client.client.put("/api/movies/abc", json=MOVIE, headers=_auth(user_token))
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            {k: v for k, v in MOVIE.items() if k != "actor"},
            {**MOVIE, "name": ""},
            {**MOVIE, "name": "n" * 101},
            {**MOVIE, "genre": "g" * 51},
            {**MOVIE, "description": "d" * 501},
            {**MOVIE, "rating": 5},
        ],
    )
    def test_invalid_body_rejected(self, api_client, user_token, body) -> None:
        count = len(api_client.movie_store.list_movies())
        resp = api_client.client.post("/api/movies", json=body, headers=_auth(user_token))
        assert resp.status_code == 400, f"Expected 400, got {resp.status_code}: {resp.text}"
        assert resp.json()["error"]["code"] == "validation_error"
        assert len(api_client.movie_store.list_movies()) == count, "Rejected body must not be stored"
