"""
tests/conftest.py -- Shared test fixtures for movie list integration tests.

This module provides:
  - _make_test_stores(): isolated in-memory users and movies DBs plus a
    FakeRedis-backed SessionStore
  - _patch_lifespan(): wires those stores into app.state, bypassing real startup
  - api_client: TestClient plus handles on every store, one per test module
  - login: helper fixture that logs a user in and returns the bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any api/auth import so get_settings()
auto-generates JWT_SECRET in dev mode rather than raising ValueError.
BCRYPT_ROUNDS=4 keeps password hashing fast.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set before any api/auth/core import so get_settings() can
# auto-generate JWT_SECRET in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from auth.tokens import hash_password
from fakes import FakeClock, FakeRedis
from movies.store import MovieStore
from sessions.store import SessionStore

ADMIN_USERNAME, ADMIN_PASSWORD = "testadmin", "testpass123"
USER_USERNAME, USER_PASSWORD = "testuser", "userpass123"


@dataclass
class Harness:
    """Everything a route test may need to reach behind the HTTP surface."""

    client: TestClient
    user_store: UserStore
    movie_store: MovieStore
    sessions: SessionStore
    redis: FakeRedis
    clock: FakeClock


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, MovieStore, SessionStore, FakeRedis]:
    """Create isolated stores for one test module.

    Args:
        db_suffix: Unique string appended to the DB names so test modules
                   don't share state.
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    movies_url = f"sqlite:///file:test_movies_{db_suffix}?mode=memory&cache=shared&uri=true"
    fake = FakeRedis()
    sessions = SessionStore(ttl=600, client=fake)
    return UserStore(db_url=users_url), MovieStore(db_url=movies_url), sessions, fake


def _patch_lifespan(user_store: UserStore, movie_store: MovieStore, sessions: SessionStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs and the fake session backend rather than real services.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.movie_store = movie_store
        app.state.sessions = sessions
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[Harness, None, None]:
    """Yield a Harness for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan, so
    tests hit real route handlers and dependencies but use isolated stores.
    An admin (testadmin/testpass123) and a regular user (testuser/userpass123)
    exist before the client starts.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, movie_store, sessions, fake = _make_test_stores(suffix)

    user_store.create_user(ADMIN_USERNAME, hash_password(ADMIN_PASSWORD), is_admin=True)
    user_store.create_user(USER_USERNAME, hash_password(USER_PASSWORD))

    app.router.lifespan_context = _patch_lifespan(user_store, movie_store, sessions)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield Harness(
            client=client,
            user_store=user_store,
            movie_store=movie_store,
            sessions=sessions,
            redis=fake,
            clock=fake.clock,
        )

    movie_store.close()
    user_store.close()


@pytest.fixture
def login(api_client: Harness) -> Callable[[str, str], str]:
    """Return a function that logs in through the API and returns the token."""

    def _login(username: str, password: str) -> str:
        resp = api_client.client.post("/api/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, f"Login as {username} failed: {resp.status_code} {resp.text}"
        return resp.json()["token"]

    return _login


@pytest.fixture
def admin_token(login) -> str:
    return login(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def user_token(login) -> str:
    return login(USER_USERNAME, USER_PASSWORD)

