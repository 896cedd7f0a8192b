"""
tests/test_user_store.py -- Unit tests for UserStore (users database).

Uses a temporary SQLite file per test, so every test starts from an empty
users table.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from api.main import ensure_admin
from auth.store import UserStore
from core.config import Settings


@pytest.fixture
def store(tmp_path):
    s = UserStore(f"sqlite:///{tmp_path / 'users.db'}")
    yield s
    s.close()


def test_create_and_get(store: UserStore) -> None:
    created = store.create_user("alice", "$2b$hash", is_admin=False)
    assert created.id is not None
    fetched = store.get_by_username("alice")
    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.hashed_password == "$2b$hash"
    assert fetched.is_admin is False
    assert fetched.created_at and fetched.updated_at


def test_admin_flag_reads_back_as_bool(store: UserStore) -> None:
    store.create_user("root", "$2b$hash", is_admin=True)
    assert store.get_by_username("root").is_admin is True


def test_unknown_username_is_none(store: UserStore) -> None:
    assert store.get_by_username("ghost") is None


def test_username_lookup_is_case_sensitive(store: UserStore) -> None:
    store.create_user("Alice", "$2b$hash")
    assert store.get_by_username("alice") is None


def test_duplicate_username_raises(store: UserStore) -> None:
    store.create_user("alice", "$2b$hash")
    with pytest.raises(IntegrityError):
        store.create_user("alice", "$2b$other")


def test_list_newest_first(store: UserStore) -> None:
    for name in ("first", "second", "third"):
        store.create_user(name, "$2b$hash")
    assert [u.username for u in store.list_users()] == ["third", "second", "first"]


def test_delete(store: UserStore) -> None:
    store.create_user("alice", "$2b$hash")
    assert store.delete_user("alice") is True
    assert store.get_by_username("alice") is None
    assert store.delete_user("alice") is False, "Second delete must report not found"


def test_set_admin(store: UserStore) -> None:
    store.create_user("alice", "$2b$hash")
    assert store.set_admin("alice", True) is True
    assert store.get_by_username("alice").is_admin is True
    assert store.set_admin("ghost", True) is False


def test_ping(store: UserStore) -> None:
    assert store.ping() is True


class TestBootstrapAdmin:
    def test_created_when_configured(self, store: UserStore) -> None:
        ensure_admin(store, Settings(_env_file=None, debug=True, admin_username="root", admin_password="rootpass1"))
        assert store.get_by_username("root").is_admin is True

    def test_existing_account_untouched(self, store: UserStore) -> None:
        store.create_user("root", "$2b$hash", is_admin=False)
        ensure_admin(store, Settings(_env_file=None, debug=True, admin_username="root", admin_password="rootpass1"))
        user = store.get_by_username("root")
        assert (user.is_admin, user.hashed_password) == (False, "$2b$hash")

    def test_skipped_without_password(self, store: UserStore) -> None:
        ensure_admin(store, Settings(_env_file=None, debug=True, admin_username="root", admin_password=""))
        assert store.list_users() == []
