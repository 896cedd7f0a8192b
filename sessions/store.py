"""
sessions/store.py -- Redis-backed session markers for issued tokens.

A session marker says "this exact token string is still live". The Session
Guard only accepts a token while its marker exists, so deleting the marker
(logout) or letting Redis expire it (TTL) revokes the token even though its
signature stays valid.

Record format:
  key    session:<token>
  value  JSON {"username": str, "isAdmin": bool}
  TTL    fixed at creation (600 s by default), never renewed by reads

Failure semantics:
  An absent key returns None. An unreachable or slow Redis raises
  SessionStoreUnavailable -- the two are never collapsed here. The caller
  decides what an outage means for the request.

Usage:
    sessions = SessionStore("redis://localhost:6379")
    sessions.connect()
    sessions.put(token, "alice", is_admin=False)
    sessions.get(token)      # {"username": "alice", "isAdmin": False} or None
    sessions.delete(token)   # idempotent
    sessions.close()

Layer rule: no imports from api/, auth/, or movies/.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis

logger = logging.getLogger("movielist.sessions")

KEY_PREFIX = "session:"
_DEFAULT_TTL = 600  # 10 minutes


class SessionStoreUnavailable(Exception):
    """Redis could not be reached, or did not answer within the timeout."""


class SessionStore:
    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        ttl: int = _DEFAULT_TTL,
        timeout: float = 2.0,
        client: Any = None,
    ) -> None:
        self.ttl = ttl
        # A prebuilt client is accepted so tests and embedders can inject one.
        self._client = client or redis.Redis.from_url(
            redis_url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        )

    def connect(self) -> bool:
        """Check connectivity at startup. Logs the outcome and never raises.

        redis-py opens connections lazily per command, so a failure here does
        not stop the process; the first request after Redis comes back simply
        succeeds.
        """
        if self.is_connected():
            logger.info("Session store connected")
            return True
        logger.error("Session store connection failed -- authenticated requests will be rejected")
        return False

    def put(self, token: str, username: str, is_admin: bool) -> None:
        """Create (or overwrite) the marker for token with a fresh TTL."""
        payload = json.dumps({"username": username, "isAdmin": is_admin})
        self._call("put", self._client.set, _key(token), payload, ex=self.ttl)

    def get(self, token: str) -> dict | None:
        """Return the marker for token, or None if it is absent or expired."""
        raw = self._call("get", self._client.get, _key(token))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed session marker")
            return None
        if not isinstance(data, dict) or "username" not in data:
            logger.warning("Discarding malformed session marker")
            return None
        return data

    def delete(self, token: str) -> None:
        """Remove the marker for token. Deleting an absent key is not an error."""
        self._call("delete", self._client.delete, _key(token))

    def is_connected(self) -> bool:
        try:
            return bool(self._client.ping())
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
            return False

    def close(self) -> None:
        self._client.close()

    def _call(self, op: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as exc:
            logger.error("Session store %s failed: %s", op, exc)
            raise SessionStoreUnavailable(f"Session store {op} failed: {exc}") from exc


def _key(token: str) -> str:
    return f"{KEY_PREFIX}{token}"
