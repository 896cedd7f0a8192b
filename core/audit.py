"""
core/audit.py -- Security and data-change audit events.

Three event families, one helper each:
  AUTH:  log_auth()          -- register, login, logout, token and role failures
  MOVIE: log_movie_update()  -- catalog writes
  ADMIN: log_admin_action()  -- user management by an admin

Each record goes to the "movielist.audit" logger (routed to auth.log by
core.log when file logging is on). The structured fields travel as
extra={"audit": {...}} for handlers that want them, and are also rendered
as key=value pairs in the message so plain-text logs stay greppable.

Never pass passwords, password hashes, or full token values as details.

Layer rule: no imports from api/, auth/, movies/, or sessions/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from core.log import AUDIT_LOGGER

logger = logging.getLogger(AUDIT_LOGGER)


def _emit(level: int, family: str, action: str, fields: dict[str, Any]) -> None:
    fields["timestamp"] = datetime.now(timezone.utc).isoformat()
    rendered = " ".join(f"{k}={v!r}" for k, v in fields.items())
    logger.log(level, "%s: %s %s", family, action, rendered, extra={"audit": {"action": action, **fields}})


def log_auth(action: str, username: str | None, success: bool = True, **details: Any) -> None:
    """Record an authentication event. Failures are logged at WARNING."""
    level = logging.INFO if success else logging.WARNING
    _emit(level, "AUTH", action, {"username": username, "success": success, **details})


def log_movie_update(action: str, movie_id: int | None, username: str, **details: Any) -> None:
    _emit(logging.INFO, "MOVIE", action, {"movie_id": movie_id, "username": username, **details})


def log_admin_action(action: str, admin_user: str, target_user: str | None = None, **details: Any) -> None:
    _emit(logging.INFO, "ADMIN", action, {"admin_user": admin_user, "target_user": target_user, **details})
