"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work; these only own the shape.

Layer rule: no imports from api/, movies/, or sessions/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A stored account in the users database.

    hashed_password is the bcrypt hash; it never leaves the server.
    is_admin is only changed by an explicit admin action (UserStore.set_admin),
    and that change does not reach tokens that were already issued.
    """

    username: str
    hashed_password: str
    is_admin: bool = False
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The caller attached to a request by the Session Guard.

    username and is_admin come from the verified token claims, not from the
    users database.
    """

    username: str
    is_admin: bool
