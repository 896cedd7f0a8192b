"""
auth/tokens.py -- Password hashing, JWT issuance/validation, and login.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry
       username, isAdmin, iat and exp. Any holder of the secret can verify a
       token without asking the issuer. Validation raises InvalidToken on any
       failure (bad signature, expired, malformed, missing claims) so the
       Session Guard can audit the reason before turning it into a 401.

  Passwords: bcrypt with a configurable cost factor (BCRYPT_ROUNDS). bcrypt's
       cost factor makes brute-force expensive. The _DUMMY_HASH constant
       enables timing equalization in authenticate_user() so response time
       does not reveal whether a username exists.

  Tokens are never persisted here. Whether a token is still live is the
  session store's job (sessions/store.py).

Layer rule: no imports from api/ or movies/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.audit import log_auth
from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("movielist.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"


class InvalidToken(Exception):
    """The token failed signature, expiry, or claim validation."""


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt rejects input longer than 72 bytes with ValueError. UserCredentials
    refuses such passwords (measured in UTF-8 bytes, not characters) before
    they get here.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A mismatch, or a stored value that is not a bcrypt hash at all, is False.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at module load so the first failed login is not measurably
# slower than later ones.
_DUMMY_HASH: str = hash_password("movielist_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(username: str, is_admin: bool, expire_seconds: int = 0) -> str:
    """Encode a signed JWT asserting username and role.

    Args:
        username:       Stored as both the "sub" and "username" claims.
        is_admin:       Role flag at issuance. It stays fixed for the
                        token's lifetime even if the stored user changes.
        expire_seconds: Validity window. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "username": username,
        "isAdmin": bool(is_admin),
        "iat": issued,
        "exp": issued + timedelta(seconds=duration),
        # Unique per issuance: two logins in the same second still get
        # distinct tokens and therefore distinct session markers.
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, _settings.jwt_secret, algorithm=_ALGORITHM)


def issue_token(user: User) -> str:
    """Issue a token for a verified user record."""
    return create_access_token(user.username, user.is_admin)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry and return the claims.

    Raises:
        InvalidToken: on any failure. The message names the reason and is
            meant for server-side logs only.
    """
    try:
        payload = jwt.decode(token, _settings.jwt_secret, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc
    if not isinstance(payload.get("username"), str) or not isinstance(payload.get("isAdmin"), bool):
        raise InvalidToken("Token is missing the username or isAdmin claim")
    return payload


def unverified_username(token: str) -> str | None:
    """Best-effort username from a token that failed validation, for audit logs only."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    username = claims.get("username")
    return username if isinstance(username, str) else None


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User | None:
    """Authenticate a username/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    The caller gets None for both failures; the real reason is audited here
    and never returned.
    """
    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        log_auth("LOGIN_FAILED", username, False, reason="User not found")
        return None
    if not verify_password(password, user.hashed_password):
        log_auth("LOGIN_FAILED", username, False, reason="Invalid password")
        return None
    return user
