"""
auth/dependencies.py -- FastAPI Depends() helpers: Session Guard and Role Gate.

A bearer token authorizes a request only when BOTH hold:
  (a) a session marker for that exact token string exists in the session
      store, and
  (b) the token's signature and expiry are valid.

The two checks stay separate and run in that order on every request:

  get_bearer_token()       -- Authorization: Bearer <token>, else 401
                              "Access token required".
  check_session()          -- marker lookup, else 401 "Session expired or
                              invalid". An unreachable store gets the same 401
                              but is logged and audited as its own event.
  verify_token()           -- signature/expiry, else 401 "Invalid token" plus
                              a TOKEN_VERIFICATION_FAILED audit event.
  get_current_identity()   -- runs all three and returns the caller's Identity.
  require_admin()          -- Role Gate on top of get_current_identity(); 403
                              "Admin access required".

The role comes from the signed token, never from the users database or the
session marker. Revoking access means deleting the session, not editing the
user record.

Dependencies are plain def functions: FastAPI runs them on its thread pool,
so the blocking Redis round-trip never stalls the event loop.

Layer rule: no imports from api/ or movies/.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request

from auth.models import Identity
from auth.tokens import InvalidToken, decode_access_token, unverified_username
from core.audit import log_auth
from sessions.store import SessionStore, SessionStoreUnavailable

logger = logging.getLogger("movielist.auth")

_BEARER_PREFIX = "Bearer "


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=401, detail={"code": code, "message": message})


def get_bearer_token(request: Request) -> str:
    """Return the raw token from the Authorization header or raise 401."""
    header = request.headers.get("Authorization", "")
    token = header[len(_BEARER_PREFIX) :].strip() if header.startswith(_BEARER_PREFIX) else ""
    if not token:
        raise _unauthorized("token_required", "Access token required")
    return token


def check_session(sessions: SessionStore, token: str) -> dict:
    """Return the live session marker for token or raise 401.

    Absent and unreachable both end as the same 401 for the caller. Only the
    unreachable case is logged at ERROR, so an outage does not hide behind
    ordinary expirations.
    """
    try:
        marker = sessions.get(token)
    except SessionStoreUnavailable as exc:
        logger.error("Session lookup failed, rejecting request: %s", exc)
        log_auth("SESSION_STORE_UNAVAILABLE", unverified_username(token), False, error=str(exc))
        marker = None
    if marker is None:
        raise _unauthorized("session_invalid", "Session expired or invalid")
    return marker


def verify_token(request: Request, token: str) -> dict:
    """Return the verified claims of token or raise 401."""
    try:
        return decode_access_token(token)
    except InvalidToken as exc:
        log_auth(
            "TOKEN_VERIFICATION_FAILED",
            unverified_username(token),
            False,
            error=str(exc),
            client=request.client.host if request.client else "unknown",
        )
        raise _unauthorized("invalid_token", "Invalid token") from exc


def get_current_identity(request: Request) -> Identity:
    """Session Guard. Use as a FastAPI dependency:

        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = get_bearer_token(request)
    check_session(request.app.state.sessions, token)
    claims = verify_token(request, token)
    return Identity(username=claims["username"], is_admin=claims["isAdmin"])


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Role Gate. Raises HTTP 401 if unauthenticated, HTTP 403 if not admin."""
    if not identity.is_admin:
        log_auth("UNAUTHORIZED_ADMIN_ACCESS", identity.username, False)
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Admin access required"},
        )
    return identity
