"""
api/routes/auth.py -- Registration, login and logout.

Routes:
  POST /api/auth/register  -- create a non-admin account (public)
  POST /api/auth/login     -- verify credentials, issue token, open session (public)
  POST /api/auth/logout    -- delete the session for the presented token (signed bearer token)

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Unknown username and wrong password return the same 401 body; the real
  reason is only in the audit log.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from api.models import LoginResponse, LoginUser, MessageResponse, UserCredentials
from auth.dependencies import get_bearer_token, verify_token
from auth.store import UserStore
from auth.tokens import authenticate_user, hash_password, issue_token
from core.audit import log_auth
from sessions.store import SessionStore, SessionStoreUnavailable

logger = logging.getLogger("movielist.api")

router = APIRouter()

_BAD_CREDENTIALS = {"code": "bad_credentials", "message": "please login with correct id and pass"}


@router.post("/auth/register", response_model=MessageResponse, status_code=201)
def register(request: Request, body: UserCredentials) -> MessageResponse:
    """Create a regular (non-admin) account."""
    user_store: UserStore = request.app.state.user_store
    if user_store.get_by_username(body.username) is not None:
        log_auth("REGISTER_FAILED", body.username, False, reason="User already exists")
        raise HTTPException(
            status_code=400,
            detail={"code": "username_taken", "message": "Username already exists"},
        )
    try:
        user_store.create_user(body.username, hash_password(body.password))
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same name.
        log_auth("REGISTER_FAILED", body.username, False, reason="User already exists")
        raise HTTPException(
            status_code=400,
            detail={"code": "username_taken", "message": "Username already exists"},
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("Registration of '%s' failed", body.username)
        raise HTTPException(
            status_code=500,
            detail={"code": "registration_failed", "message": "Registration failed"},
        ) from exc
    log_auth("REGISTER_SUCCESS", body.username, True)
    return MessageResponse(message="User registered successfully")


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: UserCredentials) -> JSONResponse:
    """Authenticate with username and password; return a bearer token.

    The token only works while its session marker exists, so the marker is
    written before the token is handed out. If the session store is down the
    login fails with 500 rather than returning a token that can never be used.
    """
    user_store: UserStore = request.app.state.user_store
    sessions: SessionStore = request.app.state.sessions

    user = authenticate_user(user_store, body.username, body.password)
    if user is None:
        resp = JSONResponse(status_code=401, content={"error": _BAD_CREDENTIALS})
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = issue_token(user)
    try:
        sessions.put(token, user.username, user.is_admin)
    except SessionStoreUnavailable as exc:
        log_auth("LOGIN_FAILED", user.username, False, reason="Session store unavailable")
        raise HTTPException(
            status_code=500,
            detail={"code": "login_failed", "message": "Login failed"},
        ) from exc

    log_auth("LOGIN_SUCCESS", user.username, True)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            user=LoginUser(username=user.username, isAdmin=user.is_admin),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> MessageResponse:
    """End the session for the presented token.

    Deliberately skips the session lookup of the Session Guard and runs only
    the bearer and signature checks (get_bearer_token, verify_token). A
    missing token is 401 and a forged or expired one is 401, but a correctly
    signed token whose marker is already gone (logged out before, or expired
    from the store) still gets 200. That keeps logout idempotent: deleting an
    absent marker is a no-op, and the token authorizes nothing afterwards
    either way.
    """
    sessions: SessionStore = request.app.state.sessions
    token = get_bearer_token(request)
    claims = verify_token(request, token)
    try:
        sessions.delete(token)
    except SessionStoreUnavailable as exc:
        raise HTTPException(
            status_code=500,
            detail={"code": "logout_failed", "message": "Logout failed"},
        ) from exc
    log_auth("LOGOUT_SUCCESS", claims["username"], True)
    return MessageResponse(message="Logged out successfully")
