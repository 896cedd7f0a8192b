"""
api/main.py -- FastAPI application entry point for the movie list service.

Run with:  python main.py serve
           uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests              -- one log line per request with latency
  2. CORSMiddleware            -- adds CORS headers for allowed browser origins
  3. SecurityHeadersMiddleware -- nosniff, frame-deny, referrer policy, HSTS on https

Lifespan constructs every external client explicitly (users DB, movies DB,
session store), hangs them on app.state for route handlers, and closes them
symmetrically on shutdown. Nothing connects at import time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.admin import router as admin_router
from api.routes.auth import router as auth_router
from api.routes.movies import router as movies_router
from auth.store import UserStore
from auth.tokens import hash_password
from core.config import Settings, get_settings
from core.log import configure_logging
from movies.store import MovieStore
from sessions.store import SessionStore

logger = logging.getLogger("movielist.api")

_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Bootstrap admin
# ---------------------------------------------------------------------------


def ensure_admin(user_store: UserStore, settings: Settings) -> None:
    """Create the configured admin account if it does not exist yet.

    Does nothing unless both ADMIN_USERNAME and ADMIN_PASSWORD are set. An
    existing account with that name is left untouched, including its role.
    """
    if not (settings.admin_username and settings.admin_password):
        return
    if user_store.get_by_username(settings.admin_username) is not None:
        return
    user_store.create_user(settings.admin_username, hash_password(settings.admin_password), is_admin=True)
    logger.info("Bootstrap admin '%s' created", settings.admin_username)


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The two relational stores have independent engines and pools.
    The session store connection check logs but does not abort startup: the
    service keeps answering (with 401s) until Redis is reachable.
    """
    settings = get_settings()
    configure_logging(settings)
    logger.info("Movie list API starting up")

    app.state.user_store = UserStore(settings.users_db_url)
    app.state.movie_store = MovieStore(settings.movies_db_url)
    app.state.sessions = SessionStore(
        settings.redis_url,
        ttl=settings.session_ttl_seconds,
        timeout=settings.redis_timeout_seconds,
    )
    app.state.sessions.connect()
    ensure_admin(app.state.user_store, settings)
    logger.info("Stores initialized")

    yield

    app.state.sessions.close()
    app.state.movie_store.close()
    app.state.user_store.close()
    logger.info("Movie list API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Movie List API",
    description="Authenticated movie catalog with admin user management.",
    version=_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add browser hardening headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        forwarded_proto = request.headers.get("x-forwarded-proto", "")
        if forwarded_proto == "https" or request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(movies_router, prefix="/api", tags=["Movies"])
app.include_router(admin_router, prefix="/api", tags=["Admin"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body, path, or query fails validation.

    The message is the first failing field so simple clients can show it.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message=message,
                detail=str(errors),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a {"code", "message"} dict as
    detail. When detail is already a dict, use it directly as the error field
    rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="Internal server error",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


def _status(ok: bool) -> str:
    return "connected" if ok else "disconnected"


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness plus the connectivity of each backing store."""
    state = request.app.state
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        redis=_status(state.sessions.is_connected()),
        users_db=_status(state.user_store.ping()),
        movies_db=_status(state.movie_store.ping()),
    )
