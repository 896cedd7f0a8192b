"""
API request and response models for the movie list REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
movies/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models also carry the input shape rules (field presence and length),
so handlers only ever see bodies that already passed them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import User
from movies.models import Movie

_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class UserCredentials(BaseModel):
    """Request body for register, login and admin user creation."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    password: str = Field(min_length=4, max_length=50)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only accepts 72 bytes; 50 multibyte characters can exceed that.
        if len(v.encode("utf-8")) > _BCRYPT_MAX_BYTES:
            raise ValueError(f"must be at most {_BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return v


class MovieIn(BaseModel):
    """Request body for POST /api/movies and PUT /api/movies/{id}."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    actor: str = Field(min_length=1, max_length=100)
    genre: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)

    def to_movie(self) -> Movie:
        return Movie(name=self.name, actor=self.actor, genre=self.genre, description=self.description)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class LoginUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    isAdmin: bool


class LoginResponse(BaseModel):
    """Response for POST /api/auth/login. token goes in Authorization: Bearer <token>."""

    model_config = ConfigDict(frozen=True)

    message: str = "Login successful"
    token: str
    user: LoginUser


class MovieResponse(BaseModel):
    """A stored movie: one row of GET /api/movies, or the body of a POST 201."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    actor: str
    genre: str
    description: str
    updated_by: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieResponse":
        return cls(
            id=movie.id,
            name=movie.name,
            actor=movie.actor,
            genre=movie.genre,
            description=movie.description,
            updated_by=movie.updated_by,
            created_at=movie.created_at,
            updated_at=movie.updated_at,
        )


class CreatedUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str


class UserCreatedResponse(BaseModel):
    """Response for POST /api/admin/users."""

    model_config = ConfigDict(frozen=True)

    message: str = "User created successfully"
    user: CreatedUser


class UserSummary(BaseModel):
    """One row of GET /api/admin/users. The password hash is never included."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    is_admin: bool
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, username=user.username, is_admin=user.is_admin, created_at=user.created_at or "")


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health. Each store reports connected/disconnected."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    timestamp: str
    redis: str
    users_db: str
    movies_db: str
