"""
movies/store.py -- SQLAlchemy-backed persistence layer for the movie catalog.

Uses SQLAlchemy Core (not ORM) so the dataclass in movies/models.py remains
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. MovieStore is the repository; _row_to_movie
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

The movies database has its own engine and pool, independent of the users
database -- the two are never joined.

Usage:
    store = MovieStore()                                 # SQLite default
    store = MovieStore("postgresql://user:pw@host/db")   # PostgreSQL
    movie = store.create_movie(Movie(...), updated_by="alice")
    movies = store.list_movies()
    store.update_movie(movie.id, Movie(...), updated_by="bob")
    store.close()
"""

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from movies.models import Movie

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'movielist_movies.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_movies = Table(
    "movies",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False, index=True),
    Column("actor", String(200), nullable=False, index=True),
    Column("genre", String(100), nullable=False, index=True),
    Column("description", Text, nullable=False),
    Column("updated_by", String(50), nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),
    Column("updated_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MovieStore:
    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_movie(self, movie: Movie, updated_by: str) -> Movie:
        """Insert a movie and return it with its assigned id and timestamps."""
        now = _now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _movies.insert().values(
                    name=movie.name,
                    actor=movie.actor,
                    genre=movie.genre,
                    description=movie.description,
                    updated_by=updated_by,
                    created_at=now,
                    updated_at=now,
                )
            )
            movie_id = result.inserted_primary_key[0]
        return Movie(
            id=movie_id,
            name=movie.name,
            actor=movie.actor,
            genre=movie.genre,
            description=movie.description,
            updated_by=updated_by,
            created_at=now,
            updated_at=now,
        )

    def get_movie(self, movie_id: int) -> Movie | None:
        with self.engine.connect() as conn:
            row = conn.execute(_movies.select().where(_movies.c.id == movie_id)).fetchone()
        return _row_to_movie(row) if row is not None else None

    def list_movies(self) -> list[Movie]:
        """Return every movie, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _movies.select().order_by(_movies.c.created_at.desc(), _movies.c.id.desc())
            ).fetchall()
        return [_row_to_movie(r) for r in rows]

    def update_movie(self, movie_id: int, movie: Movie, updated_by: str) -> bool:
        """Replace all editable fields of a movie.

        Returns True if a row was updated, False if movie_id was not found.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                _movies.update()
                .where(_movies.c.id == movie_id)
                .values(
                    name=movie.name,
                    actor=movie.actor,
                    genre=movie.genre,
                    description=movie.description,
                    updated_by=updated_by,
                    updated_at=_now_iso(),
                )
            )
        return result.rowcount > 0

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


def _row_to_movie(row) -> Movie:
    return Movie(
        id=row.id,
        name=row.name,
        actor=row.actor,
        genre=row.genre,
        description=row.description,
        updated_by=row.updated_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
