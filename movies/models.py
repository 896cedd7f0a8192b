"""
movies/models.py -- Domain dataclass for the movie catalog.

Pure data container with zero logic. All persistence lives in movies/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Movie:
    """A catalog entry.

    updated_by is the username of whoever last wrote the record; it is set by
    the store from the authenticated identity, never from the request body.

    id is None before the record is written to the database.
    """

    name: str
    actor: str
    genre: str
    description: str
    id: Optional[int] = None
    updated_by: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed on every update
