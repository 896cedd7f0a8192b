"""
api/routes/movies.py -- Movie catalog routes.

Routes:
  GET  /api/movies        -- list every movie, newest first
  POST /api/movies        -- add a movie
  PUT  /api/movies/{id}   -- replace a movie's fields

Every route sits behind the Session Guard (router-level dependency). Any
authenticated user may read and write the catalog; updated_by records who
made the last change.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import MessageResponse, MovieIn, MovieResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from core.audit import log_movie_update
from movies.store import MovieStore

router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("/movies", response_model=list[MovieResponse])
def list_movies(request: Request) -> list[MovieResponse]:
    movie_store: MovieStore = request.app.state.movie_store
    return [MovieResponse.from_movie(m) for m in movie_store.list_movies()]


@router.post("/movies", response_model=MovieResponse, status_code=201)
def create_movie(
    request: Request,
    body: MovieIn,
    identity: Identity = Depends(get_current_identity),
) -> MovieResponse:
    """Add a movie; the caller becomes its updated_by. Returns the stored row."""
    movie_store: MovieStore = request.app.state.movie_store
    movie = movie_store.create_movie(body.to_movie(), updated_by=identity.username)
    log_movie_update("MOVIE_CREATED", movie.id, identity.username, **body.model_dump())
    return MovieResponse.from_movie(movie)


@router.put("/movies/{movie_id}", response_model=MessageResponse)
def update_movie(
    request: Request,
    movie_id: int,
    body: MovieIn,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    movie_store: MovieStore = request.app.state.movie_store
    updated = movie_store.update_movie(movie_id, body.to_movie(), updated_by=identity.username)
    if not updated:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Movie not found"},
        )
    log_movie_update("MOVIE_UPDATED", movie_id, identity.username, **body.model_dump())
    return MessageResponse(message="Movie updated successfully")
