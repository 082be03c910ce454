"""
Movies API — /movies
────────────────────
The shared catalog. Reads are public; writes need a session.

Endpoints:
  GET    /movies                      — List, filter by genre/year/director/title
  POST   /movies                      — Create (409 on duplicate title+year)
  GET    /movies/{movie_id}           — Single movie
  PUT    /movies/{movie_id}           — Partial update
  DELETE /movies/{movie_id}           — Delete (400 while reviews exist)
  GET    /movies/{movie_id}/reviews   — Reviews of a movie, newest first
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.models import MAX_MOVIE_YEAR, MIN_MOVIE_YEAR, User
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.movies import (
    MessageResponse,
    MovieCreateRequest,
    MovieListResponse,
    MovieResponse,
    MovieUpdateRequest,
)
from app.schemas.reviews import ReviewListResponse, ReviewResponse
from app.services.movie_service import (
    create_movie,
    delete_movie,
    get_movie,
    list_movies,
    update_movie,
)
from app.services.review_service import list_movie_reviews

router = APIRouter()


@router.get("", response_model=MovieListResponse)
def list_catalog(
    genre: str | None = Query(None, description="Exact genre, matched against the genre list"),
    year: int | None = Query(None, ge=MIN_MOVIE_YEAR, le=MAX_MOVIE_YEAR, description="Release year"),
    director: str | None = Query(None, description="Exact director name"),
    title: str | None = Query(None, description="Case-insensitive title fragment"),
    db: Session = Depends(get_db),
) -> MovieListResponse:
    movies = list_movies(db, genre=genre, year=year, director=director, title=title)
    return MovieListResponse(
        items=[MovieResponse.model_validate(movie) for movie in movies],
        count=len(movies),
    )


@router.post("", response_model=MovieResponse, status_code=status.HTTP_201_CREATED)
def create_catalog_movie(
    payload: MovieCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MovieResponse:
    """Add a movie to the catalog. Returns 409 if (title, year) is taken."""
    return MovieResponse.model_validate(create_movie(db, payload))


@router.get("/{movie_id}", response_model=MovieResponse)
def get_catalog_movie(movie_id: UUID, db: Session = Depends(get_db)) -> MovieResponse:
    return MovieResponse.model_validate(get_movie(db, movie_id))


@router.put("/{movie_id}", response_model=MovieResponse)
def update_catalog_movie(
    movie_id: UUID,
    payload: MovieUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MovieResponse:
    return MovieResponse.model_validate(update_movie(db, movie_id, payload))


@router.delete("/{movie_id}", response_model=MessageResponse)
def delete_catalog_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Returns 400 while any review still references the movie."""
    delete_movie(db, movie_id)
    return MessageResponse(message="Movie deleted successfully.")


@router.get("/{movie_id}/reviews", response_model=ReviewListResponse)
def get_movie_reviews(movie_id: UUID, db: Session = Depends(get_db)) -> ReviewListResponse:
    reviews = list_movie_reviews(db, movie_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review) for review in reviews],
        total=len(reviews),
    )
