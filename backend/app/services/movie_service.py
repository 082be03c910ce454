"""
Movie catalog business logic.

The catalog is shared: any authenticated caller may create, update or
delete entries, so nothing here is scoped by user.
"""
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from app.db.models import Movie, Review, UserMovie
from app.schemas.movies import MovieCreateRequest, MovieUpdateRequest

logger = logging.getLogger(__name__)


class MovieNotFoundError(NotFoundError):
    """Raised when a movie does not exist."""

    code = "MOVIE_NOT_FOUND"


class DuplicateMovieError(ConflictError):
    """Raised when (title, year) is already taken by another movie."""

    code = "MOVIE_ALREADY_EXISTS"

    def __init__(self, title: str, year: int) -> None:
        super().__init__(f"A movie titled {title!r} from {year} already exists.")


class MovieHasReviewsError(BusinessRuleError):
    """Raised when deleting a movie that reviews still point at."""

    code = "MOVIE_HAS_REVIEWS"


def movie_has_genre(genres: Iterable[str] | None, genre: str) -> bool:
    """Exact list-membership test used by every genre filter."""
    return genre.strip() in (genres or [])


def title_matches(title: str, fragment: str) -> bool:
    """Case-insensitive substring test used by every title filter."""
    return fragment.strip().lower() in title.lower()


def get_movie(db: Session, movie_id: UUID) -> Movie:
    """Fetch a single movie or raise MovieNotFoundError."""
    movie = db.query(Movie).filter(Movie.id == movie_id).first()
    if movie is None:
        raise MovieNotFoundError(f"Movie {movie_id} not found.")
    return movie


def _find_by_title_year(db: Session, title: str, year: int) -> Movie | None:
    return (
        db.query(Movie)
        .filter(Movie.title == title, Movie.year == year)
        .first()
    )


def list_movies(
    db: Session,
    genre: str | None = None,
    year: int | None = None,
    director: str | None = None,
    title: str | None = None,
) -> list[Movie]:
    """
    List the catalog with optional AND-combined filters.

    year and director are exact matches and title is a case-insensitive
    substring; those run in SQL. genre is list membership on a JSON column,
    which is checked per row so it behaves the same on every backend.
    """
    query = db.query(Movie)
    if year is not None:
        query = query.filter(Movie.year == year)
    if director:
        query = query.filter(Movie.director == director.strip())
    if title and title.strip():
        query = query.filter(Movie.title.icontains(title.strip(), autoescape=True))

    movies = query.order_by(Movie.title.asc(), Movie.year.asc()).all()
    if genre and genre.strip():
        movies = [movie for movie in movies if movie_has_genre(movie.genre, genre)]
    return movies


def create_movie(db: Session, payload: MovieCreateRequest) -> Movie:
    """
    Insert a catalog entry.

    The lookup gives a clean error in the common case; the unique
    constraint on (title, year) still decides when two requests race.
    """
    if _find_by_title_year(db, payload.title, payload.year) is not None:
        raise DuplicateMovieError(payload.title, payload.year)

    movie = Movie(**payload.model_dump(mode="json"))
    db.add(movie)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateMovieError(payload.title, payload.year) from exc

    db.refresh(movie)
    return movie


def update_movie(db: Session, movie_id: UUID, payload: MovieUpdateRequest) -> Movie:
    """Apply a partial update; only fields present in the request body change."""
    movie = get_movie(db, movie_id)
    changes = payload.model_dump(mode="json", exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update.")

    new_title = changes.get("title", movie.title)
    new_year = changes.get("year", movie.year)
    clash = _find_by_title_year(db, new_title, new_year)
    if clash is not None and clash.id != movie.id:
        raise DuplicateMovieError(new_title, new_year)

    for field, value in changes.items():
        setattr(movie, field, value)

    db.add(movie)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateMovieError(new_title, new_year) from exc

    db.refresh(movie)
    return movie


def delete_movie(db: Session, movie_id: UUID) -> None:
    """
    Remove a movie from the catalog.

    Refused while any review references it. Collection entries for the
    movie go with it.
    """
    movie = get_movie(db, movie_id)

    review_count = (
        db.query(func.count(Review.id))
        .filter(Review.movie_id == movie.id)
        .scalar()
    )
    if review_count:
        raise MovieHasReviewsError(
            f"Movie {movie_id} has {review_count} review(s) and cannot be deleted."
        )

    removed_entries = (
        db.query(UserMovie)
        .filter(UserMovie.movie_id == movie.id)
        .delete(synchronize_session="fetch")
    )
    db.delete(movie)
    db.commit()
    logger.info("Deleted movie %s (%d collection entries removed)", movie_id, removed_entries)
