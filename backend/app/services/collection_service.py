"""
Personal collection business logic.

A collection entry (UserMovie) is always addressed by (user_id, movie_id);
no function here accepts a bare entry id, so one user can never reach
another user's row.

Listing joins the caller's entries with the catalog and projects each pair
into a flat CollectionEntry before filtering:

    UserMovie ──┐
                ├─► CollectionEntry ─► filter_collection ─► response
    Movie ──────┘
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.db.models import Movie, UserMovie, WatchStatusEnum
from app.services.movie_service import get_movie, movie_has_genre, title_matches


class CollectionEntryNotFoundError(NotFoundError):
    """Raised when the movie is not on the caller's list."""

    code = "COLLECTION_ENTRY_NOT_FOUND"


class AlreadyInCollectionError(ConflictError):
    """Raised when the movie is already on the caller's list."""

    code = "ALREADY_IN_COLLECTION"


@dataclass(frozen=True)
class CollectionEntry:
    """
    One movie on a user's list.

    Catalog attributes come from Movie. status, added_at and updated_at
    come from UserMovie and win over the movie's own timestamps; id is the
    movie's id because that is how clients address the entry.
    """

    id: UUID
    title: str
    year: int
    status: WatchStatusEnum
    added_at: datetime
    updated_at: datetime
    rating: str | None = None
    genre: list[str] = field(default_factory=list)
    length: int | None = None
    description: str | None = None
    director: str | None = None
    poster_url: str | None = None

    @classmethod
    def from_rows(cls, entry: UserMovie, movie: Movie) -> "CollectionEntry":
        return cls(
            id=movie.id,
            title=movie.title,
            year=movie.year,
            rating=movie.rating,
            genre=list(movie.genre or []),
            length=movie.length,
            description=movie.description,
            director=movie.director,
            poster_url=movie.poster_url,
            status=WatchStatusEnum(entry.status),
            added_at=entry.created_at,
            updated_at=entry.updated_at,
        )


def filter_collection(
    entries: Iterable[CollectionEntry],
    status: WatchStatusEnum | str | None = None,
    genre: str | None = None,
    year: int | None = None,
    title: str | None = None,
) -> list[CollectionEntry]:
    """
    Keep entries matching every given filter.

    status is compared against the collection side, genre/year/title
    against the catalog side. The status value is not validated here; an
    unknown value simply matches nothing.
    """
    result = []
    for entry in entries:
        if status is not None and entry.status != status:
            continue
        if genre and genre.strip() and not movie_has_genre(entry.genre, genre):
            continue
        if year is not None and entry.year != year:
            continue
        if title and title.strip() and not title_matches(entry.title, title):
            continue
        result.append(entry)
    return result


def list_collection(
    db: Session,
    user_id: UUID,
    status: WatchStatusEnum | str | None = None,
    genre: str | None = None,
    year: int | None = None,
    title: str | None = None,
) -> list[CollectionEntry]:
    """Return the user's movies merged with their watch status, oldest addition first."""
    rows = (
        db.query(UserMovie, Movie)
        .join(Movie, UserMovie.movie_id == Movie.id)
        .filter(UserMovie.user_id == user_id)
        .order_by(UserMovie.created_at.asc(), Movie.title.asc())
        .all()
    )
    entries = [CollectionEntry.from_rows(entry, movie) for entry, movie in rows]
    return filter_collection(entries, status=status, genre=genre, year=year, title=title)


def _get_owned_entry(db: Session, user_id: UUID, movie_id: UUID) -> UserMovie:
    entry = (
        db.query(UserMovie)
        .filter(UserMovie.user_id == user_id, UserMovie.movie_id == movie_id)
        .first()
    )
    if entry is None:
        raise CollectionEntryNotFoundError(f"Movie {movie_id} is not in your collection.")
    return entry


def get_collection_entry(db: Session, user_id: UUID, movie_id: UUID) -> CollectionEntry:
    entry = _get_owned_entry(db, user_id, movie_id)
    return CollectionEntry.from_rows(entry, get_movie(db, movie_id))


def add_to_collection(
    db: Session,
    user_id: UUID,
    movie_id: UUID,
    status: WatchStatusEnum = WatchStatusEnum.PLANNED_TO_WATCH,
) -> CollectionEntry:
    """
    Put a catalog movie on the user's list.

    Raises MovieNotFoundError when the movie does not exist and
    AlreadyInCollectionError when it is already listed.
    """
    movie = get_movie(db, movie_id)

    existing = (
        db.query(UserMovie.id)
        .filter(UserMovie.user_id == user_id, UserMovie.movie_id == movie_id)
        .first()
    )
    if existing is not None:
        raise AlreadyInCollectionError("This movie is already in your collection.")

    entry = UserMovie(user_id=user_id, movie_id=movie_id, status=WatchStatusEnum(status))
    db.add(entry)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyInCollectionError("This movie is already in your collection.") from exc

    db.refresh(entry)
    return CollectionEntry.from_rows(entry, movie)


def update_collection_status(
    db: Session,
    user_id: UUID,
    movie_id: UUID,
    status: WatchStatusEnum,
) -> CollectionEntry:
    entry = _get_owned_entry(db, user_id, movie_id)
    entry.status = WatchStatusEnum(status)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return CollectionEntry.from_rows(entry, get_movie(db, movie_id))


def remove_from_collection(db: Session, user_id: UUID, movie_id: UUID) -> None:
    entry = _get_owned_entry(db, user_id, movie_id)
    db.delete(entry)
    db.commit()
