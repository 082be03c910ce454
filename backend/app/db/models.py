"""
SQLAlchemy ORM models.

Four tables: users, movies, reviews, usermovies. Column types are the
portable SQLAlchemy ones (Uuid, JSON with a JSONB variant) so the same
models run on Postgres in production and SQLite in the test suite.

Uniqueness rules live here as constraints; services treat an
IntegrityError from them as the authoritative duplicate signal.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class WatchStatusEnum(str, PyEnum):
    PLANNED_TO_WATCH = "planned_to_watch"
    WATCHING = "watching"
    WATCHED = "watched"
    DROPPED = "dropped"


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


GenreList = JSON().with_variant(JSONB(), "postgresql")

# Earliest surviving motion picture (Roundhay Garden Scene)
MIN_MOVIE_YEAR = 1888
MAX_MOVIE_YEAR = 9999
# Upper bounds match the column types
MAX_MOVIE_LENGTH = 2**31 - 1
MAX_POSTER_URL_LENGTH = 1000


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Account created from a GitHub login.

    There is no password column; identity is the GitHub numeric id.
    email is optional because GitHub users can keep it private.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    github_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    github_username = Column(String(64), nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    # Relationships
    reviews = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    collection = relationship(
        "UserMovie",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} github_id={self.github_id!r}>"


class Movie(Base):
    """
    A catalog entry shared by every user.

    genre is a JSON list of strings; filtering by genre means list
    membership, not substring.
    """
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    rating = Column(String(16), nullable=True)  # PG-13, R
    genre = Column(GenreList, nullable=False, default=list)
    length = Column(Integer, nullable=True)  # minutes
    description = Column(Text, nullable=True)
    director = Column(String(255), nullable=True)
    poster_url = Column(String(MAX_POSTER_URL_LENGTH), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("title", "year", name="uq_movies_title_year"),
        CheckConstraint(f"year >= {MIN_MOVIE_YEAR}", name="chk_movies_year"),
        CheckConstraint("length IS NULL OR length >= 0", name="chk_movies_length"),
    )

    # Relationships
    reviews = relationship("Review", back_populates="movie")
    collected_by = relationship(
        "UserMovie",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Movie id={self.id} title={self.title!r} year={self.year}>"


class Review(Base):
    """One review per user per movie."""
    __tablename__ = "reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    movie_id = Column(
        Uuid,
        # A movie with reviews cannot be deleted
        ForeignKey("movies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating = Column(Integer, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("movie_id", "user_id", name="uq_reviews_movie_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="chk_reviews_rating"),
    )

    # Relationships
    user = relationship("User", back_populates="reviews")
    movie = relationship("Movie", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review user={self.user_id} movie={self.movie_id} rating={self.rating}>"


class UserMovie(Base):
    """A movie on a user's personal list, with its watch status."""
    __tablename__ = "usermovies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_id = Column(
        Uuid,
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        SAEnum(
            WatchStatusEnum,
            name="watch_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=WatchStatusEnum.PLANNED_TO_WATCH,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", name="uq_usermovies_user_movie"),
    )

    # Relationships
    user = relationship("User", back_populates="collection")
    movie = relationship("Movie", back_populates="collected_by")

    def __repr__(self) -> str:
        return f"<UserMovie user={self.user_id} movie={self.movie_id} status={self.status}>"
