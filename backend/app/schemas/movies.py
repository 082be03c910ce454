"""
Movie catalog request/response schemas.
"""
import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator

from app.db.models import (
    MAX_MOVIE_LENGTH,
    MAX_MOVIE_YEAR,
    MAX_POSTER_URL_LENGTH,
    MIN_MOVIE_YEAR,
)


def _clean_title(value: str) -> str:
    title = re.sub(r"\s+", " ", value.strip())
    if not title:
        raise ValueError("Title is required.")
    if len(title) > 500:
        raise ValueError("Title cannot exceed 500 characters.")
    return title


def _clean_genres(values: list[str]) -> list[str]:
    genres: list[str] = []
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in genres:
            genres.append(cleaned)
    return genres


def _check_poster_url(value: HttpUrl | None) -> HttpUrl | None:
    if value is not None and len(str(value)) > MAX_POSTER_URL_LENGTH:
        raise ValueError(f"poster_url cannot exceed {MAX_POSTER_URL_LENGTH} characters.")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class MovieCreateRequest(BaseModel):
    """Payload for POST /movies."""

    title: str
    year: int = Field(..., ge=MIN_MOVIE_YEAR, le=MAX_MOVIE_YEAR)
    rating: str | None = Field(default=None, max_length=16)
    genre: list[str] = Field(default_factory=list)
    length: int | None = Field(default=None, ge=0, le=MAX_MOVIE_LENGTH)
    description: str | None = None
    director: str | None = Field(default=None, max_length=255)
    poster_url: HttpUrl | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, value: list[str]) -> list[str]:
        return _clean_genres(value)

    @field_validator("poster_url")
    @classmethod
    def validate_poster_url(cls, value: HttpUrl | None) -> HttpUrl | None:
        return _check_poster_url(value)

    @field_validator("rating", "description", "director")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class MovieUpdateRequest(BaseModel):
    """
    Payload for PUT /movies/{movie_id}.

    Every field is optional; only the fields present in the body are
    written. title, year and genre may not be explicitly nulled.
    """

    title: str | None = None
    year: int | None = Field(default=None, ge=MIN_MOVIE_YEAR, le=MAX_MOVIE_YEAR)
    rating: str | None = Field(default=None, max_length=16)
    genre: list[str] | None = None
    length: int | None = Field(default=None, ge=0, le=MAX_MOVIE_LENGTH)
    description: str | None = None
    director: str | None = Field(default=None, max_length=255)
    poster_url: HttpUrl | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        return _clean_title(value) if value is not None else None

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, value: list[str] | None) -> list[str] | None:
        return _clean_genres(value) if value is not None else None

    @field_validator("poster_url")
    @classmethod
    def validate_poster_url(cls, value: HttpUrl | None) -> HttpUrl | None:
        return _check_poster_url(value)

    @field_validator("rating", "description", "director")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def reject_required_nulls(self) -> "MovieUpdateRequest":
        for field in ("title", "year", "genre"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class MovieResponse(BaseModel):
    """A catalog entry."""

    id: UUID
    title: str
    year: int
    rating: str | None = None
    genre: list[str] = Field(default_factory=list)
    length: int | None = None
    description: str | None = None
    director: str | None = None
    poster_url: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MovieListResponse(BaseModel):
    """Response envelope for GET /movies."""

    items: list[MovieResponse]
    count: int


class MessageResponse(BaseModel):
    """Plain confirmation body for deletes and logout."""

    message: str
