"""
Personal collection request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.db.models import WatchStatusEnum


class AddToCollectionRequest(BaseModel):
    """Payload for POST /users/me/movies."""

    movie_id: UUID
    status: WatchStatusEnum = WatchStatusEnum.PLANNED_TO_WATCH


class UpdateCollectionRequest(BaseModel):
    """Payload for PUT /users/me/movies/{movie_id}."""

    status: WatchStatusEnum


class CollectionEntryResponse(BaseModel):
    """Catalog fields of a movie flattened together with the caller's status."""

    id: UUID
    title: str
    year: int
    rating: str | None = None
    genre: list[str] = Field(default_factory=list)
    length: int | None = None
    description: str | None = None
    director: str | None = None
    poster_url: str | None = None
    status: WatchStatusEnum
    added_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionListResponse(BaseModel):
    """Response envelope for GET /users/me/movies."""

    items: list[CollectionEntryResponse]
    count: int
