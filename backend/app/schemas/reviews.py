"""
Review request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

MAX_MESSAGE_LENGTH = 5000


class ReviewBody(BaseModel):
    """
    Rating + message, shared by create and both update paths.

    rating must be a JSON integer from 1 to 5; strings, floats and booleans
    are rejected.
    """

    rating: StrictInt = Field(..., ge=1, le=5)
    message: str

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        message = value.strip()
        if not message:
            raise ValueError("Review message cannot be empty.")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValueError(
                f"Review message must be between 1 and {MAX_MESSAGE_LENGTH} characters."
            )
        return message


class ReviewResponse(BaseModel):
    """A single review."""

    id: UUID
    user_id: UUID
    movie_id: UUID
    rating: int
    message: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    """List of reviews, newest first."""

    reviews: list[ReviewResponse]
    total: int
