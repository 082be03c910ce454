"""
Auth and profile request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class UserResponse(BaseModel):
    """Public-facing user profile."""

    id: UUID
    github_id: str
    name: str
    github_username: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Returned by the GitHub callback once the session cookie is set."""

    message: str
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class UpdateProfileRequest(BaseModel):
    """Payload for PUT /users/me. Omitted fields are left unchanged."""

    name: str | None = None
    email: EmailStr | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("Name cannot be empty if provided.")
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty if provided.")
        if len(v) > 255:
            raise ValueError("Name cannot exceed 255 characters")
        return v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v is not None else None
