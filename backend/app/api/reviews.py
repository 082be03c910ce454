"""
Reviews API — /reviews
──────────────────────
Administrative review mutation by record id. Unlike the
/users/me/movies/{movie_id}/review routes these are not scoped to the
caller's own reviews.

Endpoints:
  PUT    /reviews/{review_id}   — Replace rating + message
  DELETE /reviews/{review_id}   — Delete
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.models import User
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.movies import MessageResponse
from app.schemas.reviews import ReviewBody, ReviewResponse
from app.services.review_service import delete_review_by_id, update_review_by_id

router = APIRouter()


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: UUID,
    payload: ReviewBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReviewResponse:
    review = update_review_by_id(db, review_id, payload.rating, payload.message)
    return ReviewResponse.model_validate(review)


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    delete_review_by_id(db, review_id)
    return MessageResponse(message="Review deleted.")
