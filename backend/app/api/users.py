"""
Users API — /users/me
─────────────────────
Everything here acts on the authenticated caller only.

Endpoints:
  PUT    /users/me                             — Update name/email
  DELETE /users/me                             — Delete account (+ reviews, collection)
  GET    /users/me/movies                      — Collection, filter by status/genre/year/title
  POST   /users/me/movies                      — Add a movie to the collection
  GET    /users/me/movies/{movie_id}           — One collection entry
  PUT    /users/me/movies/{movie_id}           — Change watch status
  DELETE /users/me/movies/{movie_id}           — Remove from collection
  GET    /users/me/movies/{movie_id}/review    — Own review of a movie
  POST   /users/me/movies/{movie_id}/review    — Write it (409 if one exists)
  PUT    /users/me/movies/{movie_id}/review    — Rewrite it
  DELETE /users/me/movies/{movie_id}/review    — Delete it
  GET    /users/me/reviews                     — All own reviews, optional movie_id
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.models import MAX_MOVIE_YEAR, MIN_MOVIE_YEAR, User, WatchStatusEnum
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.auth import UpdateProfileRequest, UserResponse
from app.schemas.collection import (
    AddToCollectionRequest,
    CollectionEntryResponse,
    CollectionListResponse,
    UpdateCollectionRequest,
)
from app.schemas.movies import MessageResponse
from app.schemas.reviews import ReviewBody, ReviewListResponse, ReviewResponse
from app.services.collection_service import (
    add_to_collection,
    get_collection_entry,
    list_collection,
    remove_from_collection,
    update_collection_status,
)
from app.services.review_service import (
    create_user_review,
    delete_user_review,
    get_user_review,
    list_user_reviews,
    update_user_review,
)
from app.services.user_service import delete_account, update_profile

router = APIRouter()


# ── Profile ───────────────────────────────────────────────────────────────────

@router.put("/me", response_model=UserResponse)
def update_me(
    payload: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Returns 409 if the new email belongs to another account."""
    user = update_profile(db, current_user.id, payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete("/me", response_model=MessageResponse)
def delete_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Deletes the account and cascades to the caller's reviews and collection."""
    delete_account(db, current_user.id)
    return MessageResponse(message="User account deleted successfully")


# ── Collection ────────────────────────────────────────────────────────────────

@router.get("/me/movies", response_model=CollectionListResponse)
def get_my_movies(
    status: WatchStatusEnum | None = Query(None, description="Watch status"),
    genre: str | None = Query(None, description="Exact genre, matched against the genre list"),
    year: int | None = Query(None, ge=MIN_MOVIE_YEAR, le=MAX_MOVIE_YEAR, description="Release year"),
    title: str | None = Query(None, description="Case-insensitive title fragment"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CollectionListResponse:
    entries = list_collection(
        db,
        current_user.id,
        status=status,
        genre=genre,
        year=year,
        title=title,
    )
    return CollectionListResponse(
        items=[CollectionEntryResponse.model_validate(entry) for entry in entries],
        count=len(entries),
    )


@router.post(
    "/me/movies",
    response_model=CollectionEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_my_movie(
    payload: AddToCollectionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CollectionEntryResponse:
    """404 if the movie is not in the catalog, 409 if it is already listed."""
    entry = add_to_collection(db, current_user.id, payload.movie_id, payload.status)
    return CollectionEntryResponse.model_validate(entry)


@router.get("/me/movies/{movie_id}", response_model=CollectionEntryResponse)
def get_my_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CollectionEntryResponse:
    return CollectionEntryResponse.model_validate(
        get_collection_entry(db, current_user.id, movie_id)
    )


@router.put("/me/movies/{movie_id}", response_model=CollectionEntryResponse)
def update_my_movie(
    movie_id: UUID,
    payload: UpdateCollectionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CollectionEntryResponse:
    entry = update_collection_status(db, current_user.id, movie_id, payload.status)
    return CollectionEntryResponse.model_validate(entry)


@router.delete("/me/movies/{movie_id}", response_model=MessageResponse)
def delete_my_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    remove_from_collection(db, current_user.id, movie_id)
    return MessageResponse(message="Movie removed from your collection.")


# ── Own reviews ───────────────────────────────────────────────────────────────

@router.get("/me/movies/{movie_id}/review", response_model=ReviewResponse)
def get_my_review(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReviewResponse:
    return ReviewResponse.model_validate(get_user_review(db, current_user.id, movie_id))


@router.post(
    "/me/movies/{movie_id}/review",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_my_review(
    movie_id: UUID,
    payload: ReviewBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReviewResponse:
    """404 if the movie is missing, 409 if the caller already reviewed it."""
    review = create_user_review(db, current_user.id, movie_id, payload.rating, payload.message)
    return ReviewResponse.model_validate(review)


@router.put("/me/movies/{movie_id}/review", response_model=ReviewResponse)
def update_my_review(
    movie_id: UUID,
    payload: ReviewBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReviewResponse:
    review = update_user_review(db, current_user.id, movie_id, payload.rating, payload.message)
    return ReviewResponse.model_validate(review)


@router.delete("/me/movies/{movie_id}/review", response_model=MessageResponse)
def delete_my_review(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    delete_user_review(db, current_user.id, movie_id)
    return MessageResponse(message="Review successfully deleted.")


@router.get("/me/reviews", response_model=ReviewListResponse)
def get_my_reviews(
    movie_id: UUID | None = Query(None, description="Only the review of this movie"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReviewListResponse:
    reviews = list_user_reviews(db, current_user.id, movie_id=movie_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review) for review in reviews],
        total=len(reviews),
    )
