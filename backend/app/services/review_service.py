"""
Movie review business logic.

User-scoped functions address a review by (user_id, movie_id). The two
*_by_id functions serve the administrative /reviews/{review_id} routes and
are the only ones that select by record id.
"""
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.db.models import Review
from app.services.movie_service import get_movie


class ReviewNotFoundError(NotFoundError):
    """Raised when a review does not exist."""

    code = "REVIEW_NOT_FOUND"


class DuplicateReviewError(ConflictError):
    """Raised when a user already reviewed this movie."""

    code = "DUPLICATE_REVIEW"

    def __init__(self) -> None:
        super().__init__(
            "You have already reviewed this movie. Please update your existing review."
        )


def _newest_first(query):
    return query.order_by(Review.created_at.desc(), Review.id.desc())


def _get_owned_review(db: Session, user_id: UUID, movie_id: UUID) -> Review | None:
    return (
        db.query(Review)
        .filter(Review.user_id == user_id, Review.movie_id == movie_id)
        .first()
    )


def get_user_review(db: Session, user_id: UUID, movie_id: UUID) -> Review:
    review = _get_owned_review(db, user_id, movie_id)
    if review is None:
        raise ReviewNotFoundError("Review by you for this movie not found.")
    return review


def list_user_reviews(db: Session, user_id: UUID, movie_id: UUID | None = None) -> list[Review]:
    """All reviews written by *user_id*, optionally narrowed to one movie."""
    query = db.query(Review).filter(Review.user_id == user_id)
    if movie_id is not None:
        query = query.filter(Review.movie_id == movie_id)
    return _newest_first(query).all()


def list_movie_reviews(db: Session, movie_id: UUID) -> list[Review]:
    """All reviews of a movie, newest first. Raises MovieNotFoundError."""
    get_movie(db, movie_id)
    return _newest_first(db.query(Review).filter(Review.movie_id == movie_id)).all()


def create_user_review(
    db: Session,
    user_id: UUID,
    movie_id: UUID,
    rating: int,
    message: str,
) -> Review:
    """
    Create the caller's review of a movie.

    Raises MovieNotFoundError if the movie is missing and
    DuplicateReviewError if the caller already reviewed it.
    """
    get_movie(db, movie_id)

    if _get_owned_review(db, user_id, movie_id) is not None:
        raise DuplicateReviewError()

    review = Review(user_id=user_id, movie_id=movie_id, rating=rating, message=message)
    db.add(review)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateReviewError() from exc

    db.refresh(review)
    return review


def _apply(db: Session, review: Review, rating: int, message: str) -> Review:
    review.rating = rating
    review.message = message
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def update_user_review(
    db: Session,
    user_id: UUID,
    movie_id: UUID,
    rating: int,
    message: str,
) -> Review:
    review = _get_owned_review(db, user_id, movie_id)
    if review is None:
        raise ReviewNotFoundError("Review by you for this movie not found. Unable to update.")
    return _apply(db, review, rating, message)


def delete_user_review(db: Session, user_id: UUID, movie_id: UUID) -> None:
    review = _get_owned_review(db, user_id, movie_id)
    if review is None:
        raise ReviewNotFoundError("Review by you for this movie not found, unable to delete.")
    db.delete(review)
    db.commit()


# ── Administrative (by record id) ────────────────────────────────────────────

def _get_review_by_id(db: Session, review_id: UUID) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if review is None:
        raise ReviewNotFoundError(f"Review {review_id} not found.")
    return review


def update_review_by_id(db: Session, review_id: UUID, rating: int, message: str) -> Review:
    return _apply(db, _get_review_by_id(db, review_id), rating, message)


def delete_review_by_id(db: Session, review_id: UUID) -> None:
    db.delete(_get_review_by_id(db, review_id))
    db.commit()
