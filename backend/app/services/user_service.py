"""
User account business logic — profile edits and account deletion.
"""
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.models import Review, User, UserMovie

logger = logging.getLogger(__name__)


class UserNotFoundError(NotFoundError):
    """Raised when the authenticated user no longer exists."""

    code = "USER_NOT_FOUND"


class DuplicateEmailError(ConflictError):
    """Raised when a profile update would reuse another account's email."""

    code = "DUPLICATE_EMAIL"

    def __init__(self) -> None:
        super().__init__("Another account already uses that email.")


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    """Fetch a single user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def _require_user(db: Session, user_id: UUID) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError("User not found")
    return user


def update_profile(db: Session, user_id: UUID, changes: dict) -> User:
    """
    Apply name/email changes.

    *changes* holds only the fields the client sent; email may be None to
    clear it.
    """
    if not changes:
        raise ValidationError("Provide a name or an email to update.")
    user = _require_user(db, user_id)

    email = changes.get("email")
    if email:
        taken = (
            db.query(User.id)
            .filter(User.email == email, User.id != user.id)
            .first()
        )
        if taken is not None:
            raise DuplicateEmailError()

    for field in ("name", "email"):
        if field in changes:
            setattr(user, field, changes[field])

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError() from exc

    db.refresh(user)
    return user


def delete_account(db: Session, user_id: UUID) -> dict:
    """
    Delete the user together with every review and collection entry they own.

    Runs as one transaction. Returns how many rows of each kind were removed.
    """
    user = _require_user(db, user_id)

    reviews = (
        db.query(Review)
        .filter(Review.user_id == user.id)
        .delete(synchronize_session="fetch")
    )
    entries = (
        db.query(UserMovie)
        .filter(UserMovie.user_id == user.id)
        .delete(synchronize_session="fetch")
    )
    db.delete(user)
    db.commit()

    logger.info(
        "Deleted user %s with %d review(s) and %d collection entr(ies)",
        user_id,
        reviews,
        entries,
    )
    return {"reviews": reviews, "collection_entries": entries}
