"""
Auth business logic — GitHub login upsert and session token issuance.

All user writes triggered by a login go through this layer (not directly
in routes).
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.db.models import User
from app.services.github_oauth import GitHubOAuthClient, GitHubProfile

logger = logging.getLogger(__name__)


def _email_free_for(db: Session, email: str, user: User | None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if user is not None and user.id is not None:
        query = query.filter(User.id != user.id)
    return query.first() is None


def _normalise_email(email: str | None) -> str | None:
    """Same normalisation profile updates apply, so uniqueness is case-insensitive."""
    if email is None:
        return None
    return email.strip().lower() or None


def _apply_profile(user: User, profile: GitHubProfile) -> None:
    user.name = profile.display_name
    user.github_username = profile.login
    user.avatar_url = profile.avatar_url


def upsert_github_user(db: Session, profile: GitHubProfile) -> User:
    """
    Create the User on first login, refresh it on later logins.

    - name falls back to the GitHub login when no display name is set.
    - email is lowercased, only written when GitHub shares one, and only if
      no other account already holds it; an existing address is never
      cleared.
    """
    email = _normalise_email(profile.email)
    user = db.query(User).filter(User.github_id == profile.github_id).first()
    created = user is None

    if created:
        user = User(github_id=profile.github_id)

    _apply_profile(user, profile)
    if email and _email_free_for(db, email, user):
        user.email = email

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = db.query(User).filter(User.github_id == profile.github_id).first()
        if existing is not None:
            # Two first-logins for the same account raced; the other one won.
            user = existing
            created = False
        else:
            # The email was claimed by another account in the meantime.
            user = User(github_id=profile.github_id)
            _apply_profile(user, profile)
            db.add(user)
            db.commit()

    db.refresh(user)
    if created:
        logger.info("Created user %s for GitHub account %s", user.id, profile.login)
    return user


async def login_with_github(db: Session, client: GitHubOAuthClient, code: str) -> User:
    """Complete the OAuth callback: code → token → profile → User row."""
    access_token = await client.exchange_code(code)
    profile = await client.fetch_profile(access_token)
    return upsert_github_user(db, profile)


def issue_access_token(user: User) -> str:
    """Create a signed JWT with the user's ID as the subject claim."""
    return create_access_token(subject=str(user.id))
