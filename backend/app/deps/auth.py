"""
Auth dependency — shared across all protected endpoints.

The authenticated identity is always injected explicitly; there is no
fallback user when the session is missing.

Usage in any route:
    from app.deps.auth import get_current_user
    from app.db.models import User

    @router.get("/protected")
    def protected(user: User = Depends(get_current_user)):
        ...
"""
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import error_body
from app.core.security import decode_access_token
from app.db.models import User
from app.db.session import get_db

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    cookie_token: str | None = Depends(session_cookie),
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the session cookie (or bearer token) to a User.

    Raises 401 on any failure (missing/invalid token, unknown user).
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_body("NOT_AUTHENTICATED", "Not authorized, no valid session"),
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = cookie_token or (bearer.credentials if bearer else None)
    if not token:
        raise credentials_exception

    sub = decode_access_token(token)
    if sub is None:
        raise credentials_exception

    # Validate sub is a proper UUID string
    try:
        user_id = UUID(sub)
    except (ValueError, AttributeError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception

    return user
