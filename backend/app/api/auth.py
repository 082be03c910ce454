"""
Auth API — /auth
─────────────────
Endpoints:
  GET  /auth/github            — Redirect to GitHub's consent screen
  GET  /auth/github/callback   — Finish login, set the session cookie
  POST /auth/logout            — Clear the session cookie
  GET  /auth/me                — Return current user profile
"""
import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import error_body
from app.core.security import new_oauth_state, states_match
from app.db.models import User
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.auth import LoginResponse, UserResponse
from app.schemas.movies import MessageResponse
from app.services.auth_service import issue_access_token, login_with_github
from app.services.github_oauth import GitHubAuthError, GitHubConfigError, GitHubOAuthClient

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "movievault_oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


def get_github_client() -> GitHubOAuthClient:
    """Dependency so tests can swap in a fake client."""
    try:
        return GitHubOAuthClient()
    except GitHubConfigError as exc:
        logger.error("GitHub login attempted without OAuth credentials configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=error_body("GITHUB_NOT_CONFIGURED", "GitHub login is not configured."),
        ) from exc


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_body("GITHUB_LOGIN_FAILED", message),
    )


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("/github", status_code=status.HTTP_302_FOUND)
def github_login(client: GitHubOAuthClient = Depends(get_github_client)) -> RedirectResponse:
    """
    Redirect to GitHub.

    Open this URL directly in a browser; the OAuth redirect does not work
    from the Swagger UI.
    """
    state = new_oauth_state()
    response = RedirectResponse(client.authorize_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        secure=not settings.is_dev,
        samesite="lax",
    )
    return response


@router.get("/github/callback", response_model=LoginResponse)
async def github_callback(
    response: Response,
    code: str | None = Query(None, description="Authorization code from GitHub"),
    state: str | None = Query(None, description="State echoed back by GitHub"),
    expected_state: str | None = Cookie(None, alias=OAUTH_STATE_COOKIE),
    client: GitHubOAuthClient = Depends(get_github_client),
    db: Session = Depends(get_db),
) -> LoginResponse:
    """Exchange the code, upsert the user and start a session."""
    if not code:
        raise _unauthorized("Missing authorization code.")
    if not states_match(expected_state, state):
        raise _unauthorized("OAuth state mismatch.")

    try:
        user = await login_with_github(db, client, code)
    except GitHubAuthError as exc:
        logger.warning("GitHub login failed: %s", exc)
        raise _unauthorized("GitHub authentication failed.") from exc

    token = issue_access_token(user)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=not settings.is_dev,
        samesite="lax",
    )
    return LoginResponse(
        message="Login successful via GitHub",
        user=UserResponse.model_validate(user),
        access_token=token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse.model_validate(current_user)
