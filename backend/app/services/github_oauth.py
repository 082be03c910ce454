"""
GitHub OAuth client
───────────────────
Wraps the three GitHub calls the login flow needs.

Flow:
  1. /auth/github redirects the browser to authorize_url().
  2. GitHub redirects back to /auth/github/callback?code=...&state=...
  3. exchange_code() trades the code for an access token.
  4. fetch_profile() reads /user (and /user/emails when the public email
     is hidden) and returns a GitHubProfile.
"""
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from app.core.config import settings

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_BASE = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 10.0
GITHUB_SCOPE = "user:email"


class GitHubConfigError(Exception):
    """Raised when the OAuth client is used without app credentials."""


class GitHubAuthError(Exception):
    """Raised when GitHub rejects the code or returns an unusable response."""


@dataclass(frozen=True)
class GitHubProfile:
    """The subset of a GitHub account this API stores."""

    github_id: str
    login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


class GitHubOAuthClient:
    """
    Thin async wrapper around GitHub's OAuth and REST endpoints.
    Uses httpx so the callback route does not block the event loop.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id or settings.GITHUB_CLIENT_ID
        self.client_secret = client_secret or settings.GITHUB_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.github_callback_url
        self._transport = transport
        if not self.client_id or not self.client_secret:
            raise GitHubConfigError(
                "GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET are not set. "
                "Add them to your .env file or pass them explicitly."
            )

    def authorize_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "scope": GITHUB_SCOPE,
                "state": state,
            }
        )
        return f"{GITHUB_AUTHORIZE_URL}?{query}"

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for a user access token."""
        async with httpx.AsyncClient(
            timeout=GITHUB_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    GITHUB_TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise GitHubAuthError(f"GitHub token exchange failed: {exc}") from exc

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            # GitHub answers 200 with {"error": "bad_verification_code", ...}
            raise GitHubAuthError(payload.get("error_description") or "GitHub returned no access token")
        return token

    async def fetch_profile(self, access_token: str) -> GitHubProfile:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
        async with httpx.AsyncClient(
            base_url=GITHUB_API_BASE,
            headers=headers,
            timeout=GITHUB_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get("/user")
                response.raise_for_status()
                user = response.json()

                email = user.get("email")
                if not email:
                    emails_response = await client.get("/user/emails")
                    if emails_response.status_code == 200:
                        email = pick_primary_email(emails_response.json())
            except httpx.HTTPError as exc:
                raise GitHubAuthError(f"GitHub profile request failed: {exc}") from exc

        if "id" not in user or "login" not in user:
            raise GitHubAuthError("GitHub profile response is missing id/login")

        return GitHubProfile(
            github_id=str(user["id"]),
            login=user["login"],
            name=user.get("name") or None,
            email=email or None,
            avatar_url=user.get("avatar_url") or None,
        )


def pick_primary_email(emails: list[dict]) -> str | None:
    """Prefer the primary verified address, then any verified one."""
    verified = [e for e in emails if isinstance(e, dict) and e.get("verified") and e.get("email")]
    for entry in verified:
        if entry.get("primary"):
            return entry["email"]
    return verified[0]["email"] if verified else None
