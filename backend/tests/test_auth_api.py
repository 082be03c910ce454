import unittest
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse
from uuid import uuid4

from fastapi.testclient import TestClient

from app.api.auth import OAUTH_STATE_COOKIE, get_github_client
from app.core.config import settings
from app.core.security import create_access_token
from app.db.session import get_db
from app.main import app
from app.services.github_oauth import GitHubAuthError, GitHubOAuthClient, GitHubProfile
from tests.db_utils import add_user, make_session_factory


def _fake_github_client(profile: GitHubProfile | None = None, error: Exception | None = None):
    client = GitHubOAuthClient(client_id="cid", client_secret="secret", redirect_uri="http://test/cb")
    client.exchange_code = AsyncMock(return_value="gho_token", side_effect=error)
    client.fetch_profile = AsyncMock(return_value=profile)
    return client


class TestAuthApi(unittest.TestCase):
    def setUp(self) -> None:
        self.Session = make_session_factory()

        def _get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_me_requires_session(self) -> None:
        response = self.client.get("/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "NOT_AUTHENTICATED")

    def test_me_rejects_tampered_token(self) -> None:
        response = self.client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        self.assertEqual(response.status_code, 401)

    def test_me_rejects_token_for_deleted_user(self) -> None:
        token = create_access_token(uuid4())
        response = self.client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)

    def test_me_with_bearer_and_cookie(self) -> None:
        with self.Session() as db:
            user = add_user(db, github_id="77", name="Cookie Monster")
        token = create_access_token(user.id)

        response = self.client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["github_id"], "77")

        self.client.cookies.set(settings.SESSION_COOKIE_NAME, token)
        response = self.client.get("/auth/me")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Cookie Monster")

    def test_github_redirect_sets_state_cookie(self) -> None:
        app.dependency_overrides[get_github_client] = lambda: _fake_github_client()
        response = self.client.get("/auth/github", follow_redirects=False)

        self.assertEqual(response.status_code, 302)
        location = urlparse(response.headers["location"])
        self.assertEqual(location.netloc, "github.com")
        query = parse_qs(location.query)
        self.assertEqual(query["scope"], ["user:email"])
        self.assertEqual(query["state"], [response.cookies[OAUTH_STATE_COOKIE]])

    def test_callback_creates_user_and_session(self) -> None:
        profile = GitHubProfile(github_id="42", login="octocat", email=None, avatar_url="https://a/1.png")
        app.dependency_overrides[get_github_client] = lambda: _fake_github_client(profile)
        self.client.cookies.set(OAUTH_STATE_COOKIE, "xyz")

        response = self.client.get("/auth/github/callback", params={"code": "abc", "state": "xyz"})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["message"], "Login successful via GitHub")
        self.assertEqual(payload["user"]["name"], "octocat")
        self.assertIsNone(payload["user"]["email"])
        self.assertIn(settings.SESSION_COOKIE_NAME, response.cookies)

        # The new session cookie authenticates follow-up requests
        me = self.client.get("/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["github_id"], "42")

    def test_callback_state_mismatch_is_401(self) -> None:
        profile = GitHubProfile(github_id="42", login="octocat")
        app.dependency_overrides[get_github_client] = lambda: _fake_github_client(profile)
        self.client.cookies.set(OAUTH_STATE_COOKIE, "expected")

        response = self.client.get("/auth/github/callback", params={"code": "abc", "state": "forged"})
        self.assertEqual(response.status_code, 401)

    def test_callback_github_failure_is_401(self) -> None:
        app.dependency_overrides[get_github_client] = lambda: _fake_github_client(
            error=GitHubAuthError("bad_verification_code")
        )
        self.client.cookies.set(OAUTH_STATE_COOKIE, "xyz")

        response = self.client.get("/auth/github/callback", params={"code": "abc", "state": "xyz"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "GITHUB_LOGIN_FAILED")

    def test_logout_clears_cookie(self) -> None:
        with self.Session() as db:
            user = add_user(db)
        self.client.cookies.set(settings.SESSION_COOKIE_NAME, create_access_token(user.id))

        response = self.client.post("/auth/logout")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Logged out successfully")
        self.assertIn(settings.SESSION_COOKIE_NAME, response.headers.get("set-cookie", ""))

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_unknown_route_uses_error_envelope(self) -> None:
        response = self.client.get("/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")


class TestGitHubClientConfig(unittest.TestCase):
    def test_missing_credentials_is_503(self) -> None:
        original = (settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET)
        settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET = "", ""
        try:
            response = TestClient(app).get("/auth/github", follow_redirects=False)
        finally:
            settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET = original
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"]["code"], "GITHUB_NOT_CONFIGURED")


