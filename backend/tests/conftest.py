import os

# Set test environment
os.environ["ENVIRONMENT"] = "development"
os.environ["ADMIN_JWT_SECRET"] = ""
os.environ["ADMIN_API_TOKEN"] = ""

from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.requests import Request

from storefront_admin.config import SESSION_COOKIE_NAME, Settings, get_settings
from storefront_admin.main import app
from storefront_admin.utils.session_token import issue_session_token, new_session_payload

TEST_SECRET = "test-session-secret-0123456789abcdef"
TEST_ADMIN_TOKEN = "test-static-admin-token"
TEST_CLIENT_ID = "test-client-id.apps.googleusercontent.com"
TEST_REDIRECT_URI = "http://test/api/auth/google/callback"
TEST_SUB = "109876543210987654321"
TEST_EMAIL = "owner@example.com"


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "development",
        "google_client_id": TEST_CLIENT_ID,
        "google_client_secret": "test-client-secret",
        "google_redirect_uri": TEST_REDIRECT_URI,
        "admin_jwt_secret": TEST_SECRET,
        "admin_api_token": TEST_ADMIN_TOKEN,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_id_token(sub: str = TEST_SUB, aud: str = TEST_CLIENT_ID) -> str:
    """Build an ID token shaped like Google's; only its claims are read."""
    return jwt.encode(
        {"iss": "https://accounts.google.com", "sub": sub, "aud": aud, "email": TEST_EMAIL},
        "unused-signing-key",
        algorithm="HS256",
    )


def make_request(cookie: str | None = None, admin_token: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"{SESSION_COOKIE_NAME}={cookie}".encode()))
    if admin_token is not None:
        headers.append((b"x-admin-token", admin_token.encode()))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": b"",
            "headers": headers,
        }
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def use_settings() -> Callable[[Settings], None]:
    """Swap the settings seen by the app for the rest of the test."""

    def _use(new_settings: Settings) -> None:
        app.dependency_overrides[get_settings] = lambda: new_settings

    return _use


@pytest_asyncio.fixture(scope="function")
async def client(settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with settings override."""
    app.dependency_overrides[get_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def session_token(settings: Settings) -> str:
    payload = new_session_payload(TEST_SUB, TEST_EMAIL, "Shop Owner", ttl_seconds=3600)
    return issue_session_token(payload, settings.admin_jwt_secret)


@pytest.fixture
def session_cookie_header(session_token: str) -> dict[str, str]:
    return {"Cookie": f"{SESSION_COOKIE_NAME}={session_token}"}


@pytest.fixture
def admin_token_header() -> dict[str, str]:
    return {"x-admin-token": TEST_ADMIN_TOKEN}
