"""Shared test fixtures.

Provides:
- Environment pinned to sample mode with fixed signing secrets
- FastAPI test app built fresh per test (settings cache cleared)
- Anonymous and signed-in async HTTP clients over ASGITransport
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

os.environ.update(
    {
        "ENVIRONMENT": "development",
        "HUBSPOT_API_KEY": "",
        "USE_DUMMY_DATA": "false",
        "WORKFLOW_TAG": "Next-meeting",
        "FRONTEND_URL": "http://localhost:5173",
        "JWT_SECRET": "test-jwt-secret",
        "SESSION_SECRET": "test-session-secret",
        "GOOGLE_CLIENT_ID": "test-client-id",
        "GOOGLE_CLIENT_SECRET": "test-client-secret",
        "CALLBACK_URL": "http://test/api/auth/google/callback",
        "SENTRY_DSN": "",
    }
)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.deal_review.config import get_settings  # noqa: E402
from src.deal_review.core.security import SESSION_COOKIE_NAME, issue_session_token  # noqa: E402
from src.deal_review.main import create_app  # noqa: E402
from src.deal_review.schemas.auth import Identity  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Re-read settings for every test so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def identity() -> Identity:
    return Identity(
        id="google-123",
        email="reviewer@example.com",
        name="Rae Viewer",
        picture="https://example.com/rae.png",
    )


@pytest.fixture
def session_token(identity) -> str:
    return issue_session_token(identity)


@pytest.fixture
def app():
    """FastAPI app in sample mode (no HubSpot key configured)."""
    return create_app()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_client(app, session_token) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client carrying a valid session cookie."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={SESSION_COOKIE_NAME: session_token},
    ) as ac:
        yield ac
