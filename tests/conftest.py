#  Latam Site - Test Fixtures
#
#  Shared fixtures for the test suite.
#  Uses DI container overrides instead of monkey-patching singletons.
#
#  Depends on: latam_site/container.py, latam_site/app.py
#  Used by:    all test files

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from dependency_injector import providers


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def email_service():
    """EmailService with credentials set; pair with smtp_mock to capture sends."""
    from latam_site.services.email import EmailService

    return EmailService(
        user="web@latam.test",
        password="app-password",
        service="gmail",
        to="admin@latam.test",
        timeout=5.0,
    )


@pytest.fixture
def smtp_mock():
    """Patch smtplib.SMTP; yields the server object used inside the `with` block."""
    with patch("latam_site.services.email.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server
        yield server


@pytest.fixture
def mock_ai_chat():
    chat = MagicMock()
    chat.complete = AsyncMock(return_value="Hola, ¿en qué puedo ayudarte?")
    return chat


# ---------------------------------------------------------------------------
# FastAPI client fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def app_client(email_service, mock_ai_chat):
    """httpx client against the real app with fresh gate state.

    Uses explicit try/finally with reset_override() so DI state is fully
    cleaned up between tests.
    """
    from httpx import ASGITransport, AsyncClient
    from latam_site.app import app, container
    from latam_site.rate_limit import RateLimiter, default_policies, limiter
    from latam_site.services.csrf import TokenStore
    from latam_site.services.store import MemoryStore

    mock_http = AsyncMock()
    mock_http.aclose = AsyncMock()

    container.http_client.override(providers.Object(mock_http))
    container.token_store.override(providers.Object(TokenStore(store=MemoryStore())))
    container.email.override(providers.Object(email_service))
    container.ai_chat.override(providers.Object(mock_ai_chat))
    container.rate_limiter.override(
        providers.Object(RateLimiter(strategy=limiter.limiter, policies=default_policies()))
    )

    # Reset rate limiter storage so tests don't hit limits from prior tests
    limiter.reset()

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        container.http_client.reset_override()
        container.token_store.reset_override()
        container.email.reset_override()
        container.ai_chat.reset_override()
        container.rate_limiter.reset_override()


@pytest.fixture
def get_csrf(app_client):
    """Fetch a CSRF token; the session cookie lands in the client's jar."""
    async def _get(client=None) -> str:
        resp = await (client or app_client).get("/api/csrf-token")
        assert resp.status_code == 200
        return resp.json()["csrfToken"]
    return _get
