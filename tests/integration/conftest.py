"""Integration test fixtures.

Runs the real forwarding pipeline end to end, with the Songlink API
replaced by an ``httpx.MockTransport`` stub.
"""

import httpx
import pytest
import pytest_asyncio

from songlink.service import SonglinkService
from tests.factories import streamed_response


class StubUpstream:
    """Configurable stand-in for the Songlink API."""

    def __init__(self):
        self.status = 200
        self.body = b"{}"
        self.headers: dict[str, str] = {"Content-Type": "application/json"}
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def respond(self, status=200, body=b"{}", headers=None):
        self.status = status
        self.body = body
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.error = None

    def fail(self, error: Exception):
        self.error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return streamed_response(self.status, self.body, self.headers)


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest_asyncio.fixture
async def songlink_service(upstream):
    """Real SonglinkService talking to the stub upstream."""
    service = SonglinkService(timeout=5.0, transport=httpx.MockTransport(upstream))
    yield service
    await service.close()


@pytest_asyncio.fixture
async def app_client(songlink_service):
    """httpx AsyncClient against the app with a real forwarder and no telemetry."""
    from httpx import ASGITransport, AsyncClient
    from main import app
    from core.dependencies import get_posthog_client, get_songlink_service

    app.dependency_overrides[get_songlink_service] = lambda: songlink_service
    app.dependency_overrides[get_posthog_client] = lambda: None

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
