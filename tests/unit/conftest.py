"""Unit test fixtures."""

from contextlib import contextmanager
from unittest.mock import AsyncMock, Mock

import pytest

import core.dependencies as deps_module
from config.settings import Settings
from core.cors import OriginPolicy
from songlink.service import SonglinkService
from tests.factories import make_upstream_response


@contextmanager
def override_deps(app, overrides):
    """Set FastAPI dependency overrides and clear them on exit.

    Args:
        app: The FastAPI application.
        overrides: A dict mapping dependency functions to their replacement values.
    """

    def _make_override(val):
        return lambda: val

    for dep_fn, provider in overrides.items():
        app.dependency_overrides[dep_fn] = _make_override(provider)
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@contextmanager
def origin_policy(app, dev):
    """Temporarily swap the application's origin policy."""
    previous = app.state.origin_policy
    app.state.origin_policy = OriginPolicy.for_mode(dev=dev)
    try:
        yield app.state.origin_policy
    finally:
        app.state.origin_policy = previous


@pytest.fixture
def mock_settings(monkeypatch):
    """Settings with safe test defaults (no real DSNs/keys)."""
    monkeypatch.setenv("SENTRY_DSN", "")
    monkeypatch.setenv("POSTHOG_API_KEY", "")
    monkeypatch.setenv("ENABLE_TELEMETRY", "false")
    monkeypatch.setenv("DEV", "")
    return Settings(
        dev=False,
        sentry_dsn=None,
        posthog_api_key=None,
        enable_telemetry=False,
    )


@pytest.fixture
def mock_songlink_service():
    """AsyncMock SonglinkService answering with a 200 JSON body."""
    service = AsyncMock(spec=SonglinkService)
    service.fetch = AsyncMock(return_value=make_upstream_response())
    return service


@pytest.fixture
def mock_posthog_client():
    """Mock PostHog client."""
    client = Mock()
    client.capture = Mock()
    client.flush = Mock()
    client.shutdown = Mock()
    return client


@pytest.fixture(autouse=True)
def reset_dependencies():
    """Reset module-level singleton state between tests."""
    deps_module._songlink_service = None
    deps_module._posthog_client = None
    yield
    deps_module._songlink_service = None
    deps_module._posthog_client = None
