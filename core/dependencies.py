"""FastAPI dependency injection providers."""

import logging
import random

from fastapi import Depends
from posthog import Posthog

from config.settings import Settings, get_settings
from songlink.service import SonglinkService

logger = logging.getLogger(__name__)

# Module-level instances for lifecycle management
_songlink_service: SonglinkService | None = None
_posthog_client: Posthog | None = None
_random_source = random.SystemRandom()


def get_songlink_service(settings: Settings = Depends(get_settings)) -> SonglinkService:
    """Get the shared Songlink forwarding service.

    Args:
        settings: Application settings

    Returns:
        SonglinkService: Service holding the pooled upstream HTTP client
    """
    global _songlink_service

    if _songlink_service is None:
        _songlink_service = SonglinkService(timeout=settings.upstream_timeout)
        logger.info(f"Songlink service initialized (timeout: {settings.upstream_timeout}s)")

    return _songlink_service


async def close_songlink_service() -> None:
    """Close the Songlink service and its HTTP client."""
    global _songlink_service
    if _songlink_service:
        await _songlink_service.close()
        _songlink_service = None


def get_random_source() -> random.Random:
    """Random source used to draw outbound fingerprint profiles."""
    return _random_source


def get_posthog_client(settings: Settings = Depends(get_settings)) -> Posthog | None:
    """Get PostHog client instance.

    Args:
        settings: Application settings

    Returns:
        Optional[Posthog]: PostHog client if configured and enabled, None otherwise
    """
    global _posthog_client

    if not settings.enable_telemetry:
        logger.debug("Telemetry disabled")
        return None

    if not settings.posthog_api_key:
        logger.debug("POSTHOG_API_KEY not set - telemetry disabled")
        return None

    if _posthog_client is None:
        _posthog_client = Posthog(
            project_api_key=settings.posthog_api_key,
            host=settings.posthog_host,
        )
        logger.info(f"PostHog client initialized (host: {settings.posthog_host})")

    return _posthog_client


def flush_posthog() -> None:
    """Flush any buffered PostHog events."""
    if _posthog_client:
        _posthog_client.flush()


def shutdown_posthog() -> None:
    """Shutdown PostHog client gracefully."""
    global _posthog_client
    if _posthog_client:
        _posthog_client.shutdown()
        _posthog_client = None
        logger.info("PostHog client shutdown")
