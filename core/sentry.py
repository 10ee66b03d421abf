"""Sentry error tracking integration.

Songlink API keys travel in the ``key`` query parameter, both on inbound
``/api/links`` requests and on the forwarded upstream call. Every event and
breadcrumb is scrubbed of that parameter before it leaves the process.
"""

import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)

SECRET_QUERY_PARAMS = frozenset({"key"})
REDACTED = "[Filtered]"


def redact_query(query: str) -> str:
    """Replace secret parameter values in a raw query string."""
    if not query:
        return query
    pairs = parse_qsl(query, keep_blank_values=True)
    if not any(name in SECRET_QUERY_PARAMS for name, _ in pairs):
        return query
    return urlencode(
        [(name, REDACTED if name in SECRET_QUERY_PARAMS else value) for name, value in pairs],
        safe="[]",
    )


def redact_url(url: str) -> str:
    """Replace secret parameter values in the query part of a URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    return urlunsplit(parts._replace(query=redact_query(parts.query)))


def scrub_event(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """``before_send`` hook: strip API keys from the captured request."""
    request = event.get("request")
    if isinstance(request, dict):
        if isinstance(request.get("query_string"), str):
            request["query_string"] = redact_query(request["query_string"])
        if isinstance(request.get("url"), str):
            request["url"] = redact_url(request["url"])

    breadcrumbs = event.get("breadcrumbs")
    values = breadcrumbs.get("values") if isinstance(breadcrumbs, dict) else breadcrumbs
    for crumb in values or []:
        scrub_breadcrumb(crumb, {})
    return event


def scrub_breadcrumb(crumb: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """``before_breadcrumb`` hook: strip API keys from outbound HTTP breadcrumbs."""
    data = crumb.get("data")
    if isinstance(data, dict):
        if isinstance(data.get("url"), str):
            data["url"] = redact_url(data["url"])
        if isinstance(data.get("http.query"), str):
            data["http.query"] = redact_query(data["http.query"])
    return crumb


def init_sentry(
    dsn: str | None,
    environment: str = "production",
    release: str | None = None,
) -> None:
    """Initialize Sentry SDK with FastAPI integration.

    Args:
        dsn: Sentry DSN. If empty or None, Sentry is not initialized.
        environment: Deployment environment ("production" or "development")
        release: Optional release version string
    """
    if not dsn:
        logger.info("Sentry DSN not configured, skipping initialization")
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[FastApiIntegration()],
        traces_sample_rate=1.0,
        sample_rate=1.0,
        send_default_pii=False,
        before_send=scrub_event,
        before_breadcrumb=scrub_breadcrumb,
    )

    logger.info(f"Sentry initialized (environment: {environment})")


def add_upstream_breadcrumb(
    operation: str,
    data: dict[str, Any] | None = None,
    level: str = "info",
) -> None:
    """Record a Songlink API call on the breadcrumb trail."""
    sentry_sdk.add_breadcrumb(
        category="songlink",
        message=operation,
        data=data or {},
        level=level,
    )


def capture_exception(
    error: Exception,
    context: dict[str, Any] | None = None,
) -> None:
    """Capture an exception with optional request context."""
    if context:
        sentry_sdk.set_context("request", context)

    sentry_sdk.capture_exception(error)
