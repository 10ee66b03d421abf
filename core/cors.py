"""CORS origin policy and the gate middleware that enforces it."""

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Request, Response

from core.errors import error_response
from core.exceptions import CorsRejectedError

logger = logging.getLogger(__name__)

DEV_ORIGIN_PATTERN = re.compile(r"http://(localhost|127\.0\.0\.1)(:\d+)?")
PROD_ORIGINS = frozenset({"https://monochrome.tf", "https://monochrome.prigoana.com"})

ALLOW_METHODS = "GET, OPTIONS"
DEFAULT_ALLOW_HEADERS = "Content-Type"
PREFLIGHT_MAX_AGE = "86400"

# Paths served without origin enforcement
UNGATED_PATHS = frozenset({"/health"})


@dataclass(frozen=True)
class OriginPolicy:
    """Immutable matcher over the ``Origin`` request header."""

    dev: bool
    allowed_origins: frozenset[str] = PROD_ORIGINS
    pattern: re.Pattern[str] | None = None

    @classmethod
    def for_mode(cls, dev: bool) -> "OriginPolicy":
        if dev:
            return cls(dev=True, allowed_origins=frozenset(), pattern=DEV_ORIGIN_PATTERN)
        return cls(dev=False)

    def allows(self, origin: str) -> bool:
        if self.pattern is not None:
            return self.pattern.fullmatch(origin) is not None
        return origin in self.allowed_origins


def _is_preflight(request: Request) -> bool:
    return (
        request.method == "OPTIONS"
        and "access-control-request-method" in request.headers
    )


def apply_cors_headers(response: Response, origin: str, request: Request) -> Response:
    """Attach origin-specific CORS headers to a response."""
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = request.headers.get(
        "access-control-request-headers", DEFAULT_ALLOW_HEADERS
    )
    response.headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    response.headers.append("Vary", "Origin")
    return response


async def cors_gate(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Enforce the origin policy before any routing happens.

    Requests without an ``Origin`` header are not cross-origin browser
    requests and pass through untouched. Rejected origins short-circuit
    to a 403 envelope.
    """
    if request.url.path in UNGATED_PATHS:
        return await call_next(request)

    origin = request.headers.get("origin")
    if origin is None:
        return await call_next(request)

    policy: OriginPolicy = request.app.state.origin_policy
    if not policy.allows(origin):
        logger.info(f"Rejected request from origin {origin!r} to {request.url.path}")
        return error_response(CorsRejectedError(origin))

    if _is_preflight(request):
        return apply_cors_headers(Response(status_code=204), origin, request)

    response = await call_next(request)
    return apply_cors_headers(response, origin, request)
