"""Mapping of pipeline failures to the uniform JSON error envelope."""

import json
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import ProxyError, UpstreamError
from core.sentry import capture_exception
from songlink.models import ErrorEnvelope

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
UPSTREAM_MESSAGE_FIELDS = ("message", "error", "code")


def envelope_response(message: str, status: int) -> JSONResponse:
    """Build the ``{"error", "status"}`` response with a matching HTTP status."""
    body = ErrorEnvelope(error=message, status=status)
    return JSONResponse(content=body.model_dump(), status_code=status)


def error_response(error: ProxyError) -> JSONResponse:
    """Convert a classified pipeline error into its envelope response."""
    return envelope_response(error.message, error.status_code)


def upstream_error_message(status: int, body: bytes) -> str:
    """Pick the most useful message out of a non-2xx Songlink response body.

    Songlink reports errors as JSON objects; the first non-empty of
    ``message``, ``error`` or ``code`` is used. A non-JSON body is used as
    plain text. An empty body yields a generic message naming the status.
    """
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return f"Songlink API returned status {status}"

    try:
        payload = json.loads(text)
    except ValueError:
        return text

    if isinstance(payload, dict):
        for name in UPSTREAM_MESSAGE_FIELDS:
            value = payload.get(name)
            if isinstance(value, str) and value:
                return value
    return f"Songlink API returned status {status}"


def upstream_error(status: int, body: bytes) -> UpstreamError:
    """Classify a non-2xx upstream response."""
    return UpstreamError(
        upstream_error_message(status, body),
        upstream_status=status,
        details={"upstream_status": status},
    )


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return envelope_response(message, 400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    response = envelope_response(message, exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: never let a raw failure reach the caller."""
    logger.error(f"Unhandled error on {request.url.path}: {type(exc).__name__}: {exc}")
    capture_exception(exc, context={"path": request.url.path})
    return envelope_response(INTERNAL_ERROR_MESSAGE, 500)
