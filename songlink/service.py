"""Songlink API forwarding service."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from core.exceptions import DecodeError, NetworkError
from core.sentry import add_upstream_breadcrumb
from songlink.decompress import decompress_body
from songlink.models import LookupQuery, RequestProfile, UpstreamResponse

if TYPE_CHECKING:
    from core.telemetry import RequestTelemetry

logger = logging.getLogger(__name__)

SONGLINK_API_BASE = "https://api.song.link"
LINKS_PATH = "/v1-alpha.1/links"
NETWORK_ERROR_PREFIX = "Failed to fetch from Songlink API: "

DEFAULT_TIMEOUT = 30.0
CONNECTION_LIMITS = httpx.Limits(max_keepalive_connections=10, keepalive_expiry=90.0)


class SonglinkService:
    """Forwards validated lookups to the Songlink API.

    Each call issues exactly one GET request; there are no retries and
    nothing is cached. Response bodies are read undecoded so that
    decompression happens in ``songlink.decompress`` rather than inside httpx.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the service.

        Args:
            timeout: Seconds allowed for each connect, read, write and pool
                phase of the upstream call, not for the exchange as a whole
            transport: Optional httpx transport, used to stub the upstream in tests
        """
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=SONGLINK_API_BASE,
                timeout=self.timeout,
                limits=CONNECTION_LIMITS,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def build_request(self, query: LookupQuery, profile: RequestProfile) -> httpx.Request:
        """Build the outbound request with the profile's fingerprint headers.

        The profile headers are written over whatever defaults the client
        put on the request, so every outbound call carries all six of them.
        """
        client = await self._get_client()
        request = client.build_request("GET", LINKS_PATH, params=query.to_params())
        for name, value in profile.to_headers().items():
            request.headers[name] = value
        return request

    async def send(self, query: LookupQuery, profile: RequestProfile) -> tuple[int, str | None, bytes]:
        """Send one lookup and return the status, encoding and raw body.

        Raises:
            NetworkError: If no HTTP response was received
        """
        client = await self._get_client()
        request = await self.build_request(query, profile)
        add_upstream_breadcrumb("fetch_links", {"mode": str(query.mode)})

        start = time.perf_counter()
        try:
            response = await client.send(request, stream=True)
            try:
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except httpx.RequestError as e:
            cause = str(e) or type(e).__name__
            logger.warning(f"Songlink request failed: {type(e).__name__}: {cause}")
            add_upstream_breadcrumb("fetch_links_failed", {"error": type(e).__name__}, level="error")
            raise NetworkError(
                f"{NETWORK_ERROR_PREFIX}{cause}", details={"cause": type(e).__name__}
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        encoding = response.headers.get("content-encoding")
        logger.debug(
            f"Songlink responded {response.status_code} "
            f"({len(body)} bytes, encoding={encoding}) in {elapsed_ms:.1f}ms"
        )
        return response.status_code, encoding, body

    def _decode(self, status: int, encoding: str | None, raw: bytes) -> bytes:
        """Decompress a raw body.

        A corrupt body on a non-2xx response is dropped rather than raised,
        so the upstream status still decides the error returned.
        """
        try:
            return decompress_body(raw, encoding)
        except DecodeError:
            if 200 <= status < 300:
                raise
            logger.warning(f"Discarding undecodable body of Songlink {status} response")
            return b""

    async def fetch(
        self,
        query: LookupQuery,
        profile: RequestProfile,
        telemetry: RequestTelemetry | None = None,
    ) -> UpstreamResponse:
        """Fetch and decompress a Songlink lookup.

        A non-2xx status is returned as a normal response; classifying it
        is left to the caller.

        Raises:
            NetworkError: If the upstream could not be reached
            DecodeError: If the body could not be decompressed
        """
        if telemetry is None:
            status, encoding, raw = await self.send(query, profile)
            body = self._decode(status, encoding, raw)
        else:
            with telemetry.track_step("fetch"):
                status, encoding, raw = await self.send(query, profile)
            with telemetry.track_step("decompress"):
                body = self._decode(status, encoding, raw)

        return UpstreamResponse(status_code=status, body=body, content_encoding=encoding)
