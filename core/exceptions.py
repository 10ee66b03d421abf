"""Custom exception classes for the Songlink proxy pipeline."""


class ProxyError(Exception):
    """Base exception for all proxy pipeline errors.

    Every subclass maps to exactly one HTTP status in the JSON error envelope.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CorsRejectedError(ProxyError):
    """Raised when the request Origin is not on the allow-list."""

    status_code = 403

    def __init__(self, origin: str):
        super().__init__("Origin not allowed", details={"origin": origin})
        self.origin = origin


class InvalidQueryError(ProxyError):
    """Raised when the query string does not describe a valid lookup."""

    status_code = 400


class NetworkError(ProxyError):
    """Raised when the Songlink API could not be reached at all."""

    status_code = 502


class UpstreamError(ProxyError):
    """Raised when the Songlink API answered with a non-2xx status."""

    def __init__(self, message: str, upstream_status: int, details: dict | None = None):
        super().__init__(message, details)
        self.upstream_status = upstream_status
        self.status_code = upstream_status if 100 <= upstream_status <= 599 else 502


class DecodeError(ProxyError):
    """Raised when a fully received response body cannot be decompressed."""

    status_code = 502
