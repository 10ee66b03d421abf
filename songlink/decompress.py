"""Content-Encoding decoding for Songlink API response bodies."""

import gzip
import logging
import zlib

import brotli

from core.exceptions import DecodeError

logger = logging.getLogger(__name__)


def _inflate(data: bytes) -> bytes:
    # Servers disagree on whether "deflate" means zlib-wrapped or raw
    try:
        return zlib.decompress(data)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


def _decode_one(data: bytes, encoding: str) -> bytes:
    if encoding in ("gzip", "x-gzip"):
        return gzip.decompress(data)
    if encoding == "br":
        return brotli.decompress(data)
    if encoding == "deflate":
        return _inflate(data)
    if encoding not in ("", "identity"):
        logger.warning(f"Unknown Content-Encoding {encoding!r}, passing body through")
    return data


def decompress_body(data: bytes, content_encoding: str | None) -> bytes:
    """Decode a response body according to its ``Content-Encoding`` header.

    Stacked encodings (``gzip, br``) are undone last-applied first. Absent,
    ``identity`` and unrecognized encodings leave the bytes unchanged.

    Raises:
        DecodeError: If the body is corrupt or truncated for its encoding
    """
    if not data or not content_encoding:
        return data

    encodings = [e.strip().lower() for e in content_encoding.split(",")]
    for encoding in reversed(encodings):
        try:
            data = _decode_one(data, encoding)
        except (OSError, EOFError, zlib.error, brotli.error) as e:
            raise DecodeError(
                f"Failed to decompress Songlink API response ({encoding}): {e}",
                details={"encoding": encoding},
            ) from e
    return data
