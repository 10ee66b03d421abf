"""Query string validation for the links endpoint."""

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from core.exceptions import InvalidQueryError
from songlink.models import EntityType, LookupQuery

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Either url or (platform, type, id) must be provided"

BOOLEAN_LITERALS = {"true": True, "false": False}

# Frontend mirrors of TIDAL links, rewritten to the host Songlink resolves.
# Order matters: only the first matching rewrite is applied.
URL_REWRITES = (
    ("monochrome.tf/#", "listen.tidal.com"),
    ("monochrome.prigoana.com/#", "listen.tidal.com"),
    ("tidal.squid.wtf", "listen.tidal.com"),
    ("tidal.qqdl.site", "listen.tidal.com"),
)


def normalize_url(url: str) -> str:
    """Rewrite a known mirror link to its canonical TIDAL equivalent."""
    for mirror, canonical in URL_REWRITES:
        if mirror in url:
            return url.replace(mirror, canonical)
    return url


def _parse_bool(raw: str | None, name: str) -> bool:
    if raw is None:
        return False
    try:
        return BOOLEAN_LITERALS[raw]
    except KeyError:
        raise InvalidQueryError(
            f"Invalid {name}: expected 'true' or 'false', got {raw!r}"
        ) from None


def parse_query(params: Mapping[str, str]) -> LookupQuery:
    """Validate raw query parameters into a LookupQuery.

    A non-empty ``url`` selects url mode and any platform/type/id values are
    ignored. Otherwise all of ``platform``, ``type`` and ``id`` are required.

    Raises:
        InvalidQueryError: If neither mode is satisfied or a value is malformed
    """
    url = params.get("url") or None
    user_country = params.get("userCountry") or "US"
    song_if_single = _parse_bool(params.get("songIfSingle"), "songIfSingle")
    key = params.get("key") or None

    if url:
        normalized = normalize_url(url)
        if normalized != url:
            logger.debug(f"Normalized url {url!r} -> {normalized!r}")
        return LookupQuery(
            url=normalized,
            user_country=user_country,
            song_if_single=song_if_single,
            key=key,
        )

    triple = {name: params.get(name) or None for name in ("platform", "type", "id")}
    missing = [name for name, value in triple.items() if value is None]
    if len(missing) == len(triple):
        raise InvalidQueryError(MISSING_INPUT_MESSAGE)
    if missing:
        raise InvalidQueryError(
            f"{MISSING_INPUT_MESSAGE}; missing: {', '.join(missing)}",
            details={"missing": missing},
        )

    entity_type = triple["type"]
    if entity_type not in {t.value for t in EntityType}:
        raise InvalidQueryError(
            f"Invalid type: expected 'song' or 'album', got {entity_type!r}",
            details={"type": entity_type},
        )

    try:
        return LookupQuery(
            platform=triple["platform"],
            type=EntityType(entity_type),
            id=triple["id"],
            user_country=user_country,
            song_if_single=song_if_single,
            key=key,
        )
    except ValidationError as e:
        raise InvalidQueryError(MISSING_INPUT_MESSAGE) from e
