"""Songlink links proxy router."""

import logging
import random

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from posthog import Posthog

from core.dependencies import get_posthog_client, get_random_source, get_songlink_service
from core.errors import INTERNAL_ERROR_MESSAGE, upstream_error
from core.exceptions import ProxyError
from core.sentry import capture_exception
from core.telemetry import RequestTelemetry
from songlink.models import LookupQuery
from songlink.profiles import draw_profile
from songlink.service import SonglinkService
from songlink.validator import parse_query

logger = logging.getLogger(__name__)

router = APIRouter(tags=["links"])

ENVELOPE_SCHEMA = {
    "content": {
        "application/json": {
            "example": {"error": "Either url or (platform, type, id) must be provided", "status": 400}
        }
    }
}


@router.get(
    "/links",
    summary="Resolve a song or album to its links on every platform",
    description="""
    Forwards the lookup to the Songlink API with a randomized browser
    fingerprint and returns its JSON response unchanged.

    Provide either `url`, or all of `platform`, `type` and `id`.
    When both are given, `url` is used.
    """,
    responses={
        200: {"description": "Songlink response passed through"},
        400: {"description": "Invalid query", **ENVELOPE_SCHEMA},
        403: {"description": "Origin not allowed"},
        502: {"description": "Songlink API unreachable or response undecodable"},
    },
)
async def get_links(
    url: str | None = Query(None, description="Source song/album URL on any platform"),
    user_country: str | None = Query(None, alias="userCountry", description="Two-letter country code"),
    song_if_single: str | None = Query(None, alias="songIfSingle", description="'true' or 'false'"),
    platform: str | None = Query(None, description="Platform of the entity id"),
    entity_type: str | None = Query(None, alias="type", description="'song' or 'album'"),
    entity_id: str | None = Query(None, alias="id", description="Entity id on the platform"),
    key: str | None = Query(None, description="Songlink API key"),
    service: SonglinkService = Depends(get_songlink_service),
    rng: random.Random = Depends(get_random_source),
    posthog_client: Posthog | None = Depends(get_posthog_client),
) -> Response:
    """Run the forwarding pipeline for one lookup."""
    raw = {
        "url": url,
        "userCountry": user_country,
        "songIfSingle": song_if_single,
        "platform": platform,
        "type": entity_type,
        "id": entity_id,
        "key": key,
    }
    params = {name: value for name, value in raw.items() if value is not None}

    telemetry = RequestTelemetry()
    query: LookupQuery | None = None
    status = 500

    try:
        with telemetry.track_step("validate"):
            query = parse_query(params)

        profile = draw_profile(rng)
        upstream = await service.fetch(query, profile, telemetry)

        if not upstream.is_success:
            logger.info(f"Songlink returned {upstream.status_code} for {query.mode} lookup")
            raise upstream_error(upstream.status_code, upstream.body)

        status = upstream.status_code
        return Response(content=upstream.body, status_code=status, media_type="application/json")

    except ProxyError as e:
        status = e.status_code
        raise
    except Exception as e:
        logger.error(f"Links lookup failed: {type(e).__name__}: {e}")
        capture_exception(e, context={"mode": str(query.mode) if query else None})
        raise ProxyError(INTERNAL_ERROR_MESSAGE) from e

    finally:
        if posthog_client:
            telemetry.send_to_posthog(
                posthog_client,
                {
                    "status": status,
                    "mode": str(query.mode) if query else None,
                    "platform": query.platform if query else None,
                },
            )
