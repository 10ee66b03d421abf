"""Health check router."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check",
    response_class=PlainTextResponse,
    responses={200: {"description": "Process is up"}},
)
async def health_check() -> str:
    """Liveness probe; never touches the upstream or the origin policy."""
    return "OK"
