"""Root redirect to the frontend."""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

router = APIRouter(tags=["root"])

FRONTEND_URL = "https://monochrome.tf"


@router.get("/", include_in_schema=False)
async def root_redirect() -> RedirectResponse:
    return RedirectResponse(url=FRONTEND_URL, status_code=302)
