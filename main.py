"""Main application entry point for the Songlink CORS proxy."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import get_settings
from core.cors import cors_gate
from core.dependencies import close_songlink_service, flush_posthog, shutdown_posthog
from core.errors import (
    http_exception_handler,
    proxy_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from core.exceptions import ProxyError
from core.logging import default_log_file, setup_logging
from core.sentry import init_sentry
from routers.health import router as health_router
from routers.root import router as root_router
from songlink.router import router as links_router

load_dotenv()

settings = get_settings()

init_sentry(
    dsn=settings.sentry_dsn,
    environment="development" if settings.dev else "production",
    release=settings.app_version,
)

log_file = None
if settings.log_level.upper() != "DEBUG" and not settings.dev:
    log_file = default_log_file()
setup_logging(level=settings.log_level, log_file=log_file)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan with proper startup and shutdown."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Mode: {'development' if settings.dev else 'production'}")
    logger.info(f"Upstream timeout: {settings.upstream_timeout}s")

    yield

    logger.info("Shutting down application")
    shutdown_posthog()
    await close_songlink_service()
    logger.info("All services shut down")


app = FastAPI(
    title=settings.app_name,
    description="CORS proxy for the Songlink links API with randomized browser fingerprints",
    version=settings.app_version,
    lifespan=lifespan,
)

# Fixed for the process lifetime
app.state.origin_policy = settings.origin_policy()

app.add_exception_handler(ProxyError, proxy_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.middleware("http")
async def posthog_flush_middleware(request: Request, call_next):
    """Flush PostHog events after each request to prevent data loss."""
    response = await call_next(request)
    flush_posthog()
    return response


# Registered last so it runs first
app.middleware("http")(cors_gate)

app.include_router(health_router, prefix="", tags=["health"])
app.include_router(root_router, prefix="")
app.include_router(links_router, prefix="/api", tags=["links"])

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
