"""Main FastAPI application for the waitlist API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from waitlist import __version__
from waitlist.api.deps import get_submission_client
from waitlist.api.rate_limit import limiter
from waitlist.api.v1.leaderboard import router as leaderboard_router
from waitlist.api.v1.waitlist import router as waitlist_router
from waitlist.logging_config import configure_logging, get_logger
from waitlist.referral.feed import LeaderboardFeed
from waitlist.settings import settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    logger.info("app_starting", env=settings.env)

    if not settings.proforms_api_key or not settings.proforms_access_token:
        logger.warning("form_service_not_configured")

    yield

    logger.info("app_shutting_down")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app
    """
    is_production = settings.env == "production"

    app = FastAPI(
        title="MubXpress Waitlist API",
        description="Waitlist signup and referral leaderboard",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )

    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]

    # Block wildcard in production (cookies carry referral state)
    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
        max_age=3600,
    )

    app.state.limiter = limiter
    app.state.feed = LeaderboardFeed(get_submission_client())

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please try again later."},
        )

    app.include_router(leaderboard_router, prefix="/api/v1")
    app.include_router(waitlist_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "MubXpress Waitlist API",
            "version": __version__,
            "docs": "/api/docs",
        }

    return app


# Create app instance
app = create_app()
