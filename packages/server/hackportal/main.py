"""
HackPortal API Server

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hackportal.api.errors import (
    ActionFailed,
    action_failed_handler,
    redirect_required_handler,
)
from hackportal.api.v1 import router as api_v1_router
from hackportal.api.v1.auth import router as auth_router
from hackportal.core.config import get_settings
from hackportal.core.logging import configure_logging
from hackportal.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from hackportal.core.redis import close_redis
from hackportal.core.results import RedirectRequired
from hackportal.core.storage import close_storage

settings = get_settings()
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("HackPortal starting", bucket=settings.storage_bucket)
    yield
    log.info("HackPortal shutting down")
    await close_redis()
    await close_storage()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="HackPortal",
        description="Task boards, people and team resources for hackathon organizer teams.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware (last added runs outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    app.add_exception_handler(ActionFailed, action_failed_handler)
    app.add_exception_handler(RedirectRequired, redirect_required_handler)

    # Session routes (not org-scoped)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint for startup probes."""
        return {"status": "ready"}

    return app


app = create_app()
