"""
Reply Stream Service - FastAPI Application Entry Point.

This module provides the application factory with middleware, routes,
exception handlers and lifecycle management.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from reply_stream.api.v1 import health_router, router as v1_router
from reply_stream.config.constants import (
    API_PREFIX, SERVICE_DESCRIPTION, SERVICE_NAME, SERVICE_VERSION
)
from reply_stream.config.settings import Settings, get_settings
from reply_stream.dependencies import build_container
from reply_stream.exceptions import setup_exception_handlers
from reply_stream.services.service_container import ServiceContainer
from reply_stream.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting Reply Stream Service...",
        version=app.version,
        environment=settings.ENVIRONMENT.value
    )
    try:
        yield
    finally:
        logger.info("Shutting down Reply Stream Service...")
        await app.state.container.shutdown()
        logger.info("Reply Stream Service shutdown completed")


def create_app(
        container: Optional[ServiceContainer] = None,
        settings: Optional[Settings] = None
) -> FastAPI:
    """
    Create and configure FastAPI application instance.

    Args:
        container: Pre-built collaborators; built from settings when omitted
        settings: Settings override, defaults to the cached environment settings
    """
    settings = settings or get_settings()
    docs_prefix = None if settings.is_production() else API_PREFIX

    app = FastAPI(
        title="Reply Stream Service API",
        description=SERVICE_DESCRIPTION,
        version=SERVICE_VERSION,
        openapi_url=docs_prefix and f"{docs_prefix}/openapi.json",
        docs_url=docs_prefix and f"{docs_prefix}/docs",
        redoc_url=docs_prefix and f"{docs_prefix}/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.container = container or build_container(settings)

    setup_middleware(app, settings)
    setup_exception_handlers(app)
    setup_routes(app)

    return app


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
            "Accept",
        ],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ]
    )

    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """Add unique request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round((time.time() - start_time) * 1000, 2))
        return response


def setup_routes(app: FastAPI) -> None:
    """Setup application routes and endpoints."""
    app.include_router(health_router)
    app.include_router(v1_router)

    @app.get("/")
    async def root():
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": app.docs_url,
            "health": "/health",
        }


def main() -> None:
    """Run the service with uvicorn."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    uvicorn.run(
        create_app(settings=settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
        access_log=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
