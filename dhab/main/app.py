"""
HTTP Application - Main Layer

Builds the FastAPI app: container lifespan, security headers, rate
limiting and the price, prediction, ingestion and system routers.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dhab.main.config import get_settings
from dhab.main.container import app_lifespan, init_container
from dhab.presentation.controllers import (
    ingestion_router,
    predictions_router,
    prices_router,
    system_router,
)
from dhab.presentation.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from dhab.shared import configure_logging, get_logger, update_logging_from_settings

# Bootstrap logging so settings validation errors are rendered
configure_logging()

settings = get_settings()

update_logging_from_settings(settings)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    Records the startup time and delegates resource cleanup to the
    container's app_lifespan.
    """
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("Application starting up")

    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application
    """
    settings = get_settings()

    container = init_container(settings)

    app = FastAPI(
        title=settings.service.title,
        description=settings.service.description,
        version=settings.service.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: headers wrap 429 responses too
    app.add_middleware(RateLimitMiddleware, limiter=container.rate_limiter())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.service.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(prices_router)
    app.include_router(predictions_router)
    app.include_router(ingestion_router)
    app.include_router(system_router)

    return app


app = create_app()
