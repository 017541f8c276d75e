# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the Academy Backend API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from academy import __version__
from academy.api.dependencies import close_clients
from academy.api.errors import register_exception_handlers
from academy.api.middleware.auth import AuthMiddleware
from academy.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from academy.api.routes import health
from academy.api.v1 import router as v1_router
from academy.core.config import get_settings
from academy.domains.settings import SettingsListener, SettingsService, get_settings_cache
from academy.infrastructure.background import start_scheduler, stop_scheduler
from academy.infrastructure.cache import close_redis, get_redis_optional, init_redis
from academy.infrastructure.database import close_database, get_session, init_database
from academy.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    Initializes and cleans up:
    - Database connections
    - Redis (settings change fan-out)
    - Settings cache and its change listener
    - APScheduler for the registration sweep

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting Academy Backend API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except Exception as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    try:
        await init_redis(settings)
        logger.info("Redis connection initialized")
    except Exception as e:
        logger.warning("Failed to initialize Redis: %s", str(e))

    # Seed the settings cache from the table
    cache = get_settings_cache()
    try:
        async with get_session() as session:
            await SettingsService(session, cache).load_all()
        logger.info("Settings cache seeded")
    except Exception as e:
        logger.warning("Failed to seed settings cache: %s", str(e))

    listener: SettingsListener | None = None
    redis = get_redis_optional()
    if redis is not None:
        listener = SettingsListener(redis, cache, settings.redis.settings_channel)
        listener.start()
        logger.info("Settings listener started on %s", settings.redis.settings_channel)

    try:
        await start_scheduler(settings)
        logger.info("Scheduler started")
    except Exception as e:
        logger.warning("Failed to start scheduler: %s", str(e))

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await stop_scheduler()
        logger.info("Scheduler stopped")
    except Exception as e:
        logger.warning("Error stopping scheduler: %s", str(e))

    if listener is not None:
        await listener.stop()
        logger.info("Settings listener stopped")

    try:
        await close_clients()
    except Exception as e:
        logger.warning("Error closing HTTP clients: %s", str(e))

    try:
        await close_redis()
        logger.info("Redis connection closed")
    except Exception as e:
        logger.warning("Error closing Redis: %s", str(e))

    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down Academy Backend API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Academy Backend API",
        description="Payments, account provisioning and housekeeping for the academy",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Avoid 307 redirects that drop the Authorization header
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    register_exception_handlers(app)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # =========================================================================
    # Middleware (last added runs first)
    # =========================================================================
    app.add_middleware(AuthMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
