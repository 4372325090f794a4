"""
Main entrypoint for the Posts API.

This module assembles the FastAPI application: it configures logging,
creates the shared ``EntityStore`` and ``TokenService``, registers the
error handlers and middleware, and includes the routers.  There is no
module-level application instance because building one requires the
``JWT_SECRET``; run the factory with uvicorn instead::

    uvicorn posts_api.app.main:create_app --factory

``create_app`` accepts explicit settings, store, token service and
clock so tests can build isolated applications.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.router import router
from .core.config import Settings
from .core.errors import register_exception_handlers
from .core.logging_config import ACCESS_LOGGER, setup_logging
from .core.security import TokenService
from .core.store import EntityStore, utc_now

logger = logging.getLogger(__name__)
access_logger = logging.getLogger(ACCESS_LOGGER)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[EntityStore] = None,
    tokens: Optional[TokenService] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Application settings.  Read from the environment when omitted.
    store : Optional[EntityStore]
        Store shared by all requests.  A fresh empty store is created
        when omitted.
    tokens : Optional[TokenService]
        Token service.  Built from ``settings`` when omitted.
    clock : Callable[[], datetime]
        Source of ``created_at`` timestamps.

    Raises
    ------
    ConfigurationError
        If ``JWT_SECRET`` is missing or another setting is invalid.
    """
    settings = (settings or Settings.from_env()).validate()

    # Initialise logging before anything else so that the setup below
    # can log.
    setup_logging(settings.log_level, settings.log_file or None, settings.access_log_level or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.state.settings = settings
    app.state.store = store if store is not None else EntityStore()
    app.state.tokens = tokens or TokenService(
        settings.jwt_secret,
        lifetime_seconds=settings.access_token_expire_seconds,
    )
    app.state.clock = clock

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.include_router(router)

    logger.info("%s %s ready", settings.project_name, settings.api_version)
    return app
