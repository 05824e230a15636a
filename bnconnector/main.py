"""
Application entry point.

Creates the FastAPI application and wires together:
- The business network connector (one per application)
- Routers
- Error handlers (centralized connector-to-HTTP mapping)
- Response headers and rate limiting
- Logging configuration

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.core.config import settings
from bnconnector.interfaces.health import router as health_router
from bnconnector.interfaces.network.dependencies import build_connector
from bnconnector.interfaces.network.router import router as network_router
from bnconnector.shared.errors.handlers import register_error_handlers
from bnconnector.shared.logging import configure_logging
from bnconnector.shared.security.headers import ResponseHeadersMiddleware
from bnconnector.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


def _log_disconnect(error: Optional[BaseException], _result: None) -> None:
    if error is not None:
        logger.warning("Disconnect from business network failed: %s", error)


def create_app(connector: Optional[BusinessNetworkConnector] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root of the application.

    Args:
        connector: Connector to serve. Built from settings when omitted.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Connect in the background at startup, disconnect at shutdown.

        Requests arriving before the connection is up wait for it; a failed
        startup connect is retried by the next request.
        """
        app.state.connector = connector or build_connector(settings)
        app.state.connector.start_connecting()
        yield
        await app.state.connector.disconnect(callback=_log_disconnect)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Response Headers ---
    app.add_middleware(ResponseHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(network_router, prefix="/api/v1")

    return app


app = create_app()
