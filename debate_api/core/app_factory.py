"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
limiter registry) so tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from debate_api.adapters.rate_limit.registry import RateLimiterRegistry
from debate_api.api.routes import health_router, limits_router
from debate_api.core.config import settings
from debate_api.core.exception_handlers import setup_exception_handlers
from debate_api.core.logging import configure_logging
from debate_api.core.middleware import request_id_middleware


def create_app(rate_limiters: RateLimiterRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiters: Limiter registry to use; built from settings when
            omitted. The registry lives as long as the app, so every request
            sees the same counters.

    Returns:
        Configured FastAPI app.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title=settings.app.title,
        description=(
            "Request admission for the DebateAI API: per-IP and per-user "
            "fixed-window rate limits with standard X-RateLimit-* headers."
        ),
        version="0.1.0",
    )

    if rate_limiters is None:
        rate_limiters = RateLimiterRegistry.from_settings(settings.rate_limit)
    app.state.rate_limiters = rate_limiters

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(limits_router, prefix="/v1")
    app.include_router(health_router)

    return app
