"""Rate limiting for FastAPI routes.

Wires the limiter adapters into the HTTP layer:

- ``rate_limit(policy)`` is a dependency factory that limits by client IP.
- ``enforce_rate_limit`` is the building block for other keys, e.g. a per-user
  check made inside a handler once the caller is authenticated.
- ``rate_limit_response`` renders a rejected result as a 429.

Limiters are looked up on ``request.app.state.rate_limiters`` (see
``RateLimiterRegistry``). Expensive endpoints typically stack two checks: the
``ip`` policy before authentication and the ``user`` policy after it.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse

from debate_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from debate_api.adapters.rate_limit.registry import RateLimiterRegistry
from debate_api.core.client_ip import get_client_ip, user_rate_limit_key
from debate_api.core.config import settings
from debate_api.core.errors import RATE_LIMITED_MESSAGE, RateLimitExceededError
from debate_api.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def rate_limit_response(
    result: RateLimitResult,
    request_id: str | None = None,
) -> JSONResponse:
    """Build the 429 response for a rejected request.

    Args:
        result: The rejected limiter result; all of its headers are attached.
        request_id: Correlation id to include in the error body.

    Returns:
        JSONResponse with status 429 and the standard error envelope.
    """

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "code": "rate_limited",
                "message": RATE_LIMITED_MESSAGE,
                "request_id": request_id,
            }
        },
        headers=dict(result.headers),
    )


def get_limiter(request: Request, policy: str) -> AbstractRateLimiter:
    """Return the limiter for ``policy`` from the app's registry."""

    registry: RateLimiterRegistry = request.app.state.rate_limiters
    return registry.get(policy)


def enforce_rate_limit(request: Request, policy: str, key: str) -> RateLimitResult | None:
    """Count one request for ``key`` under ``policy``.

    Args:
        request: Current request (used to reach the limiter registry).
        policy: Policy name, e.g. ``"ip"`` or ``"user"``.
        key: Limiter key (client IP, ``user:<id>``, ...).

    Returns:
        The limiter result, or None when rate limiting is disabled.

    Raises:
        RateLimitExceededError: When the limiter rejects the request.
    """

    if not settings.rate_limit.enabled:
        return None

    result = get_limiter(request, policy).check(key)
    log_extra = {
        "policy": policy,
        "key_hash": hash_identifier(key),
        "remaining": result.remaining,
        "reset_at": result.reset_at,
    }

    if result.allowed:
        logger.debug("rate_limit.allowed", extra=log_extra)
        return result

    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": result.headers.get("Retry-After")},
    )
    raise RateLimitExceededError(
        details={
            "limit": int(result.headers["X-RateLimit-Limit"]),
            "remaining": result.remaining,
            "retry_after": int(result.headers["Retry-After"]),
        },
        result=result,
    )


def enforce_user_rate_limit(
    request: Request,
    user_id: str,
    policy: str = "user",
) -> RateLimitResult | None:
    """Per-user check, meant to run after the caller has been authenticated."""

    return enforce_rate_limit(request, policy, user_rate_limit_key(user_id))


def rate_limit(policy: str = "public") -> Callable[[Request], Awaitable[None]]:
    """FastAPI dependency factory limiting by client IP.

    Usage:
        @router.get("/stats", dependencies=[Depends(rate_limit("public"))])
        async def stats(): ...
    """

    async def dependency(request: Request) -> None:
        enforce_rate_limit(request, policy, get_client_ip(request.headers))

    return dependency
