from fastapi import APIRouter, Depends, Request

from debate_api.adapters.rate_limit.registry import RateLimiterRegistry
from debate_api.core.config import settings
from debate_api.core.rate_limit import rate_limit
from debate_api.schemas.limits import RateLimitPoliciesResponse, RateLimitPolicyInfo

router = APIRouter(tags=["Limits"])


@router.get(
    "/limits",
    response_model=RateLimitPoliciesResponse,
    dependencies=[Depends(rate_limit("public"))],
)
async def list_rate_limits(request: Request) -> RateLimitPoliciesResponse:
    """List the rate limit policies this app enforces.

    Lets clients size their retry/backoff strategy. Quotas are read from the
    app's limiter registry. The endpoint itself is throttled per client IP
    under the ``public`` policy.
    """
    registry: RateLimiterRegistry = request.app.state.rate_limiters
    return RateLimitPoliciesResponse(
        enabled=settings.rate_limit.enabled,
        policies=[
            RateLimitPolicyInfo(
                name=name,
                max_requests=limiter.config.max_requests,
                window_ms=limiter.config.window_ms,
            )
            for name, limiter in registry
        ],
    )
