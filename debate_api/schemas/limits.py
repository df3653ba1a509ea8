from pydantic import BaseModel, Field


class RateLimitPolicyInfo(BaseModel):
    """Public description of one configured rate limit policy."""

    name: str = Field(..., description="Policy name, e.g. 'public', 'ip' or 'user'")
    max_requests: int = Field(..., description="Requests admitted per window")
    window_ms: int = Field(..., description="Window length in milliseconds")


class RateLimitPoliciesResponse(BaseModel):
    """Response for GET /v1/limits."""

    enabled: bool = Field(..., description="Whether rate limiting is enforced")
    policies: list[RateLimitPolicyInfo] = Field(default_factory=list)
