"""Application-level exception types.

Domain errors carry a stable code and message so the exception handlers can
render them into one consistent JSON envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

from debate_api.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    limit: int
    remaining: int
    retry_after: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."


@dataclass
class RateLimitExceededError(AppError):
    """Raised when a limiter rejects a request; rendered as HTTP 429."""

    code: str = "rate_limited"
    message: str = RATE_LIMITED_MESSAGE
    details: ErrorDetails | None = None
    result: RateLimitResult | None = field(default=None, repr=False)
