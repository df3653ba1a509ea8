"""Rate limiter interfaces and value types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class LimiterConfig:
    """Quota policy for a single limiter instance.

    Attributes:
        max_requests: Requests admitted per window.
        window_ms: Window length in milliseconds.
    """

    max_requests: int
    window_ms: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single ``check`` call.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: Requests left in the current window (clamped at 0).
        reset_at: Epoch milliseconds at which the current window ends.
        headers: Ready-to-send ``X-RateLimit-*`` headers, plus ``Retry-After``
            when the request was rejected.
    """

    allowed: bool
    remaining: int
    reset_at: int
    headers: dict[str, str] = field(default_factory=dict)


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and decide whether it is admitted.

        Args:
            key: Caller identity (IP address, ``user:<id>``, ...).

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def config(self) -> LimiterConfig:
        """Quota policy this limiter enforces."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, int]:
        """Store metrics (entry counts, sweeps); never exposes keys."""
        raise NotImplementedError
