"""Named limiter instances with an explicit owner.

The registry is created once when the app starts and attached to
``app.state``; handlers reach limiters through the request instead of through
module-level globals.
"""

from __future__ import annotations

from typing import Callable, Iterator

from debate_api.adapters.rate_limit.base import AbstractRateLimiter, LimiterConfig
from debate_api.adapters.rate_limit.in_memory import create_rate_limiter
from debate_api.core.config import RateLimitSettings


class RateLimiterRegistry:
    """Maps policy names (``"public"``, ``"ip"``, ``"user"``) to limiters.

    Each policy owns its own limiter, so ``"user:123"`` under the ``user``
    policy and the same string under ``ip`` are counted separately.
    """

    def __init__(self) -> None:
        self._limiters: dict[str, AbstractRateLimiter] = {}

    @classmethod
    def from_settings(
        cls,
        rate_limit_settings: RateLimitSettings,
        *,
        clock: Callable[[], int] | None = None,
    ) -> "RateLimiterRegistry":
        """Create one in-memory limiter per configured policy."""

        registry = cls()
        for name, policy in rate_limit_settings.policies.items():
            registry.register(
                name,
                create_rate_limiter(
                    LimiterConfig(
                        max_requests=policy.max_requests,
                        window_ms=policy.window_ms,
                    ),
                    clock=clock,
                    cleanup_interval_ms=rate_limit_settings.cleanup_interval_ms,
                ),
            )
        return registry

    def register(self, name: str, limiter: AbstractRateLimiter) -> None:
        self._limiters[name] = limiter

    def get(self, name: str) -> AbstractRateLimiter:
        try:
            return self._limiters[name]
        except KeyError:
            raise KeyError(f"no rate limit policy named {name!r}") from None

    def names(self) -> list[str]:
        return sorted(self._limiters)

    def __contains__(self, name: object) -> bool:
        return name in self._limiters

    def __iter__(self) -> Iterator[tuple[str, AbstractRateLimiter]]:
        return iter(sorted(self._limiters.items()))
