"""Pytest configuration and fixtures shared across all test modules.

TESTING must be set before anything imports the settings so no local
.env.development file leaks into the test run.
"""

import os

os.environ["TESTING"] = "true"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from debate_api.adapters.rate_limit.registry import RateLimiterRegistry
from debate_api.core.config import RateLimitPolicy, RateLimitSettings


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> RateLimiterRegistry:
    """Small quotas so tests can exhaust them quickly."""
    return RateLimiterRegistry.from_settings(
        RateLimitSettings(
            policies={
                "public": RateLimitPolicy(max_requests=3, window_ms=60_000),
                "ip": RateLimitPolicy(max_requests=4, window_ms=60_000),
                "user": RateLimitPolicy(max_requests=2, window_ms=60_000),
            },
        ),
        clock=clock,
    )
