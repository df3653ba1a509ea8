"""Tests for the named limiter registry."""

import pytest

from debate_api.adapters.rate_limit.base import LimiterConfig
from debate_api.adapters.rate_limit.in_memory import create_rate_limiter
from debate_api.adapters.rate_limit.registry import RateLimiterRegistry
from debate_api.core.config import RateLimitSettings


def test_from_settings_builds_one_limiter_per_policy(registry: RateLimiterRegistry) -> None:
    assert registry.names() == ["ip", "public", "user"]
    assert "ip" in registry
    assert "missing" not in registry

    assert registry.get("user").stats()["max_requests"] == 2
    assert registry.get("ip").stats()["max_requests"] == 4


def test_default_policies() -> None:
    registry = RateLimiterRegistry.from_settings(RateLimitSettings())

    limits = {name: limiter.config for name, limiter in registry}

    assert limits == {
        "ip": LimiterConfig(max_requests=15, window_ms=60_000),
        "public": LimiterConfig(max_requests=60, window_ms=60_000),
        "user": LimiterConfig(max_requests=5, window_ms=60_000),
    }


def test_policies_are_independent(registry: RateLimiterRegistry) -> None:
    user = registry.get("user")
    ip = registry.get("ip")

    user.check("user:123")
    user.check("user:123")
    assert user.check("user:123").allowed is False

    assert ip.check("user:123").allowed is True


def test_get_unknown_policy_raises_key_error(registry: RateLimiterRegistry) -> None:
    with pytest.raises(KeyError, match="nope"):
        registry.get("nope")


def test_register_replaces_existing_policy(registry: RateLimiterRegistry, clock) -> None:
    replacement = create_rate_limiter(LimiterConfig(max_requests=1, window_ms=1000), clock=clock)

    registry.register("public", replacement)

    assert registry.get("public") is replacement
