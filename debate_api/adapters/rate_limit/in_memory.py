"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: every worker/instance keeps its own counters, so running
  N workers multiplies the effective quota by N.
- Windows start at the first request seen for a key, not on clock-aligned
  boundaries.
- Expired entries are swept lazily from inside ``check``; there is no
  background timer to start or stop.
- Thread-safe: a lock guards the store, since FastAPI runs sync dependencies
  on a thread pool.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from debate_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    LimiterConfig,
    RateLimitResult,
)

logger = logging.getLogger(__name__)

# Sweep cadence is independent of any single limiter's window.
CLEANUP_INTERVAL_MS = 60_000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _ceil_seconds(ms: int) -> int:
    return -(-ms // 1000)


@dataclass
class _WindowEntry:
    count: int
    reset_at: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Fixed-window counter per key, kept in a process-local dict.

    Every call to :meth:`check` consumes one slot, including calls that end up
    rejected, so a client that keeps hammering a blocked endpoint does not get
    a refund. ``count`` is never clamped; only ``remaining`` is.
    """

    def __init__(
        self,
        config: LimiterConfig,
        *,
        clock: Callable[[], int] = _now_ms,
        cleanup_interval_ms: int = CLEANUP_INTERVAL_MS,
    ) -> None:
        """Initialize the limiter.

        Args:
            config: Quota policy.
            clock: Time source returning epoch milliseconds.
            cleanup_interval_ms: Minimum delay between two sweeps of expired
                entries.

        Raises:
            ValueError: If the policy or sweep interval are invalid.
        """
        if config.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if config.window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if cleanup_interval_ms < 0:
            raise ValueError("cleanup_interval_ms must be >= 0")

        self._config = config
        self._clock = clock
        self._cleanup_interval_ms = cleanup_interval_ms
        self._lock = threading.Lock()
        self._store: dict[str, _WindowEntry] = {}
        self._last_cleanup = clock()
        self._sweeps = 0
        self._swept_entries = 0

    @property
    def config(self) -> LimiterConfig:
        return self._config

    def __repr__(self) -> str:
        return (
            f"InMemoryFixedWindowRateLimiter(max_requests={self._config.max_requests}, "
            f"window_ms={self._config.window_ms}, entries={len(self._store)})"
        )

    def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and return the admission decision.

        Args:
            key: Any string; empty strings and ``"unknown"`` are valid keys.

        Returns:
            RateLimitResult with the decision and header values.
        """
        now = self._clock()

        with self._lock:
            self._sweep_locked(now)

            entry = self._store.get(key)
            if entry is None or entry.reset_at <= now:
                entry = _WindowEntry(count=0, reset_at=now + self._config.window_ms)
                self._store[key] = entry

            entry.count += 1
            count = entry.count
            reset_at = entry.reset_at

        return self._build_result(now=now, count=count, reset_at=reset_at)

    def stats(self) -> dict[str, int]:
        """Return store metrics without exposing keys."""

        with self._lock:
            return {
                "max_requests": self._config.max_requests,
                "window_ms": self._config.window_ms,
                "entries": len(self._store),
                "sweeps": self._sweeps,
                "swept_entries": self._swept_entries,
            }

    def _sweep_locked(self, now: int) -> None:
        if now - self._last_cleanup < self._cleanup_interval_ms:
            return
        self._last_cleanup = now

        expired = [k for k, entry in self._store.items() if entry.reset_at <= now]
        for key in expired:
            del self._store[key]

        self._sweeps += 1
        self._swept_entries += len(expired)
        logger.debug(
            "rate_limit.sweep",
            extra={
                "removed": len(expired),
                "entries": len(self._store),
            },
        )

    def _build_result(self, *, now: int, count: int, reset_at: int) -> RateLimitResult:
        max_requests = self._config.max_requests
        remaining = max(0, max_requests - count)
        allowed = count <= max_requests

        headers = {
            "X-RateLimit-Limit": str(max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(_ceil_seconds(reset_at)),
        }
        if not allowed:
            headers["Retry-After"] = str(_ceil_seconds(reset_at - now))

        return RateLimitResult(
            allowed=allowed,
            remaining=remaining,
            reset_at=reset_at,
            headers=headers,
        )


def create_rate_limiter(
    config: LimiterConfig,
    *,
    clock: Callable[[], int] | None = None,
    cleanup_interval_ms: int = CLEANUP_INTERVAL_MS,
) -> InMemoryFixedWindowRateLimiter:
    """Build a limiter for ``config``.

    Create it once and reuse it: a limiter constructed per request starts from
    an empty store every time and never rejects anything.
    """

    return InMemoryFixedWindowRateLimiter(
        config,
        clock=clock or _now_ms,
        cleanup_interval_ms=cleanup_interval_ms,
    )
