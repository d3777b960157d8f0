"""
Async Utilities for Provider Calls.

Provides:
- Sliding-window rate limiting (one window per provider)
- Timeout with fallback value

Clock and sleep functions are injectable so tests can drive the limiter
with a fake clock instead of real time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

T = TypeVar("T")


# =============================================================================
# Rate Limiter (Sliding Window)
# =============================================================================

@dataclass(frozen=True, slots=True)
class RateLimit:
    """At most ``max_requests`` requests in any trailing ``window`` seconds."""
    max_requests: int
    window: float

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ConfigurationError(f"max_requests must be >= 1, got {self.max_requests}")
        if self.window <= 0:
            raise ConfigurationError(f"window must be > 0, got {self.window}")


@dataclass
class RateLimiter:
    """
    Sliding-window rate limiter.

    Keeps the timestamps of recent requests. ``acquire`` purges timestamps
    older than the window; if the window is full it sleeps until the oldest
    one leaves the window, then re-checks. Requests are delayed, never dropped.

    Example:
        limiter = RateLimiter(RateLimit(max_requests=3, window=1.0), name="pubmed")
        await limiter.acquire()
    """
    limit: RateLimit
    name: str = ""
    clock: Clock = time.monotonic
    sleep: Sleep = asyncio.sleep
    _timestamps: deque[float] = field(init=False, default_factory=deque)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def _purge(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.limit.window:
            self._timestamps.popleft()

    async def acquire(self) -> float:
        """
        Wait for a free slot and record the request.

        Returns:
            Total seconds spent waiting (0.0 when admitted immediately)
        """
        waited = 0.0
        async with self._lock:
            while True:
                now = self.clock()
                self._purge(now)
                if len(self._timestamps) < self.limit.max_requests:
                    self._timestamps.append(now)
                    return waited

                wait_time = self.limit.window - (now - self._timestamps[0])
                logger.info(f"Rate limiting {self.name or 'provider'}: waiting {wait_time:.2f}s")
                await self.sleep(wait_time)
                waited += wait_time

    @property
    def remaining(self) -> int:
        """Free slots in the current window."""
        self._purge(self.clock())
        return max(0, self.limit.max_requests - len(self._timestamps))

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._timestamps.clear()

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: object) -> None:
        pass


class ProviderRateLimiter:
    """
    Per-provider rate limiter registry.

    One instance is owned by the application container and shared by every
    adapter, so concurrent searches against the same provider draw from the
    same window.

    Example:
        limiter = ProviderRateLimiter({"arxiv": RateLimit(1, 3.0)})
        await limiter.reserve("arxiv")
    """

    def __init__(
        self,
        limits: Mapping[str, RateLimit],
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._limiters: dict[str, RateLimiter] = {
            name: RateLimiter(limit, name=name, clock=clock, sleep=sleep)
            for name, limit in limits.items()
        }

    @property
    def providers(self) -> list[str]:
        return list(self._limiters)

    def _get(self, provider: str) -> RateLimiter:
        try:
            return self._limiters[provider]
        except KeyError:
            raise ConfigurationError(f"No rate limit configured for provider '{provider}'") from None

    def limit_for(self, provider: str) -> RateLimit:
        return self._get(provider).limit

    async def reserve(self, provider: str) -> float:
        """Block until ``provider`` has capacity, then record the request."""
        return await self._get(provider).acquire()

    def remaining(self, provider: str) -> int:
        return self._get(provider).remaining

    def reset(self) -> None:
        for limiter in self._limiters.values():
            limiter.reset()


# =============================================================================
# Utility Functions
# =============================================================================

async def timeout_with_fallback(
    coro: Awaitable[T],
    timeout: float,
    fallback: T | Callable[[], T],
) -> T:
    """
    Execute coroutine with timeout and fallback.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds
        fallback: Value or callable to return on timeout

    Returns:
        Result or fallback value
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError:
        if callable(fallback):
            return fallback()
        return fallback
