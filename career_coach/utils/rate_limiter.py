"""
Rate limiter utility for API rate limiting.
"""
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class RateLimitEntry:
    """Counter for one identity inside the current window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int


class RateLimiter:
    """
    Fixed-window rate limiter keyed by identity (client IP, user id, ...).

    Each key owns a window of ``window_seconds`` that starts with its first
    request. Requests beyond ``limit`` inside the window are rejected until the
    window resets. Expired entries are swept on a random fraction of checks so
    the table does not grow without bound.

    State lives in process memory: separate processes enforce their limits
    independently.

    Example:
        limiter = RateLimiter(limit=60, window_seconds=60)
        decision = limiter.check("203.0.113.7")
        if not decision.allowed:
            ...  # reject, ask the caller to retry after decision.retry_after
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
        sweep_probability: float = 0.01,
        rng: Callable[[], float] = random.random,
    ):
        """
        Initialize rate limiter.

        Args:
            limit: Maximum number of requests allowed per window
            window_seconds: Window length in seconds
            clock: Returns the current time in seconds (wall clock by default)
            sweep_probability: Chance that a check also purges expired entries
            rng: Returns a float in [0, 1), used for the sweep draw
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.limit = limit
        self.window_seconds = window_seconds
        self.sweep_probability = sweep_probability
        self._clock = clock
        self._rng = rng
        self._entries: Dict[str, RateLimitEntry] = {}

    def check(self, key: str) -> RateLimitDecision:
        """
        Count a request for ``key`` and decide whether it may proceed.

        Rejected requests are not counted.
        """
        now = self._clock()

        if self._rng() < self.sweep_probability:
            self.sweep(now)

        entry = self._entries.get(key)
        if entry is None or now >= entry.reset_at:
            entry = RateLimitEntry(count=0, reset_at=now + self.window_seconds)
            self._entries[key] = entry

        if entry.count >= self.limit:
            return RateLimitDecision(
                allowed=False,
                limit=self.limit,
                remaining=0,
                reset_at=entry.reset_at,
                retry_after=max(1, math.ceil(entry.reset_at - now)),
            )

        entry.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=self.limit,
            remaining=self.limit - entry.count,
            reset_at=entry.reset_at,
            retry_after=0,
        )

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop expired entries. Returns how many were removed."""
        if now is None:
            now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.reset_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def reset(self):
        """Reset the rate limiter (forget every window)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class RateLimiters:
    """The two limiter tiers owned by one application instance."""

    ip: RateLimiter
    user: RateLimiter

    @classmethod
    def from_settings(
        cls,
        settings,
        clock: Callable[[], float] = time.time,
        rng: Callable[[], float] = random.random,
    ) -> "RateLimiters":
        return cls(
            ip=RateLimiter(
                limit=settings.ip_rate_limit,
                window_seconds=settings.ip_rate_window_seconds,
                clock=clock,
                sweep_probability=settings.rate_limit_sweep_probability,
                rng=rng,
            ),
            user=RateLimiter(
                limit=settings.user_rate_limit,
                window_seconds=settings.user_rate_window_seconds,
                clock=clock,
                sweep_probability=settings.rate_limit_sweep_probability,
                rng=rng,
            ),
        )
