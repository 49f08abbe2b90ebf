"""
Rate limiter utility for API rate limiting.
"""
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request


@dataclass
class RateLimitState:
    """Counter for one client key within the current window."""

    count: int
    window_reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    limit: int
    window_reset_at: float
    now: float

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, math.ceil(self.window_reset_at - self.now))


class FixedWindowRateLimiter:
    """
    Fixed-window request counter keyed by client identity.

    Every hit increments the key's counter; once the window expires the
    counter starts over at zero and the window moves forward. The key map
    is an LRU bounded by ``max_keys`` so distinct clients cannot grow it
    without limit.

    Example:
        limiter = FixedWindowRateLimiter(max_requests=30, window_seconds=60)
        if not limiter.hit(client_ip).allowed:
            ...  # reject with 429
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        max_keys: int = 10_000,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per key in one window
            window_seconds: Window length in seconds
            max_keys: Maximum number of tracked keys before LRU eviction
            clock: Monotonic time source, injectable for tests
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self.clock = clock or time.monotonic
        self._states: "OrderedDict[str, RateLimitState]" = OrderedDict()
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and report whether it is allowed."""
        with self._lock:
            now = self.clock()
            state = self._states.get(key)
            if state is None:
                state = RateLimitState(count=0, window_reset_at=now + self.window_seconds)
                self._states[key] = state
            else:
                self._states.move_to_end(key)

            if now > state.window_reset_at:
                state.count = 0
                state.window_reset_at = now + self.window_seconds

            state.count += 1
            self._evict_overflow()

            return RateLimitDecision(
                allowed=state.count <= self.max_requests,
                count=state.count,
                limit=self.max_requests,
                window_reset_at=state.window_reset_at,
                now=now,
            )

    def sweep_expired(self) -> int:
        """Drop keys whose window has already ended. Returns how many were dropped."""
        with self._lock:
            now = self.clock()
            expired = [k for k, s in self._states.items() if now > s.window_reset_at]
            for key in expired:
                del self._states[key]
            return len(expired)

    def get_state(self, key: str) -> Optional[RateLimitState]:
        """Current counter for ``key`` (for debugging/monitoring)."""
        with self._lock:
            return self._states.get(key)

    def reset(self) -> None:
        """Forget every tracked key."""
        with self._lock:
            self._states.clear()

    def __len__(self) -> int:
        return len(self._states)

    def _evict_overflow(self) -> None:
        if len(self._states) <= self.max_keys:
            return
        # Expired windows go first, then least recently seen keys.
        now = self.clock()
        for key in [k for k, s in self._states.items() if now > s.window_reset_at]:
            del self._states[key]
        while len(self._states) > self.max_keys:
            self._states.popitem(last=False)


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """Extract client IP address from request."""
    if trust_proxy_headers:
        # Only meaningful behind a proxy that overwrites these headers
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"
