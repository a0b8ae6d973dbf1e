"""
In-memory sliding window rate limiter.

One limiter instance per endpoint family; each instance keeps, per caller
key, the timestamps of the requests admitted within the trailing window.
State lives in process memory only and is pruned lazily on every check;
keys whose requests all left the window are dropped by a sweep that runs at
most once per window, from inside `allow`.
"""
import math
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, List, Optional

from ..config import get_settings


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check."""
    allowed: bool
    remaining: int
    retry_after: Optional[int] = None


class SlidingWindowLimiter:
    """
    Counts requests per key over a trailing window of `window_seconds`.

    Args:
        max_requests: Requests admitted per key and window
        window_seconds: Length of the trailing window
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, List[float]] = {}
        self._last_sweep = float("-inf")
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of caller keys currently tracked."""
        return len(self._hits)

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, stamps in self._hits.items() if not stamps or stamps[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def allow(self, key: str) -> RateLimitDecision:
        now = self._clock()
        cutoff = now - self.window_seconds

        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now

            pruned = [ts for ts in self._hits.get(key, []) if ts > cutoff]

            if len(pruned) >= self.max_requests:
                # Oldest admitted request leaves the window first.
                retry_after = math.ceil(pruned[0] - cutoff)
                self._hits[key] = pruned
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            pruned.append(now)
            self._hits[key] = pruned
            return RateLimitDecision(allowed=True, remaining=max(0, self.max_requests - len(pruned)))

    def reset(self, key: Optional[str] = None) -> None:
        """Forget the history of one key, or of every key."""
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


@lru_cache(maxsize=None)
def get_rate_limiter(namespace: str) -> SlidingWindowLimiter:
    """Process-wide limiter for an endpoint family (see RateLimitScope)."""
    settings = get_settings()
    return SlidingWindowLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
