import time
from typing import Callable, Dict, List

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding window per key, kept in process memory."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._hits: Dict[str, List[float]] = {}
        self._clock = clock

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = self._clock()
        window_start = now - window_seconds
        # prune
        hits = [t for t in self._hits.get(key, []) if t > window_start]
        if len(hits) >= max_requests:
            self._hits[key] = hits
            return False
        hits.append(now)
        self._hits[key] = hits
        return True
