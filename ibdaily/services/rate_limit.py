import threading
import time
from collections import defaultdict, deque


class RateLimiter:
    """Sliding-window request counter held in process memory.

    Keys are client IPs for unauthenticated routes and user ids otherwise.
    Counts are per process, so a multi-worker deployment allows up to
    ``limit`` requests per worker.
    """

    def __init__(self, limit: int, window_seconds: float = 60) -> None:
        self.limit = limit
        self.window = window_seconds
        self._lock = threading.Lock()
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)

    def _expire(self, hits: deque[float], now: float) -> None:
        horizon = now - self.window
        while hits and hits[0] <= horizon:
            hits.popleft()

    def hit(self, key: str, now: float | None = None) -> float | None:
        """Count a request for key. Returns None when allowed, else seconds to wait."""
        now = time.monotonic() if now is None else now
        with self._lock:
            hits = self._hits[key]
            self._expire(hits, now)
            if len(hits) >= self.limit:
                return hits[0] + self.window - now
            hits.append(now)
        return None

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
