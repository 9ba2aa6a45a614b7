# app/core/rate_limit.py
import threading
import time
from collections import OrderedDict

from app.core.config import settings


class RateLimiter:
    """
    Fixed-window request counter per key.

    At most ``max_keys`` windows are tracked; when full, the least recently
    used key is evicted. Expired windows are dropped lazily.
    """

    def __init__(self, max_requests: int, window_seconds: float, max_keys: int = 10000, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._windows: "OrderedDict[str, tuple[float, int]]" = OrderedDict()
        self._lock = threading.Lock()

    def check_and_consume(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window[0] >= self.window_seconds:
                window = (now, 0)

            started, count = window
            if count >= self.max_requests:
                self._windows.move_to_end(key)
                return False

            self._windows[key] = (started, count + 1)
            self._windows.move_to_end(key)
            while len(self._windows) > self.max_keys:
                self._windows.popitem(last=False)
            return True

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


auth_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    max_keys=settings.RATE_LIMIT_MAX_KEYS,
)

chat_limiter = RateLimiter(
    max_requests=settings.CHAT_RATE_LIMIT_REQUESTS,
    window_seconds=settings.CHAT_RATE_LIMIT_WINDOW_SECONDS,
    max_keys=settings.RATE_LIMIT_MAX_KEYS,
)
