"""Fixed-window request limiter on top of an attempt store."""


class FixedWindowRateLimiter:
    """Allows ``max_requests`` hits per key per ``window_seconds``."""

    def __init__(self, store, max_requests: int = 10, window_seconds: int = 60, prefix: str = "rate_limit"):
        self._store = store
        self._max = max_requests
        self._window = window_seconds
        self._prefix = prefix

    def hit(self, key: str) -> tuple[bool, int]:
        """Count one request. Returns ``(allowed, retry_after_seconds)``."""
        store_key = f"{self._prefix}:{key}"
        count = self._store.incr(store_key, ttl=self._window)
        if count <= self._max:
            return True, 0
        remaining = self._store.ttl(store_key)
        return False, max(1, remaining if remaining is not None else self._window)
