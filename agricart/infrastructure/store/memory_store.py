"""In-process attempt store with TTL support.

Process-local, so only suitable for a single worker or for tests. Every
attempt store exposes the same methods:

    get(key) -> str | None
    set(key, value, ttl=None) -> None
    set_nx(key, value, ttl=None) -> bool   # only if absent
    incr(key, ttl=None) -> int      # atomic; ttl applied only on creation
    delete(*keys) -> int
    ttl(key) -> int | None
    ping() -> bool
"""
import math
import threading
import time


class MemoryAttemptStore:
    """Dict-backed key/value store. A lock makes incr and set_nx atomic across threads.

    Expired keys are dropped when read, and every ``sweep_interval`` seconds
    a write sweeps the whole map so keys nobody asks for again do not pile up.
    """

    def __init__(self, clock=time.time, sweep_interval: float = 60.0):
        self._clock = clock
        self._data: dict = {}
        self._expiry: dict = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def _expired(self, key: str, now: float) -> bool:
        deadline = self._expiry.get(key)
        return deadline is not None and now >= deadline

    def _purge(self, key: str, now: float) -> None:
        if self._expired(key, now):
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    def _sweep(self, now: float) -> None:
        # caller holds self._lock
        if now < self._next_sweep:
            return
        for key in [k for k, deadline in self._expiry.items() if now >= deadline]:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        self._next_sweep = now + self._sweep_interval

    def _write(self, key: str, value, ttl: int | None, now: float) -> None:
        self._data[key] = value
        if ttl:
            self._expiry[key] = now + ttl
        else:
            self._expiry.pop(key, None)

    def get(self, key: str) -> str | None:
        with self._lock:
            self._purge(key, self._clock())
            value = self._data.get(key)
            return None if value is None else str(value)

    def set(self, key: str, value: str, ttl: int | None = None) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._write(key, value, ttl, now)

    def set_nx(self, key: str, value: str, ttl: int | None = None) -> bool:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._purge(key, now)
            if key in self._data:
                return False
            self._write(key, value, ttl, now)
            return True

    def incr(self, key: str, ttl: int | None = None) -> int:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._purge(key, now)
            if key not in self._data:
                self._write(key, 0, ttl, now)
            self._data[key] = int(self._data[key]) + 1
            return self._data[key]

    def delete(self, *keys: str) -> int:
        removed = 0
        with self._lock:
            now = self._clock()
            for key in keys:
                self._purge(key, now)
                if self._data.pop(key, None) is not None:
                    removed += 1
                self._expiry.pop(key, None)
        return removed

    def ttl(self, key: str) -> int | None:
        """Remaining lifetime in whole seconds, or None for missing/persistent keys."""
        with self._lock:
            now = self._clock()
            self._purge(key, now)
            deadline = self._expiry.get(key)
            if key not in self._data or deadline is None:
                return None
            return math.ceil(deadline - now)

    def ping(self) -> bool:
        return True
