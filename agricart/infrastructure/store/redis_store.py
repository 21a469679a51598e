"""Redis-backed attempt store, shared by every worker process."""
import logging

import redis

from agricart.domain.errors import AttemptStoreError

log = logging.getLogger("agricart.store")


class RedisAttemptStore:
    """Thin wrapper over ``redis.Redis``; counters and locks rely on native INCR and SET NX."""

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 2.0) -> "RedisAttemptStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            log.error("Redis GET failed for %s: %s", key, exc)
            raise AttemptStoreError(str(exc)) from exc

    def set(self, key: str, value: str, ttl: int | None = None) -> None:
        try:
            if ttl:
                self._client.set(key, value, ex=ttl)
            else:
                self._client.set(key, value)
        except redis.RedisError as exc:
            log.error("Redis SET failed for %s: %s", key, exc)
            raise AttemptStoreError(str(exc)) from exc

    def set_nx(self, key: str, value: str, ttl: int | None = None) -> bool:
        """SET NX: True only for the caller that created the key."""
        try:
            return bool(self._client.set(key, value, ex=ttl or None, nx=True))
        except redis.RedisError as exc:
            log.error("Redis SET NX failed for %s: %s", key, exc)
            raise AttemptStoreError(str(exc)) from exc

    def incr(self, key: str, ttl: int | None = None) -> int:
        """Create the counter with its TTL (SET NX EX) and INCR it in one MULTI/EXEC.

        INCR keeps an existing TTL, so the window is fixed by whoever creates
        the key and a dropped connection can never leave a counter without one.
        """
        try:
            with self._client.pipeline(transaction=True) as pipe:
                if ttl:
                    pipe.set(key, 0, ex=ttl, nx=True)
                pipe.incr(key)
                results = pipe.execute()
            return int(results[-1])
        except redis.RedisError as exc:
            log.error("Redis INCR failed for %s: %s", key, exc)
            raise AttemptStoreError(str(exc)) from exc

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(self._client.delete(*keys))
        except redis.RedisError as exc:
            log.error("Redis DEL failed: %s", exc)
            raise AttemptStoreError(str(exc)) from exc

    def ttl(self, key: str) -> int | None:
        try:
            remaining = int(self._client.ttl(key))
        except redis.RedisError as exc:
            log.error("Redis TTL failed for %s: %s", key, exc)
            raise AttemptStoreError(str(exc)) from exc
        # -2: missing key, -1: no expiry
        return remaining if remaining >= 0 else None

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False
