"""Attempt record entity and the lockout result reported to login handlers."""
import json
import math
from datetime import datetime, timezone

from agricart.domain.errors import AttemptStoreError


def _iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def format_remaining(seconds: int) -> str:
    """Human countdown, e.g. ``'4m 05s'`` or ``'23h 59m'``."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class AttemptRecord:
    """Failure history of one key (identifier or IP) within one user type.

    Stored as separate entries so that no failure ever rewrites another
    request's update: ``count`` (atomic counter), ``first`` (set once per
    window), ``lock`` (written only by the request that engages it, expires
    with the lock) and ``level`` (last escalation step reached).
    """

    def __init__(
        self,
        failure_count: int = 0,
        first_failure_at: float | None = None,
        locked_until: float | None = None,
        lock_level: int = 0,
    ):
        self.failure_count = failure_count
        self.first_failure_at = first_failure_at
        self.locked_until = locked_until
        self.lock_level = lock_level

    def is_locked_at(self, now: float) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def remaining_at(self, now: float) -> int:
        """Whole seconds until the lock lifts (rounded up), 0 when open."""
        if not self.is_locked_at(now):
            return 0
        return max(1, math.ceil(self.locked_until - now))

    @staticmethod
    def lock_json(locked_until: float, lock_level: int) -> str:
        return json.dumps({"locked_until": locked_until, "lock_level": lock_level})

    @classmethod
    def from_store(
        cls,
        count: str | int | None,
        first: str | None = None,
        lock: str | None = None,
        level: str | None = None,
    ) -> "AttemptRecord | None":
        """Rebuild a record from its raw entries. Unreadable values raise AttemptStoreError."""
        if count is None and first is None and lock is None and level is None:
            return None
        try:
            data = json.loads(lock) if lock else {}
            lock_level = max(int(level or 0), int(data.get("lock_level") or 0))
            return cls(
                failure_count=int(count or 0),
                first_failure_at=float(first) if first else None,
                locked_until=float(data["locked_until"]) if data.get("locked_until") is not None else None,
                lock_level=lock_level,
            )
        except (ValueError, TypeError, AttributeError) as exc:
            raise AttemptStoreError(f"Unreadable attempt record: {exc}") from exc


class LockoutResult:
    """Combined view of the identifier and IP records at a point in time."""

    def __init__(
        self,
        is_locked: bool,
        attempts_remaining: int | None,
        locked_until: float | None,
        failed_attempts: int = 0,
        lock_level: int = 0,
        server_time: float | None = None,
    ):
        self.is_locked = is_locked
        self.attempts_remaining = attempts_remaining
        self.locked_until = locked_until
        self.failed_attempts = failed_attempts
        self.lock_level = lock_level
        self.server_time = server_time

    @classmethod
    def combine(cls, records: list, now: float, max_attempts: int) -> "LockoutResult":
        """Merge per-key records. The later ``locked_until`` wins."""
        present = [r for r in records if r is not None]
        locked = [r.locked_until for r in present if r.is_locked_at(now)]
        failed = max((r.failure_count for r in present), default=0)
        level = max((r.lock_level for r in present), default=0)
        if locked:
            return cls(True, None, max(locked), failed, level, now)
        return cls(False, max(0, max_attempts - failed), None, failed, level, now)

    @property
    def remaining_time(self) -> int:
        if not self.is_locked or self.locked_until is None or self.server_time is None:
            return 0
        return max(1, math.ceil(self.locked_until - self.server_time))

    def to_dict(self) -> dict:
        return {
            "is_locked": self.is_locked,
            "attempts_remaining": self.attempts_remaining,
            "locked_until": _iso(self.locked_until),
            "failed_attempts": self.failed_attempts,
            "lock_level": self.lock_level,
            "remaining_time": self.remaining_time,
            "formatted_time": format_remaining(self.remaining_time),
            "server_time": _iso(self.server_time),
        }
