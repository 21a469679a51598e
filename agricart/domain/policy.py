"""Lockout policy constants and the escalation ladder."""
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return int(raw)


_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be one of {', '.join(_TRUE + _FALSE)}; got {raw!r}.")


class LockoutPolicy:
    """Threshold, fixed window and lock durations for the login governor.

    ``lock_durations`` is the escalation ladder in seconds: the n-th lock on a
    record lasts ``lock_durations[n-1]``, and every lock past the end of the
    ladder reuses the last entry.
    """

    MAX_ATTEMPTS = 5
    WINDOW_SECONDS = 900
    LOCK_DURATIONS = (60, 180, 300, 86400)  # 1 min, 3 min, 5 min, 24 h
    RECORD_TTL = 86400

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        window_seconds: int = WINDOW_SECONDS,
        lock_durations: tuple = LOCK_DURATIONS,
        record_ttl: int = RECORD_TTL,
        fail_open: bool = False,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if window_seconds < 1:
            raise ValueError("window_seconds must be positive.")
        if not lock_durations or any(d < 1 for d in lock_durations):
            raise ValueError("lock_durations must be a non-empty list of positive seconds.")
        if record_ttl < 1:
            raise ValueError("record_ttl must be positive.")
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.lock_durations = tuple(int(d) for d in lock_durations)
        self.record_ttl = record_ttl
        self.fail_open = fail_open

    @classmethod
    def from_env(cls) -> "LockoutPolicy":
        """Build a policy from ``LOGIN_*`` environment variables."""
        raw_ladder = os.environ.get("LOGIN_LOCK_DURATIONS", "").strip()
        ladder = (
            tuple(int(part) for part in raw_ladder.split(",") if part.strip())
            if raw_ladder else cls.LOCK_DURATIONS
        )
        return cls(
            max_attempts=_env_int("LOGIN_MAX_ATTEMPTS", cls.MAX_ATTEMPTS),
            window_seconds=_env_int("LOGIN_WINDOW_SECONDS", cls.WINDOW_SECONDS),
            lock_durations=ladder,
            record_ttl=_env_int("LOGIN_RECORD_TTL", cls.RECORD_TTL),
            fail_open=_env_bool("LOGIN_LOCKOUT_FAIL_OPEN", False),
        )

    def lock_duration(self, level: int) -> int:
        """Seconds of lock for escalation *level* (1-based)."""
        if level < 1:
            return 0
        return self.lock_durations[min(level, len(self.lock_durations)) - 1]

    def next_level(self, current_level: int) -> int:
        return min(current_level + 1, len(self.lock_durations))

    def level_ttl(self, lock_seconds: int) -> int:
        """TTL for a record's escalation level, never shorter than the lock it belongs to."""
        return max(self.record_ttl, lock_seconds + 1)
