"""Login attempt governor -- brute-force lockout keyed by identifier and by IP.

Each (identifier, user type) and (IP, user type) pair owns a fixed-window
failure counter in the attempt store, next to its first-failure time, its
current lock and its escalation level. A key is locked once its counter
reaches the policy threshold; locks lift passively when their entry expires
at ``locked_until``, or immediately on clear/reset.
"""
import logging
import time

from agricart.domain.attempt import AttemptRecord, LockoutResult
from agricart.domain.enums import UserType
from agricart.domain.errors import AttemptStoreError, LockedOut, LockoutUnavailable
from agricart.domain.policy import LockoutPolicy
from agricart.infrastructure.audit import log_security_event

log = logging.getLogger("agricart.lockout")

KEY_PREFIX = "login_attempts"
ENTRY_SUFFIXES = ("count", "first", "lock", "level")


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


def _entries(key: str) -> list:
    return [f"{key}:{suffix}" for suffix in ENTRY_SUFFIXES]


class LoginAttemptGovernor:
    """Decides whether a login may proceed and records the outcome.

    The store must provide atomic ``incr`` and ``set_nx``; counts go through
    the first and locks through the second, so concurrent failures never
    lose a count or overwrite a lock.
    """

    def __init__(self, store, policy: LockoutPolicy | None = None, clock=time.time, events=None):
        self._store = store
        self._policy = policy or LockoutPolicy()
        self._clock = clock
        self._events = events or log_security_event

    @property
    def policy(self) -> LockoutPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @staticmethod
    def _key(scope: str, user_type: UserType, subject: str) -> str:
        return f"{KEY_PREFIX}:{scope}:{user_type.value}:{subject}"

    def _keys(self, identifier: str, user_type: UserType, ip_address: str | None) -> list:
        keys = [self._key("id", user_type, normalize_identifier(identifier))]
        if ip_address:
            keys.append(self._key("ip", user_type, ip_address))
        return keys

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def _load(self, key: str, count: int | None = None) -> AttemptRecord | None:
        if count is None:
            count = self._store.get(f"{key}:count")
        return AttemptRecord.from_store(
            count,
            self._store.get(f"{key}:first"),
            self._store.get(f"{key}:lock"),
            self._store.get(f"{key}:level"),
        )

    def _register_failure(self, key: str, now: float) -> tuple:
        """Count one failure on *key*. Returns ``(record, lock_engaged)``.

        Only the request that wins the ``:lock`` SET NX writes lock fields, so
        a concurrent failure can never overwrite a lock another one engaged.
        """
        policy = self._policy
        count = self._store.incr(f"{key}:count", ttl=policy.window_seconds)
        if count == 1:
            self._store.set(f"{key}:first", repr(now), ttl=policy.window_seconds)
        record = self._load(key, count)

        if count < policy.max_attempts or record.is_locked_at(now):
            return record, False

        level = policy.next_level(record.lock_level)
        seconds = policy.lock_duration(level)
        locked_until = now + seconds
        if not self._store.set_nx(f"{key}:lock", AttemptRecord.lock_json(locked_until, level), ttl=seconds):
            # another failure engaged the lock first
            return self._load(key, count), False

        self._store.set(f"{key}:level", str(level), ttl=policy.level_ttl(seconds))
        record.locked_until = locked_until
        record.lock_level = level
        return record, True

    def _emit(self, action: str, ip_address: str | None, payload: dict, user_id: str | None = None) -> None:
        try:
            self._events(action, user_id, ip_address, payload)
        except OSError as exc:
            log.warning("Security event %s not written: %s", action, exc)

    def _store_failed(self, operation: str, exc: AttemptStoreError) -> None:
        if self._policy.fail_open:
            log.warning("Attempt store unavailable during %s, letting login through: %s", operation, exc)
            return
        log.error("Attempt store unavailable during %s: %s", operation, exc)
        raise LockoutUnavailable(str(exc)) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def check_login_allowed(self, identifier: str, user_type, ip_address: str | None, field: str = "email") -> None:
        """Raise LockedOut if the identifier or the IP is currently locked."""
        user_type = UserType(user_type)
        try:
            status = self.get_lockout_status(identifier, user_type, ip_address)
        except AttemptStoreError as exc:
            self._store_failed("check", exc)
            return
        if status.is_locked:
            log.info(
                "Login blocked for %s/%s from %s (%ss left)",
                user_type.value, normalize_identifier(identifier), ip_address, status.remaining_time,
            )
            raise LockedOut(field=field, lockout=status)

    def record_failed_attempt(self, identifier: str, user_type, ip_address: str | None) -> LockoutResult:
        """Count a failure against both keys and engage locks that hit the threshold."""
        user_type = UserType(user_type)
        now = self._clock()
        records = []
        try:
            for key in self._keys(identifier, user_type, ip_address):
                record, engaged = self._register_failure(key, now)
                records.append(record)
                if engaged:
                    log.warning(
                        "Lock level %d engaged on %s until %.0f",
                        record.lock_level, key, record.locked_until,
                    )
                    self._emit("login_lockout_engaged", ip_address, {
                        "key": key,
                        "user_type": user_type.value,
                        "failed_attempts": record.failure_count,
                        "lock_level": record.lock_level,
                        "lock_seconds": self._policy.lock_duration(record.lock_level),
                    })
        except AttemptStoreError as exc:
            self._store_failed("record", exc)
            return LockoutResult(False, None, None, server_time=now)
        return LockoutResult.combine(records, now, self._policy.max_attempts)

    def clear_failed_attempts(self, identifier: str, user_type, ip_address: str | None) -> None:
        """Forget both records. Safe to call when nothing is stored."""
        user_type = UserType(user_type)
        keys = []
        for key in self._keys(identifier, user_type, ip_address):
            keys.extend(_entries(key))
        try:
            self._store.delete(*keys)
        except AttemptStoreError as exc:
            self._store_failed("clear", exc)

    def get_lockout_status(self, identifier: str, user_type, ip_address: str | None = None) -> LockoutResult:
        """Read-only snapshot; does not count as an attempt."""
        user_type = UserType(user_type)
        now = self._clock()
        records = [self._load(key) for key in self._keys(identifier, user_type, ip_address)]
        return LockoutResult.combine(records, now, self._policy.max_attempts)

    def reset_identifier(self, identifier: str, user_type, actor: str | None = None) -> bool:
        """Administrator unlock of the identifier key. IP keys are left alone.

        *actor* is the id of the administrator, recorded in the security log.
        """
        user_type = UserType(user_type)
        key = self._key("id", user_type, normalize_identifier(identifier))
        removed = self._store.delete(*_entries(key))
        self._emit("login_lockout_reset", None, {"key": key, "user_type": user_type.value}, user_id=actor)
        return removed > 0
