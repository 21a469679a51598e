"""
Shared pytest fixtures for the portal login test suite.

Strategy:
- Domain and governor tests: in-memory store driven by a fake clock.
- API tests: FastAPI TestClient over a JSON account repo in a tmp directory.
  Security events go to a throwaway log directory.
"""
import os
import tempfile

import pytest

# ---------------------------------------------------------------------------
# Environment must be in place before any agricart module is imported
# ---------------------------------------------------------------------------
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production-123456")
os.environ.setdefault("AUDIT_LOG_DIR", tempfile.mkdtemp(prefix="agricart_audit_"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("REDIS_URL", None)

from agricart.application.governor import LoginAttemptGovernor
from agricart.application.portal_login import PortalLoginService
from agricart.application.rate_limit import FixedWindowRateLimiter
from agricart.domain.account import Account
from agricart.domain.enums import UserType
from agricart.domain.policy import LockoutPolicy
from agricart.infrastructure.auth.password import hash_password
from agricart.infrastructure.repositories.account_repository import AccountRepository
from agricart.infrastructure.store.memory_store import MemoryAttemptStore

PASSWORD = "Harvest2024!"
_HASH = hash_password(PASSWORD)


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EventRecorder:
    """Collects security events instead of writing them to disk."""

    def __init__(self):
        self.events = []

    def __call__(self, action, user_id, ip_address, payload=None):
        self.events.append({
            "action": action,
            "user_id": user_id,
            "ip_address": ip_address,
            "payload": payload or {},
        })

    def actions(self) -> list:
        return [e["action"] for e in self.events]


def make_account(user_type=UserType.CUSTOMER, email="buyer@agricart.test", **kwargs) -> Account:
    defaults = {
        "name": "Test Account",
        "email": email,
        "user_type": user_type,
        "password_hash": _HASH,
    }
    defaults.update(kwargs)
    return Account(**defaults)


# ---------------------------------------------------------------------------
# Governor fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryAttemptStore(clock=clock)


@pytest.fixture
def policy():
    return LockoutPolicy(max_attempts=5, window_seconds=900, lock_durations=(60, 180, 300, 86400))


@pytest.fixture
def events():
    return EventRecorder()


@pytest.fixture
def governor(store, policy, clock, events):
    return LoginAttemptGovernor(store, policy, clock=clock, events=events)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@pytest.fixture
def account_repo(tmp_path):
    repo = AccountRepository(data_path=str(tmp_path / "accounts.json"))
    repo.save(make_account(UserType.CUSTOMER, "buyer@agricart.test", name="Buyer"))
    repo.save(make_account(UserType.ADMIN, "admin@agricart.test", name="Admin"))
    repo.save(make_account(UserType.STAFF, "staff@agricart.test", name="Staff"))
    repo.save(make_account(UserType.LOGISTIC, "rider@agricart.test", name="Rider"))
    repo.save(make_account(UserType.MEMBER, "farmer@agricart.test", name="Farmer", member_id="M-0001"))
    repo.save(make_account(UserType.CUSTOMER, "gone@agricart.test", name="Gone", active=False))
    return repo


@pytest.fixture
def login_service(account_repo, governor, events):
    return PortalLoginService(account_repo, governor, events=events)


# ---------------------------------------------------------------------------
# FastAPI TestClient
# ---------------------------------------------------------------------------

@pytest.fixture
def test_app(login_service, governor, store):
    from fastapi import FastAPI
    from agricart.api.routes.auth_routes import router as auth_router, init_auth_routes
    from agricart.api.routes.lockout_routes import router as lockout_router, init_lockout_routes

    app = FastAPI()
    init_auth_routes(login_service)
    init_lockout_routes(governor, FixedWindowRateLimiter(store, max_requests=10, window_seconds=60))
    app.include_router(auth_router)
    app.include_router(lockout_router)
    return app


@pytest.fixture
def client(test_app):
    from fastapi.testclient import TestClient
    return TestClient(test_app)
