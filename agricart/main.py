"""Entry point. Wires stores, repositories and services into the routes.

Persistence strategy:
  - Accounts: SQL database when DATABASE_URL is set, JSON file otherwise.
  - Attempt records: Redis when REDIS_URL is set, process memory otherwise.
"""
import logging
import os
from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_DIR = os.path.dirname(BASE_DIR)
load_dotenv(os.path.join(PROJECT_DIR, ".env"))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agricart.api.routes.auth_routes import router as auth_router, init_auth_routes
from agricart.api.routes.lockout_routes import router as lockout_router, init_lockout_routes
from agricart.application.governor import LoginAttemptGovernor
from agricart.application.portal_login import PortalLoginService
from agricart.application.rate_limit import FixedWindowRateLimiter
from agricart.domain.policy import LockoutPolicy

log = logging.getLogger("agricart.startup")

DATABASE_URL = os.environ.get("DATABASE_URL", "")
REDIS_URL = os.environ.get("REDIS_URL", "")
ACCOUNTS_FILE = os.environ.get("ACCOUNTS_FILE", os.path.join(PROJECT_DIR, "data", "accounts.json"))

app = FastAPI(
    title="Agricart portal login",
    description="Portal authentication with brute-force lockout.",
    version="1.0.0",
)

_allowed = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _allowed:
    allow_origins = [o.strip() for o in _allowed.split(",") if o.strip()]
else:
    allow_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Attempt store
# ---------------------------------------------------------------------------

if REDIS_URL:
    from agricart.infrastructure.store.redis_store import RedisAttemptStore

    attempt_store = RedisAttemptStore.from_url(REDIS_URL)
    _store_backend = "redis"
    if not attempt_store.ping():
        log.error("Redis at REDIS_URL did not answer PING; lockout checks will follow LOGIN_LOCKOUT_FAIL_OPEN.")
else:
    from agricart.infrastructure.store.memory_store import MemoryAttemptStore

    attempt_store = MemoryAttemptStore()
    _store_backend = "memory"
    log.warning("REDIS_URL not set -- attempt records are process-local.")

# ---------------------------------------------------------------------------
# Account persistence
# ---------------------------------------------------------------------------

_session_factory = None
if DATABASE_URL:
    from agricart.infrastructure.database.connection import init_session_factory, resolve_database_url
    from agricart.infrastructure.repositories.sql_account_repository import SqlAccountRepository

    _session_factory = init_session_factory(resolve_database_url(DATABASE_URL))
    account_repo = SqlAccountRepository(_session_factory)
    _persistence = "sql"
else:
    from agricart.infrastructure.repositories.account_repository import AccountRepository

    account_repo = AccountRepository(data_path=ACCOUNTS_FILE)
    _persistence = "json"

# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

governor = LoginAttemptGovernor(attempt_store, LockoutPolicy.from_env())
login_service = PortalLoginService(account_repo, governor)
status_limiter = FixedWindowRateLimiter(attempt_store, max_requests=10, window_seconds=60)

init_auth_routes(login_service)
init_lockout_routes(governor, status_limiter)

app.include_router(auth_router)
app.include_router(lockout_router)

log.info("Started with %s accounts and %s attempt store.", _persistence, _store_backend)


@app.get("/health")
def health():
    db_ok = True
    if _session_factory is not None:
        from agricart.infrastructure.database.connection import check_health

        db_ok = check_health(_session_factory)
    store_ok = attempt_store.ping()
    return {
        "status": "online" if (db_ok and store_ok) else "degraded",
        "persistence": _persistence,
        "attempt_store": _store_backend,
        "attempt_store_ok": store_ok,
        "database_ok": db_ok,
    }
