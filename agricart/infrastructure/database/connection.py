"""Database engine and session factory for account storage."""
import logging
import os
import re

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from agricart.infrastructure.database.models import Base

log = logging.getLogger("agricart.database")

# Matches a postgres(ql):// URL anywhere inside a string.
_PG_URL_RE = re.compile(r"(postgres(?:ql)?://\S+)")


def resolve_database_url(raw: str | None = None) -> str:
    """Return a clean SQLAlchemy URL from DATABASE_URL (or *raw*).

    Strips pasted quotes and ``psql`` prefixes, and selects the psycopg
    driver for ``postgres://`` / ``postgresql://`` URLs.
    """
    raw = (raw if raw is not None else os.environ.get("DATABASE_URL", "")).strip()

    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ('"', "'"):
        raw = raw[1:-1].strip()

    match = _PG_URL_RE.search(raw)
    url = match.group(1) if match else raw
    url = url.rstrip("'\"").strip()

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str):
    """Create an engine, logging only the host part of the URL."""
    masked = url.split("@")[-1].split("?")[0] if "@" in url else url.split(":")[0]
    log.info("Initialising database engine -> %s", masked)
    if url.startswith("sqlite"):
        return create_engine(url, echo=False)
    return create_engine(
        url,
        pool_size=3,
        max_overflow=5,
        pool_timeout=15,
        pool_recycle=1800,
        pool_pre_ping=True,
        echo=False,
    )


def init_session_factory(url: str):
    """Build engine + sessionmaker and make sure the tables exist."""
    engine = build_engine(url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


def check_health(session_factory) -> bool:
    try:
        with session_factory() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        log.error("Database health check failed: %s", exc)
        return False
