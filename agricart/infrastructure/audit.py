"""Append-only security event log.

Writes newline-delimited JSON entries to `logs/security.log` (or the
directory named by AUDIT_LOG_DIR). A module-level lock keeps concurrent
writers from interleaving lines.
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

_LOCK = threading.Lock()

ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", "") or ROOT / "logs")
LOG_FILE = LOG_DIR / "security.log"

log = logging.getLogger("agricart.security")


def _ensure_dir():
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def log_security_event(
    action: str,
    user_id: str | None,
    ip_address: str | None,
    payload: dict | None = None,
) -> None:
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "user_id": user_id,
        "ip_address": ip_address,
        "payload": payload or {},
    }
    log.info("%s user=%s ip=%s", action, user_id, ip_address)
    _ensure_dir()
    with _LOCK:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
