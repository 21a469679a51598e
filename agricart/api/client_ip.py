"""Client address resolution for lockout keys."""
import os

from fastapi import Request


def _trust_forwarded() -> bool:
    return os.environ.get("TRUST_FORWARDED_FOR", "").strip().lower() in ("1", "true", "yes")


def client_ip(request: Request) -> str:
    """Peer address, or the first X-Forwarded-For hop behind a trusted proxy."""
    if _trust_forwarded():
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
