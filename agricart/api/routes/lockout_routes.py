"""Lockout status and administration routes."""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from agricart.api.client_ip import client_ip
from agricart.domain.enums import UserType
from agricart.domain.errors import AttemptStoreError
from agricart.infrastructure.auth.dependencies import require_admin

router = APIRouter(prefix="/api/lockout", tags=["lockout"])

_governor = None
_limiter = None


def init_lockout_routes(governor, limiter):
    global _governor, _limiter
    _governor = governor
    _limiter = limiter


class LockoutCheckRequest(BaseModel):
    email: str | None = Field(None, max_length=160)
    member_id: str | None = Field(None, max_length=40)


@router.post("/{user_type}/check")
def check_lockout(user_type: UserType, req: LockoutCheckRequest, request: Request):
    """Lock state for an identifier as seen from the caller's address.

    Login pages poll this to drive their countdown, so it is rate limited
    per IP and never counts as a login attempt.
    """
    identifier = req.member_id if user_type is UserType.MEMBER else req.email
    if not identifier:
        field = "member_id" if user_type is UserType.MEMBER else "email"
        raise HTTPException(status_code=422, detail={field: "validation.required"})

    ip_address = client_ip(request)
    try:
        allowed, retry_after = _limiter.hit(f"lockout_check:{ip_address}")
        if not allowed:
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "too_many_requests",
                    "message": "Too many lockout checks. Try again later.",
                    "retry_after": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )
        status = _governor.get_lockout_status(identifier, user_type, ip_address)
    except AttemptStoreError:
        raise HTTPException(status_code=503, detail="Lockout status unavailable.")

    data = status.to_dict()
    return {
        "locked": data["is_locked"],
        "failed_attempts": data["failed_attempts"],
        "lock_level": data["lock_level"],
        "remaining_time": data["remaining_time"],
        "lock_expires_at": data["locked_until"],
        "server_time": data["server_time"],
        "formatted_time": data["formatted_time"],
    }


@router.delete("/{user_type}/{identifier}")
def unlock_identifier(user_type: UserType, identifier: str, admin: dict = Depends(require_admin)):
    try:
        cleared = _governor.reset_identifier(identifier, user_type, actor=admin["sub"])
    except AttemptStoreError:
        raise HTTPException(status_code=503, detail="Lockout store unavailable.")
    return {"success": True, "cleared": cleared, "by": admin["sub"]}
