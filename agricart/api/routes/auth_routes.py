"""Portal login routes -- customer, admin/staff, member and logistic."""
import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from agricart.api.client_ip import client_ip
from agricart.domain.enums import Portal
from agricart.domain.errors import AuthenticationError, LockedOut, LockoutUnavailable
from agricart.infrastructure.auth.jwt_handler import create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])

log = logging.getLogger("agricart.auth")

_login_service = None


def init_auth_routes(login_service):
    global _login_service
    _login_service = login_service


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class EmailLoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=160, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=128)


class MemberLoginRequest(BaseModel):
    member_id: str = Field(..., min_length=1, max_length=40)
    password: str = Field(..., min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Shared login flow
# ---------------------------------------------------------------------------

def _login(portal: Portal, identifier: str, password: str, request: Request) -> dict:
    try:
        account = _login_service.authenticate(portal, identifier, password, client_ip(request))
    except LockedOut as exc:
        raise HTTPException(
            status_code=429,
            detail=exc.to_detail(),
            headers={"Retry-After": str(exc.retry_after)},
        )
    except AuthenticationError as exc:
        raise HTTPException(status_code=422, detail=exc.to_detail())
    except LockoutUnavailable:
        log.error("Login refused on %s portal: lockout store unavailable", portal.value)
        raise HTTPException(status_code=503, detail="Login temporarily unavailable. Try again shortly.")

    access_token = create_access_token(account.id, account.user_type.value, portal.value)
    return {
        "success": True,
        "access_token": access_token,
        "token_type": "bearer",
        "user": account.to_public_dict(),
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/customer/login")
def customer_login(req: EmailLoginRequest, request: Request):
    return _login(Portal.CUSTOMER, req.email, req.password, request)


@router.post("/admin/login")
def admin_login(req: EmailLoginRequest, request: Request):
    """Admin portal. Staff accounts sign in here too."""
    return _login(Portal.ADMIN, req.email, req.password, request)


@router.post("/member/login")
def member_login(req: MemberLoginRequest, request: Request):
    return _login(Portal.MEMBER, req.member_id, req.password, request)


@router.post("/logistic/login")
def logistic_login(req: EmailLoginRequest, request: Request):
    return _login(Portal.LOGISTIC, req.email, req.password, request)
