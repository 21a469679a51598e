"""Use case: authenticate a portal login under the attempt governor."""
import logging

from agricart.application.governor import LoginAttemptGovernor
from agricart.domain.account import Account
from agricart.domain.enums import Portal
from agricart.domain.errors import AccountDeactivated, InvalidCredentials, WrongPortal
from agricart.domain.invariant import validate_account_active, validate_portal_access
from agricart.infrastructure.audit import log_security_event
from agricart.infrastructure.auth.password import verify_password

log = logging.getLogger("agricart.auth")


class PortalLoginService:
    """Runs the lockout check, credential check and bookkeeping for one login.

    Portal validation and rate limiting stay separate collaborators: the
    governor only counts, ``validate_portal_access`` only classifies.
    """

    def __init__(self, account_repo, governor: LoginAttemptGovernor, events=None):
        self._accounts = account_repo
        self._governor = governor
        self._events = events or log_security_event

    def _find(self, portal: Portal, identifier: str) -> Account | None:
        if portal is Portal.MEMBER:
            return self._accounts.find_by_member_id(identifier)
        return self._accounts.find_by_email(identifier)

    def _emit(self, action: str, user_id: str | None, ip_address: str | None, payload: dict) -> None:
        try:
            self._events(action, user_id, ip_address, payload)
        except OSError as exc:
            log.warning("Security event %s not written: %s", action, exc)

    def _fail(self, exc, action, account, portal, identifier, ip_address):
        lockout = self._governor.record_failed_attempt(identifier, portal.lockout_type, ip_address)
        exc.lockout = lockout
        self._emit(action, account.id if account else None, ip_address, {
            portal.identifier_field: identifier,
            "user_type": account.user_type.value if account else portal.lockout_type.value,
            "target_portal": portal.value,
            "is_locked": lockout.is_locked,
            "attempts_remaining": lockout.attempts_remaining,
        })
        raise exc

    def authenticate(self, portal: Portal, identifier: str, password: str, ip_address: str | None) -> Account:
        """Return the signed-in account or raise an AuthenticationError subclass."""
        field = portal.identifier_field
        self._governor.check_login_allowed(identifier, portal.lockout_type, ip_address, field=field)

        account = self._find(portal, identifier)

        if account is not None:
            try:
                validate_account_active(account, portal)
            except AccountDeactivated:
                self._emit("login_failed_deactivated", account.id, ip_address, {
                    field: identifier,
                    "user_type": portal.lockout_type.value,
                })
                raise
            try:
                validate_portal_access(account, portal)
            except WrongPortal as exc:
                self._fail(exc, "login_failed_wrong_portal", account, portal, identifier, ip_address)

        if account is None or not verify_password(password, account.password_hash):
            self._fail(InvalidCredentials(field=field), "login_failed", None, portal, identifier, ip_address)

        self._governor.clear_failed_attempts(identifier, portal.lockout_type, ip_address)
        self._accounts.update_last_login(account.id)
        self._emit("login_succeeded", account.id, ip_address, {
            field: identifier,
            "user_type": account.user_type.value,
            "portal": portal.value,
        })
        log.info("Login succeeded for %s via %s portal", account.id, portal.value)
        return account
