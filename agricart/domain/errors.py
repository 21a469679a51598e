"""Authentication and lockout errors raised by the domain and application layers."""


class AuthenticationError(Exception):
    """Base for login failures. ``field`` names the form field to attach the message to."""

    message_key = "auth.failed"

    def __init__(self, field: str = "email", lockout=None):
        super().__init__(self.message_key)
        self.field = field
        self.lockout = lockout

    def to_detail(self) -> dict:
        detail = {self.field: self.message_key}
        if self.lockout is not None and self.lockout.is_locked:
            detail["lockout"] = self.lockout.to_dict()
        return detail


class InvalidCredentials(AuthenticationError):
    """Unknown identifier or wrong password."""


class WrongPortal(AuthenticationError):
    """Identifier belongs to a user type the portal does not admit.

    Surfaces to the client exactly like InvalidCredentials; the portal
    mismatch is only visible in the security log.
    """

    def __init__(self, actual_type, target_portal, field: str = "email", lockout=None):
        super().__init__(field=field, lockout=lockout)
        self.actual_type = actual_type
        self.target_portal = target_portal


class AccountDeactivated(AuthenticationError):
    message_key = "auth.deactivated"


class LockedOut(AuthenticationError):
    """Identifier or IP is quarantined until ``lockout.locked_until``."""

    message_key = "auth.locked"

    def to_detail(self) -> dict:
        return {self.field: self.message_key, "lockout": self.lockout.to_dict()}

    @property
    def retry_after(self) -> int:
        return self.lockout.remaining_time


class AttemptStoreError(Exception):
    """The attempt store could not be reached or returned garbage."""


class LockoutUnavailable(Exception):
    """Lockout state is unknown and the policy says to fail closed."""
