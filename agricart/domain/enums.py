"""Enums and value objects used across the domain."""
from enum import Enum


class UserType(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    STAFF = "staff"
    MEMBER = "member"
    LOGISTIC = "logistic"


class Portal(str, Enum):
    """Login entry points. Each portal owns one lockout partition."""

    CUSTOMER = "customer"
    ADMIN = "admin"
    MEMBER = "member"
    LOGISTIC = "logistic"

    @property
    def lockout_type(self) -> UserType:
        """User type under which failures on this portal are counted."""
        return UserType(self.value)

    @property
    def identifier_field(self) -> str:
        return "member_id" if self is Portal.MEMBER else "email"

    def admits(self, user_type: UserType) -> bool:
        """True if accounts of *user_type* may sign in through this portal."""
        if self is Portal.ADMIN:
            return user_type in (UserType.ADMIN, UserType.STAFF)
        return user_type.value == self.value
