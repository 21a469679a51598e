"""Account entity -- the credentials a portal login is checked against."""
from datetime import datetime, timezone
from uuid import uuid4

from agricart.domain.enums import UserType


class Account:
    """Registered customer, member, logistic partner, staff or admin."""

    def __init__(
        self,
        name: str,
        email: str,
        user_type: UserType | str,
        password_hash: str,
        member_id: str | None = None,
        active: bool = True,
        account_id: str | None = None,
        created_at: str | None = None,
        last_login_at: str | None = None,
    ):
        self._id = account_id or str(uuid4())
        self._name = name.strip()
        self._email = email.lower().strip()
        self._user_type = UserType(user_type)
        self._password_hash = password_hash
        self._member_id = member_id.strip() if member_id else None
        self._active = active
        self._created_at = created_at or datetime.now(timezone.utc).isoformat()
        self._last_login_at = last_login_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> str:
        return self._email

    @property
    def member_id(self) -> str | None:
        return self._member_id

    @property
    def user_type(self) -> UserType:
        return self._user_type

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def active(self) -> bool:
        return self._active

    @property
    def last_login_at(self) -> str | None:
        return self._last_login_at

    def mark_logged_in(self) -> None:
        self._last_login_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self._name,
            "email": self._email,
            "member_id": self._member_id,
            "user_type": self._user_type.value,
            "password_hash": self._password_hash,
            "active": self._active,
            "created_at": self._created_at,
            "last_login_at": self._last_login_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            name=data["name"],
            email=data["email"],
            user_type=data["user_type"],
            password_hash=data["password_hash"],
            member_id=data.get("member_id"),
            active=data.get("active", True),
            account_id=data.get("id"),
            created_at=data.get("created_at"),
            last_login_at=data.get("last_login_at"),
        )

    def to_public_dict(self) -> dict:
        """Safe representation without credentials."""
        return {
            "id": self._id,
            "name": self._name,
            "email": self._email,
            "member_id": self._member_id,
            "user_type": self._user_type.value,
        }
