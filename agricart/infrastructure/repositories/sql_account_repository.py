"""SQLAlchemy-backed account repository (PostgreSQL in production)."""
from datetime import datetime, timezone
from typing import Optional

from agricart.domain.account import Account
from agricart.infrastructure.database.models import AccountModel


def _to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now(timezone.utc)


def _to_domain(row: AccountModel) -> Account:
    return Account(
        name=row.name,
        email=row.email,
        user_type=row.type,
        password_hash=row.password_hash,
        member_id=row.member_id,
        active=row.active,
        account_id=row.id,
        created_at=row.created_at.isoformat() if row.created_at else None,
        last_login_at=row.last_login_at.isoformat() if row.last_login_at else None,
    )


class SqlAccountRepository:
    """Account persistence via SQLAlchemy sessions."""

    def __init__(self, session_factory):
        self._sf = session_factory

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, account: Account) -> None:
        """Insert or update an account record."""
        data = account.to_dict()
        with self._sf() as session:
            row = session.get(AccountModel, data["id"])
            if row is None:
                row = AccountModel(id=data["id"], created_at=_to_datetime(data["created_at"]))
                session.add(row)
            row.name = data["name"]
            row.email = data["email"]
            row.member_id = data["member_id"]
            row.type = data["user_type"]
            row.password_hash = data["password_hash"]
            row.active = data["active"]
            session.commit()

    def update_last_login(self, account_id: str) -> None:
        with self._sf() as session:
            row = session.get(AccountModel, account_id)
            if row:
                row.last_login_at = datetime.now(timezone.utc)
                session.commit()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def find_by_email(self, email: str) -> Optional[Account]:
        target = email.lower().strip()
        with self._sf() as session:
            row = session.query(AccountModel).filter(AccountModel.email == target).first()
            return _to_domain(row) if row else None

    def find_by_member_id(self, member_id: str) -> Optional[Account]:
        with self._sf() as session:
            row = (
                session.query(AccountModel)
                .filter(AccountModel.member_id == member_id.strip())
                .first()
            )
            return _to_domain(row) if row else None

    def find_by_id(self, account_id: str) -> Optional[Account]:
        with self._sf() as session:
            row = session.get(AccountModel, account_id)
            return _to_domain(row) if row else None
