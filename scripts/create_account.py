"""Create or update a portal account.

Writes to the SQL database when DATABASE_URL is set, otherwise to the JSON
accounts file (ACCOUNTS_FILE, default data/accounts.json). The password is
read from ACCOUNT_PASSWORD when --password is omitted.

    python scripts/create_account.py --email admin@agricart.test --type admin --name "Admin"
    python scripts/create_account.py --email farmer@agricart.test --type member --member-id M-0001 --name "Farmer"
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

from agricart.domain.account import Account
from agricart.domain.enums import UserType
from agricart.infrastructure.auth.password import hash_password


def _repository():
    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url:
        from agricart.infrastructure.database.connection import init_session_factory, resolve_database_url
        from agricart.infrastructure.repositories.sql_account_repository import SqlAccountRepository

        return SqlAccountRepository(init_session_factory(resolve_database_url(database_url)))

    from agricart.infrastructure.repositories.account_repository import AccountRepository

    default_path = os.path.join(os.path.dirname(__file__), "..", "data", "accounts.json")
    return AccountRepository(data_path=os.environ.get("ACCOUNTS_FILE", default_path))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--type", required=True, choices=[t.value for t in UserType])
    parser.add_argument("--member-id")
    parser.add_argument("--password", default=os.environ.get("ACCOUNT_PASSWORD", ""))
    parser.add_argument("--inactive", action="store_true")
    args = parser.parse_args(argv)

    if not args.password:
        print("ERROR: pass --password or set ACCOUNT_PASSWORD.")
        return 1
    if args.type == UserType.MEMBER.value and not args.member_id:
        print("ERROR: member accounts need --member-id.")
        return 1

    repo = _repository()
    existing = repo.find_by_email(args.email)
    account = Account(
        name=args.name,
        email=args.email,
        user_type=args.type,
        password_hash=hash_password(args.password),
        member_id=args.member_id,
        active=not args.inactive,
        account_id=existing.id if existing else None,
    )
    repo.save(account)
    verb = "Updated" if existing else "Created"
    print(f"{verb} {account.user_type.value} account {account.email} (id={account.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
