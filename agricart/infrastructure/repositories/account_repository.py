"""Account persistence (JSON file + in-memory cache)."""
import json
import os
from typing import Dict, Optional

from agricart.domain.account import Account


class AccountRepository:
    """JSON-backed account storage for development and tests."""

    def __init__(self, data_path: str = "data/accounts.json"):
        self._data_path = data_path
        self._accounts: Dict[str, Account] = {}
        self._load()

    def save(self, account: Account) -> None:
        """Persist account to file."""
        self._accounts[account.id] = account
        self._persist()

    def find_by_email(self, email: str) -> Optional[Account]:
        """Lookup by email (case-insensitive)."""
        target = email.lower().strip()
        for account in self._accounts.values():
            if account.email == target:
                return account
        return None

    def find_by_member_id(self, member_id: str) -> Optional[Account]:
        target = member_id.strip()
        for account in self._accounts.values():
            if account.member_id == target:
                return account
        return None

    def find_by_id(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def update_last_login(self, account_id: str) -> None:
        account = self._accounts.get(account_id)
        if account:
            account.mark_logged_in()
            self._persist()

    def _persist(self) -> None:
        """Write all accounts to JSON file."""
        directory = os.path.dirname(self._data_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        data = {aid: account.to_dict() for aid, account in self._accounts.items()}
        with open(self._data_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _load(self) -> None:
        """Load accounts from JSON file."""
        if not os.path.exists(self._data_path):
            return
        with open(self._data_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        for aid, data in raw.items():
            data.setdefault("id", aid)
            self._accounts[aid] = Account.from_dict(data)
