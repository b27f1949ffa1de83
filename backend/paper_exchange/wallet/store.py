"""Account persistence protocol and in-memory implementation."""

from __future__ import annotations

from threading import Lock
from typing import Protocol

from ..exceptions import AccountExists, AccountNotFound
from .models import Account


class AccountStore(Protocol):
    """Key-value storage of Account snapshots by account id.

    Implementations must give read-after-write consistency: a get() after a
    replace() returns the replaced snapshot.
    """

    def get(self, account_id: str) -> Account | None:
        """Return the account snapshot, or None if unknown."""
        ...

    def add(self, account: Account) -> None:
        """Store a new account. Raises AccountExists if the id is taken."""
        ...

    def replace(self, account: Account) -> None:
        """Swap in a new snapshot for an existing account. Raises AccountNotFound."""
        ...


class InMemoryAccountStore:
    """Thread-safe dict-backed AccountStore."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._lock = Lock()

    def get(self, account_id: str) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def add(self, account: Account) -> None:
        with self._lock:
            if account.account_id in self._accounts:
                raise AccountExists(account.account_id)
            self._accounts[account.account_id] = account

    def replace(self, account: Account) -> None:
        with self._lock:
            if account.account_id not in self._accounts:
                raise AccountNotFound(account.account_id)
            self._accounts[account.account_id] = account

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
