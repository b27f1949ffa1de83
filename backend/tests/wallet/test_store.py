"""Tests for InMemoryAccountStore."""

from decimal import Decimal

import pytest

from paper_exchange.exceptions import AccountExists, AccountNotFound
from paper_exchange.wallet.models import Account
from paper_exchange.wallet.store import InMemoryAccountStore


class TestInMemoryAccountStore:
    """Unit tests for the dict-backed account store."""

    def test_add_and_get(self):
        store = InMemoryAccountStore()
        account = Account(account_id="alice", balance=Decimal("1000"))
        store.add(account)
        assert store.get("alice") is account
        assert len(store) == 1

    def test_get_unknown(self):
        assert InMemoryAccountStore().get("nobody") is None

    def test_add_duplicate(self):
        store = InMemoryAccountStore()
        store.add(Account(account_id="alice", balance=Decimal("1")))
        with pytest.raises(AccountExists):
            store.add(Account(account_id="alice", balance=Decimal("2")))
        assert store.get("alice").balance == Decimal("1")

    def test_replace_is_read_after_write(self):
        store = InMemoryAccountStore()
        store.add(Account(account_id="alice", balance=Decimal("1")))
        updated = Account(account_id="alice", balance=Decimal("2"))
        store.replace(updated)
        assert store.get("alice") is updated

    def test_replace_unknown(self):
        with pytest.raises(AccountNotFound):
            InMemoryAccountStore().replace(Account(account_id="ghost", balance=Decimal("0")))
