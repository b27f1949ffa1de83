"""Balance ledger: the only writer of account balances."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any

from ..exceptions import AccountNotFound, InsufficientBalance, InvalidOrder
from .models import Account, Side, Transaction
from .store import AccountStore

logger = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = Decimal("1000")


class BalanceLedger:
    """Owns every account's balance and append-only transaction history.

    Orders on one account are serialized by a per-account asyncio.Lock held
    for the whole read-modify-write, so concurrent orders never lose
    updates. Orders on different accounts do not contend.

    The execution price is supplied by the caller; the ledger never talks
    to the market.
    """

    def __init__(
        self,
        store: AccountStore,
        starting_balance: Decimal = DEFAULT_STARTING_BALANCE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._starting_balance = starting_balance
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._ids = itertools.count(1)

    def open_account(self, account_id: str, starting_balance: Decimal | None = None) -> Account:
        """Create an account funded with the starting balance.

        Raises AccountExists if the id is already registered.
        """
        balance = self._starting_balance if starting_balance is None else starting_balance
        balance = parse_decimal("starting_balance", balance)
        if balance < 0:
            raise InvalidOrder("starting_balance must not be negative")

        account = Account(account_id=account_id, balance=balance)
        self._store.add(account)
        logger.info("Opened account %s with balance %s", account_id, balance)
        return account

    async def apply_order(
        self,
        account_id: str,
        asset: str,
        side: Side | str,
        amount: Any,
        price: Any,
    ) -> Transaction:
        """Execute an order against the account balance and record it.

        Raises:
            InvalidOrder: amount or price not positive, unknown side, empty asset
            AccountNotFound: no such account
            InsufficientBalance: a buy costs more than the balance

        None of the failures mutates the account.
        """
        side = parse_side(side)
        asset = parse_asset(asset)
        amount = parse_positive_decimal("amount", amount)
        price = parse_positive_decimal("price", price)
        total = amount * price

        self._load(account_id)
        async with self._lock_for(account_id):
            account = self._load(account_id)
            if side is Side.BUY:
                if account.balance < total:
                    raise InsufficientBalance(str(total), str(account.balance))
                new_balance = account.balance - total
            else:
                new_balance = account.balance + total

            transaction = Transaction(
                id=next(self._ids),
                asset=asset,
                side=side,
                amount=amount,
                price=price,
                total=total,
                balance_after=new_balance,
                timestamp=self._clock(),
            )
            self._store.replace(
                replace(
                    account,
                    balance=new_balance,
                    transactions=account.transactions + (transaction,),
                )
            )

        logger.info(
            "Account %s: %s %s %s @ %s -> balance %s",
            account_id,
            side.value,
            amount,
            asset,
            price,
            new_balance,
        )
        return transaction

    def get_history(self, account_id: str) -> tuple[Transaction, ...]:
        """All transactions of an account in execution order."""
        return self._load(account_id).transactions

    def get_balance(self, account_id: str) -> Decimal:
        return self._load(account_id).balance

    async def set_balance(self, account_id: str, amount: Any) -> Account:
        """Overwrite the balance without recording a transaction.

        Administrative path for initial trial funding only; order flow must
        go through apply_order.
        """
        amount = parse_decimal("amount", amount)
        if amount < 0:
            raise InvalidOrder("amount must not be negative")

        self._load(account_id)
        async with self._lock_for(account_id):
            account = replace(self._load(account_id), balance=amount)
            self._store.replace(account)

        logger.info("Account %s: balance set to %s", account_id, amount)
        return account

    # --- Internal ---

    def _load(self, account_id: str) -> Account:
        account = self._store.get(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    def _lock_for(self, account_id: str) -> asyncio.Lock:
        """Per-account lock. Only called for accounts that exist, so the map stays bounded."""
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks.setdefault(account_id, asyncio.Lock())
        return lock


def parse_side(side: Side | str) -> Side:
    """Accept a Side or exactly 'buy' / 'sell'."""
    if isinstance(side, Side):
        return side
    try:
        return Side(side)
    except ValueError:
        raise InvalidOrder(f"side must be 'buy' or 'sell', got {side!r}") from None


def parse_asset(asset: Any) -> str:
    if not isinstance(asset, str) or not asset.strip():
        raise InvalidOrder("asset is required")
    return asset.strip().upper()


def parse_decimal(name: str, value: Any) -> Decimal:
    """Convert to a finite Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise InvalidOrder(f"{name} must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidOrder(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidOrder(f"{name} must be finite")
    return result


def parse_positive_decimal(name: str, value: Any) -> Decimal:
    result = parse_decimal(name, value)
    if result <= 0:
        raise InvalidOrder(f"{name} must be greater than 0")
    return result
