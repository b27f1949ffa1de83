"""Wallet domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class Side(str, Enum):
    """Order direction. Values match the wire format ('buy' / 'sell')."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True, slots=True)
class Transaction:
    """Immutable ledger entry for one executed order.

    `balance_after` is the account balance right after this entry was
    appended: the previous entry's balance_after minus `total` for a buy,
    plus `total` for a sell.
    """

    id: int
    asset: str
    side: Side
    amount: Decimal
    price: Decimal
    total: Decimal
    balance_after: Decimal
    timestamp: float  # Unix seconds

    def to_dict(self) -> dict:
        """Serialize for JSON transmission. Decimals travel as strings."""
        return {
            "id": self.id,
            "asset": self.asset,
            "type": self.side.value,
            "amount": str(self.amount),
            "price": str(self.price),
            "total": str(self.total),
            "balance_after": str(self.balance_after),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class Account:
    """Snapshot of an account: balance plus its full transaction history.

    Snapshots are never edited; the ledger replaces them wholesale, so a
    reader always sees a balance together with the entries that produced it.
    """

    account_id: str
    balance: Decimal
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
