"""Data models for market data."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Quote:
    """Immutable price observation for a symbol at a point in time."""

    symbol: str
    price: Decimal
    fetched_at: float = field(default_factory=time.time)  # Unix seconds

    def to_dict(self) -> dict:
        """Serialize for JSON transmission. Prices travel as strings to keep precision."""
        return {
            "symbol": self.symbol,
            "price": str(self.price),
            "fetched_at": self.fetched_at,
        }


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached quote and the moment it was stored. Replaced wholesale, never mutated."""

    quote: Quote
    inserted_at: float

    def age(self, now: float) -> float:
        return now - self.inserted_at


@dataclass(frozen=True, slots=True)
class Currency:
    """A tradable base currency, e.g. BTC."""

    id: str
    name: str
    min_size: str | None = None  # Smallest order size, as published upstream

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "min_size": self.min_size}


@dataclass(frozen=True, slots=True)
class ExchangeRates:
    """Rates quoted against a base currency, keyed by currency code."""

    currency: str
    rates: dict[str, Decimal]

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "rates": {code: str(rate) for code, rate in self.rates.items()},
        }
