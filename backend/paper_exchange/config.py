"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Settings:
    """Application configuration.

    Every field maps to an environment variable of the same name in upper case;
    see from_env(). Unset variables fall back to the defaults below.
    """

    market_data_source: str = "coinbase"  # "coinbase" or "simulator"
    coinbase_base_url: str = "https://api.exchange.coinbase.com"
    upstream_timeout_seconds: float = 5.0
    quote_fresh_seconds: float = 5.0
    quote_stale_seconds: float | None = None  # Defaults to 2x the fresh window
    broadcast_interval_seconds: float = 5.0
    broadcast_symbol: str = "BTC-USD"
    starting_balance: Decimal = Decimal("1000")
    log_level: str = "INFO"

    @property
    def effective_stale_seconds(self) -> float:
        if self.quote_stale_seconds is None:
            return 2 * self.quote_fresh_seconds
        return self.quote_stale_seconds

    @classmethod
    def from_env(cls) -> Settings:
        env = os.environ

        def _get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        defaults = cls()
        stale = _get("QUOTE_STALE_SECONDS")
        return cls(
            market_data_source=(_get("MARKET_DATA_SOURCE") or defaults.market_data_source).lower(),
            coinbase_base_url=_get("COINBASE_BASE_URL") or defaults.coinbase_base_url,
            upstream_timeout_seconds=float(
                _get("UPSTREAM_TIMEOUT_SECONDS") or defaults.upstream_timeout_seconds
            ),
            quote_fresh_seconds=float(_get("QUOTE_FRESH_SECONDS") or defaults.quote_fresh_seconds),
            quote_stale_seconds=float(stale) if stale else None,
            broadcast_interval_seconds=float(
                _get("BROADCAST_INTERVAL_SECONDS") or defaults.broadcast_interval_seconds
            ),
            broadcast_symbol=_get("BROADCAST_SYMBOL") or defaults.broadcast_symbol,
            starting_balance=Decimal(_get("STARTING_BALANCE") or defaults.starting_balance),
            log_level=_get("LOG_LEVEL") or defaults.log_level,
        )
