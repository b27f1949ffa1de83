"""Abstract interface for market data clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from .models import Currency, ExchangeRates, Quote

FALLBACK_SYMBOLS: list[str] = ["BTC-USD", "ETH-USD", "SOL-USD", "ADA-USD", "DOT-USD"]

FALLBACK_CURRENCIES: tuple[Currency, ...] = (
    Currency("BTC", "Bitcoin", "0.00000001"),
    Currency("ETH", "Ethereum", "0.00000001"),
    Currency("USDT", "Tether", "0.01"),
    Currency("USDC", "USD Coin", "0.01"),
    Currency("BNB", "BNB", "0.00000001"),
    Currency("XRP", "XRP", "0.01"),
    Currency("ADA", "Cardano", "0.01"),
    Currency("SOL", "Solana", "0.00000001"),
    Currency("DOT", "Polkadot", "0.01"),
    Currency("DOGE", "Dogecoin", "0.01"),
)

# USD price of one unit of each currency
FALLBACK_USD_RATES: dict[str, str] = {
    "BTC": "60000.00",
    "ETH": "3000.00",
    "USDT": "1.00",
    "USDC": "1.00",
    "BNB": "500.00",
    "XRP": "0.50",
    "ADA": "0.50",
    "SOL": "100.00",
    "DOT": "10.00",
    "DOGE": "0.10",
}


def normalize_symbol(symbol: str) -> str:
    """Canonical form of a trading pair: 'btc-usd ' -> 'BTC-USD'."""
    return symbol.upper().strip()


def fallback_exchange_rates() -> ExchangeRates:
    return ExchangeRates(
        currency="USD",
        rates={code: Decimal(rate) for code, rate in FALLBACK_USD_RATES.items()},
    )


class MarketDataClient(ABC):
    """Contract for upstream market data providers.

    A client performs exactly one upstream call per request and never retries.
    Caching, fallback and retry policy belong to the caller (QuoteCache).

    Lifecycle:
        client = create_market_data_client(settings)
        quote = await client.fetch_quote("BTC-USD")
        # ... app runs ...
        await client.aclose()
    """

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> Quote:
        """Fetch a fresh quote for a single symbol.

        Raises UpstreamUnavailable on network error, non-2xx response, an
        unknown symbol or a malformed payload. Never returns a
        partially-parsed Quote.
        """

    @abstractmethod
    async def list_supported_symbols(self) -> list[str]:
        """Best-effort list of tradable symbols.

        Never raises: on failure, returns FALLBACK_SYMBOLS.
        """

    @abstractmethod
    async def list_currencies(self) -> list[Currency]:
        """Best-effort list of base currencies, one entry per currency code.

        Never raises: on failure, returns FALLBACK_CURRENCIES.
        """

    @abstractmethod
    async def get_exchange_rates(self) -> ExchangeRates:
        """Best-effort USD exchange rates.

        Never raises: on failure, returns fallback_exchange_rates().
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call multiple times."""
