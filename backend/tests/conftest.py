"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest

from paper_exchange.exceptions import UpstreamUnavailable
from paper_exchange.market.interface import (
    FALLBACK_CURRENCIES,
    FALLBACK_SYMBOLS,
    MarketDataClient,
    fallback_exchange_rates,
    normalize_symbol,
)
from paper_exchange.market.models import Currency, ExchangeRates, Quote


class FakeClock:
    """Manually advanced clock, callable like time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMarketClient(MarketDataClient):
    """Scriptable MarketDataClient that counts upstream calls."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.prices: dict[str, Decimal] = {"BTC-USD": Decimal("60000"), "ETH-USD": Decimal("3000")}
        self.fail = False
        self.calls = 0
        self.closed = False

    async def fetch_quote(self, symbol: str) -> Quote:
        symbol = normalize_symbol(symbol)
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable(symbol, "upstream down")
        if symbol not in self.prices:
            raise UpstreamUnavailable(symbol, "unknown product")
        return Quote(symbol=symbol, price=Decimal(self.prices[symbol]), fetched_at=self.clock())

    async def list_supported_symbols(self) -> list[str]:
        if self.fail:
            return list(FALLBACK_SYMBOLS)
        return sorted(self.prices)

    async def list_currencies(self) -> list[Currency]:
        if self.fail:
            return list(FALLBACK_CURRENCIES)
        return [Currency(id=s.split("-")[0], name=s.split("-")[0]) for s in sorted(self.prices)]

    async def get_exchange_rates(self) -> ExchangeRates:
        if self.fail:
            return fallback_exchange_rates()
        return ExchangeRates(
            currency="USD",
            rates={s.split("-")[0]: Decimal(p) for s, p in self.prices.items()},
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client(clock: FakeClock) -> FakeMarketClient:
    return FakeMarketClient(clock)
