"""GBM-based market simulator for offline development."""

from __future__ import annotations

import logging
import math
import random
import time
from collections.abc import Callable
from decimal import Decimal

import numpy as np

from ..exceptions import UpstreamUnavailable
from .interface import FALLBACK_CURRENCIES, MarketDataClient, normalize_symbol
from .models import Currency, ExchangeRates, Quote
from .seed_prices import (
    CRYPTO_CORR,
    DEFAULT_PARAMS,
    SEED_PRICES,
    STABLE_CORR,
    STABLECOINS,
    SYMBOL_PARAMS,
)

logger = logging.getLogger(__name__)


class GBMSimulator:
    """Geometric Brownian Motion simulator for correlated crypto prices.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where:
        S(t)   = current price
        mu     = annualized drift (expected return)
        sigma  = annualized volatility
        dt     = time step as fraction of a year
        Z      = correlated standard normal random variable

    Crypto trades around the clock, so a year is 365 * 24h. The default step
    corresponds to one 5-second quote refresh.
    """

    SECONDS_PER_YEAR = 365 * 24 * 3600  # 31,536,000
    DEFAULT_DT = 5.0 / SECONDS_PER_YEAR  # ~1.59e-7

    def __init__(
        self,
        symbols: list[str],
        dt: float = DEFAULT_DT,
        seed: int | None = None,
    ) -> None:
        self._dt = dt
        self._rng = np.random.default_rng(seed)

        # Per-symbol state
        self._symbols: list[str] = []
        self._prices: dict[str, float] = {}
        self._params: dict[str, dict[str, float]] = {}

        # Cholesky decomposition of the correlation matrix (for correlated moves)
        self._cholesky: np.ndarray | None = None

        for symbol in symbols:
            self._add_symbol_internal(symbol)
        self._rebuild_cholesky()

    # --- Public API ---

    def step(self) -> dict[str, float]:
        """Advance all symbols by one time step. Returns {symbol: new_price}."""
        n = len(self._symbols)
        if n == 0:
            return {}

        z_independent = self._rng.standard_normal(n)
        if self._cholesky is not None:
            z_correlated = self._cholesky @ z_independent
        else:
            z_correlated = z_independent

        result: dict[str, float] = {}
        for i, symbol in enumerate(self._symbols):
            params = self._params[symbol]
            mu = params["mu"]
            sigma = params["sigma"]

            drift = (mu - 0.5 * sigma**2) * self._dt
            diffusion = sigma * math.sqrt(self._dt) * z_correlated[i]
            self._prices[symbol] *= math.exp(drift + diffusion)
            result[symbol] = self._prices[symbol]

        return result

    def add_symbol(self, symbol: str) -> None:
        """Add a symbol to the simulation. Rebuilds the correlation matrix."""
        if symbol in self._prices:
            return
        self._add_symbol_internal(symbol)
        self._rebuild_cholesky()

    def get_price(self, symbol: str) -> float | None:
        """Current price for a symbol, or None if not tracked."""
        return self._prices.get(symbol)

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    # --- Internals ---

    def _add_symbol_internal(self, symbol: str) -> None:
        if symbol in self._prices:
            return
        self._symbols.append(symbol)
        self._prices[symbol] = SEED_PRICES.get(symbol, float(self._rng.uniform(1.0, 100.0)))
        self._params[symbol] = SYMBOL_PARAMS.get(symbol, dict(DEFAULT_PARAMS))

    def _rebuild_cholesky(self) -> None:
        n = len(self._symbols)
        if n <= 1:
            self._cholesky = None
            return

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = self._pairwise_correlation(self._symbols[i], self._symbols[j])
                corr[i, j] = rho
                corr[j, i] = rho

        self._cholesky = np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(s1: str, s2: str) -> float:
        if s1 in STABLECOINS or s2 in STABLECOINS:
            return STABLE_CORR
        return CRYPTO_CORR


class SimulatedMarketClient(MarketDataClient):
    """MarketDataClient backed by the GBM simulator.

    Every fetch advances the simulation by one step, so repeated fetches see
    the price drift. Only the configured symbols are simulated; any other
    symbol fails like an unknown Coinbase product.

    `failure_rate` makes a fraction of fetches raise UpstreamUnavailable,
    which is handy for watching the cache fallback without a real outage.
    """

    def __init__(
        self,
        symbols: list[str] | None = None,
        failure_rate: float = 0.0,
        seed: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        symbols = [normalize_symbol(s) for s in (symbols or SEED_PRICES)]
        self._sim = GBMSimulator(symbols=symbols, seed=seed)
        self._failure_rate = failure_rate
        self._random = random.Random(seed)
        self._clock = clock

    async def fetch_quote(self, symbol: str) -> Quote:
        symbol = normalize_symbol(symbol)
        if self._sim.get_price(symbol) is None:
            raise UpstreamUnavailable(symbol, "unknown product")
        if self._failure_rate and self._random.random() < self._failure_rate:
            logger.debug("Simulated upstream failure for %s", symbol)
            raise UpstreamUnavailable(symbol, "simulated outage")

        prices = self._sim.step()
        return Quote(symbol=symbol, price=_to_decimal(prices[symbol]), fetched_at=self._clock())

    async def list_supported_symbols(self) -> list[str]:
        return self._sim.symbols

    async def list_currencies(self) -> list[Currency]:
        known = {currency.id: currency for currency in FALLBACK_CURRENCIES}
        currencies: dict[str, Currency] = {}
        for symbol in self._sim.symbols:
            code = symbol.split("-")[0]
            currencies.setdefault(code, known.get(code, Currency(id=code, name=code)))
        return list(currencies.values())

    async def get_exchange_rates(self) -> ExchangeRates:
        """Current simulated USD price per unit of each base currency."""
        rates = {}
        for symbol in self._sim.symbols:
            code, _, quote_currency = symbol.partition("-")
            if quote_currency == "USD":
                rates[code] = _to_decimal(self._sim.get_price(symbol))
        return ExchangeRates(currency="USD", rates=rates)


def _to_decimal(price: float) -> Decimal:
    """Ten significant digits keeps sub-cent coins moving without float noise."""
    return Decimal(f"{price:.10g}")
