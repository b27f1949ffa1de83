"""Coinbase Exchange public REST client for real market data."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from ..exceptions import UpstreamUnavailable
from .interface import (
    FALLBACK_CURRENCIES,
    FALLBACK_SYMBOLS,
    MarketDataClient,
    fallback_exchange_rates,
    normalize_symbol,
)
from .models import Currency, ExchangeRates, Quote

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.exchange.coinbase.com"
USER_AGENT = "PaperExchange/1.0"
MAX_SYMBOLS = 20


class CoinbaseMarketClient(MarketDataClient):
    """MarketDataClient backed by the Coinbase Exchange public API.

    Uses GET /products/{symbol}/ticker for quotes, GET /products for the
    symbol and currency lists and GET /exchange-rates/rates for USD rates.
    All endpoints are public, so no credentials are needed.

    Every request is bounded by `timeout` seconds (connect, read and write);
    a timeout surfaces as UpstreamUnavailable like any other network error.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def fetch_quote(self, symbol: str) -> Quote:
        symbol = normalize_symbol(symbol)
        try:
            response = await self._client.get(f"/products/{symbol}/ticker")
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL: the symbol cannot form a request path (control characters, length)
            logger.error("Coinbase ticker request for %s failed: %s", symbol, e)
            raise UpstreamUnavailable(symbol, str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error("Coinbase ticker for %s returned invalid JSON: %s", symbol, e)
            raise UpstreamUnavailable(symbol, "invalid JSON payload") from e

        price = _parse_price(symbol, payload)
        return Quote(symbol=symbol, price=price, fetched_at=self._clock())

    async def list_supported_symbols(self) -> list[str]:
        try:
            response = await self._client.get("/products")
            response.raise_for_status()
            products = response.json()
            symbols = [
                normalize_symbol(product["id"])
                for product in products
                if product.get("quote_currency") == "USD"
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Falling back to default symbols, product list failed: %s", e)
            return list(FALLBACK_SYMBOLS)

        if not symbols:
            logger.warning("Coinbase returned no USD products, using default symbols")
            return list(FALLBACK_SYMBOLS)
        return symbols[:MAX_SYMBOLS]

    async def list_currencies(self) -> list[Currency]:
        try:
            response = await self._client.get("/products")
            response.raise_for_status()
            products = response.json()
            currencies: dict[str, Currency] = {}
            for product in products:
                code = product["id"].split("-")[0].upper()
                if code not in currencies:
                    currencies[code] = Currency(
                        id=code,
                        name=product.get("base_currency_name") or code,
                        min_size=product.get("base_min_size"),
                    )
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Falling back to default currencies, product list failed: %s", e)
            return list(FALLBACK_CURRENCIES)

        if not currencies:
            logger.warning("Coinbase returned no products, using default currencies")
            return list(FALLBACK_CURRENCIES)
        return list(currencies.values())

    async def get_exchange_rates(self) -> ExchangeRates:
        try:
            response = await self._client.get("/exchange-rates/rates", params={"currency": "USD"})
            response.raise_for_status()
            payload = response.json()
            rates = _parse_rates(payload["rates"])
            currency = str(payload.get("currency") or "USD")
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Falling back to default exchange rates: %s", e)
            return fallback_exchange_rates()

        if not rates:
            logger.warning("Coinbase returned no usable exchange rates, using defaults")
            return fallback_exchange_rates()
        return ExchangeRates(currency=currency, rates=rates)

    async def aclose(self) -> None:
        await self._client.aclose()


def _parse_price(symbol: str, payload: Any) -> Decimal:
    """Extract the ticker price as a Decimal. Sign is not checked here."""
    if not isinstance(payload, dict) or "price" not in payload:
        raise UpstreamUnavailable(symbol, "ticker payload has no price")

    raw = payload["price"]
    # bool is an int subclass; a JSON true is not a price
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise UpstreamUnavailable(symbol, f"unexpected price type {type(raw).__name__}")
    try:
        price = Decimal(str(raw))
    except InvalidOperation as e:
        raise UpstreamUnavailable(symbol, f"unparseable price {raw!r}") from e
    if not price.is_finite():
        raise UpstreamUnavailable(symbol, f"non-finite price {raw!r}")
    return price


def _parse_rates(raw: Any) -> dict[str, Decimal]:
    """Rates by currency code. Entries that are not finite positive numbers are skipped."""
    rates: dict[str, Decimal] = {}
    for code, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        try:
            rate = Decimal(str(value))
        except InvalidOperation:
            continue
        if rate.is_finite() and rate > 0:
            rates[str(code).upper()] = rate
    return rates
