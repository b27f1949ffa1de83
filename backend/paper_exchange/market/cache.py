"""Time-bounded quote cache with stale-but-available fallback."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from functools import partial
from threading import Lock

from ..exceptions import QuoteUnavailable, UpstreamUnavailable
from .interface import MarketDataClient, normalize_symbol
from .models import CacheEntry, Currency, ExchangeRates, Quote

logger = logging.getLogger(__name__)

HEALTH_CHECK_SYMBOL = "BTC-USD"


class QuoteCache:
    """Cache of the latest quote per symbol in front of a MarketDataClient.

    Readers: order desk, quote endpoints, broadcast scheduler.
    Writers: successful upstream refreshes only. Entries are replaced
    wholesale, so concurrent refreshes of one symbol are last-writer-wins.

    Lookup policy:
      - entry younger than `fresh_window` -> served without a network call
      - otherwise refresh from upstream; on failure an entry younger than
        `stale_bound` is served instead, else QuoteUnavailable
      - non-positive upstream prices count as failures and are never cached

    Concurrent misses for the same symbol share a single upstream request.
    """

    def __init__(
        self,
        client: MarketDataClient,
        fresh_window: float = 5.0,
        stale_bound: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if stale_bound is None:
            stale_bound = 2 * fresh_window
        if fresh_window <= 0:
            raise ValueError("fresh_window must be positive")
        if stale_bound < fresh_window:
            raise ValueError("stale_bound must not be shorter than fresh_window")

        self._client = client
        self._fresh_window = fresh_window
        self._stale_bound = stale_bound
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._inflight: dict[str, asyncio.Task[Quote]] = {}

    @property
    def fresh_window(self) -> float:
        return self._fresh_window

    @property
    def stale_bound(self) -> float:
        return self._stale_bound

    async def get_quote(self, symbol: str) -> Quote:
        """Return a current quote for a symbol, refreshing from upstream as needed.

        Raises QuoteUnavailable when upstream fails and no entry is recent
        enough to fall back on.
        """
        symbol = normalize_symbol(symbol)
        entry = self._get_entry(symbol)
        if entry is not None and entry.age(self._clock()) < self._fresh_window:
            return entry.quote

        try:
            return await self._fetch_shared(symbol)
        except UpstreamUnavailable as e:
            return self._fallback(symbol, e)

    async def get_multiple(self, symbols: list[str]) -> list[Quote]:
        """Quotes for several symbols in input order. Unavailable symbols are omitted."""
        results = await asyncio.gather(*(self._get_or_none(s) for s in symbols))
        return [quote for quote in results if quote is not None]

    async def list_supported_symbols(self) -> list[str]:
        return await self._client.list_supported_symbols()

    async def list_currencies(self) -> list[Currency]:
        return await self._client.list_currencies()

    async def get_exchange_rates(self) -> ExchangeRates:
        return await self._client.get_exchange_rates()

    async def health_check(self) -> bool:
        """True when a quote for the reference symbol can be served."""
        try:
            await self.get_quote(HEALTH_CHECK_SYMBOL)
        except QuoteUnavailable:
            return False
        return True

    def is_stale(self, quote: Quote) -> bool:
        """Whether a quote is older than the fresh window (served from fallback)."""
        return self._clock() - quote.fetched_at >= self._fresh_window

    def get_cached(self, symbol: str) -> Quote | None:
        """Cached quote regardless of age, without touching upstream."""
        entry = self._get_entry(normalize_symbol(symbol))
        return entry.quote if entry else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return normalize_symbol(symbol) in self._entries

    # --- Internal ---

    async def _get_or_none(self, symbol: str) -> Quote | None:
        try:
            return await self.get_quote(symbol)
        except QuoteUnavailable:
            return None

    async def _fetch_shared(self, symbol: str) -> Quote:
        """Join the in-flight refresh for this symbol, or start one."""
        task = self._inflight.get(symbol)
        if task is None:
            task = asyncio.create_task(self._refresh(symbol), name=f"quote-refresh-{symbol}")
            self._inflight[symbol] = task
            task.add_done_callback(partial(self._clear_inflight, symbol))
        # A cancelled caller must not cancel the fetch other callers are awaiting
        return await asyncio.shield(task)

    async def _refresh(self, symbol: str) -> Quote:
        quote = await self._client.fetch_quote(symbol)
        if quote.price <= 0:
            logger.warning("Rejecting non-positive price %s for %s", quote.price, symbol)
            raise UpstreamUnavailable(symbol, f"non-positive price {quote.price}")

        with self._lock:
            self._entries[symbol] = CacheEntry(quote=quote, inserted_at=self._clock())
        return quote

    def _clear_inflight(self, symbol: str, task: asyncio.Task[Quote]) -> None:
        if self._inflight.get(symbol) is task:
            del self._inflight[symbol]
        if not task.cancelled():
            task.exception()  # Mark retrieved even if every waiter was cancelled

    def _fallback(self, symbol: str, error: UpstreamUnavailable) -> Quote:
        entry = self._get_entry(symbol)
        if entry is not None:
            age = entry.age(self._clock())
            if age < self._stale_bound:
                logger.warning("Serving stale quote for %s (%.1fs old): %s", symbol, age, error)
                return entry.quote
        logger.error("No usable quote for %s: %s", symbol, error)
        raise QuoteUnavailable(symbol) from error

    def _get_entry(self, symbol: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(symbol)
