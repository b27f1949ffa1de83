"""Periodic broadcast of the canonical symbol's price."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from ..exceptions import QuoteUnavailable
from .broker import Publisher
from .cache import QuoteCache
from .interface import normalize_symbol

logger = logging.getLogger(__name__)

PRICE_TOPIC = "priceUpdate"
ERROR_PRICE = 0.0  # Sentinel carried by error messages; never a tradable price
FETCH_ERROR = "Failed to fetch price"


class BroadcastScheduler:
    """Publishes the canonical symbol's quote every `interval` seconds.

    Message shape on PRICE_TOPIC:
        {"symbol": "BTC-USD", "price": 60123.45, "timestamp": 1707580800.0}
    and, when no quote could be obtained:
        {"symbol": "BTC-USD", "price": 0.0, "timestamp": ..., "error": "Failed to fetch price"}

    Ticks run one after another in a single task, so they never overlap.
    A tick that runs past its slot causes the missed slots to be skipped
    rather than fired back-to-back.
    """

    def __init__(
        self,
        quote_cache: QuoteCache,
        publisher: Publisher,
        symbol: str = "BTC-USD",
        interval: float = 5.0,
        topic: str = PRICE_TOPIC,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = quote_cache
        self._publisher = publisher
        self._symbol = normalize_symbol(symbol)
        self._interval = interval
        self._topic = topic
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Publish one message right away, then keep publishing on the interval."""
        if self.running:
            logger.warning("Broadcast scheduler already running")
            return

        try:
            await self.tick()
        except Exception:
            logger.exception("Initial broadcast tick failed")
        self._task = asyncio.create_task(self._run_loop(), name="price-broadcaster")
        logger.info(
            "Price broadcaster started: %s every %.1fs on %s",
            self._symbol,
            self._interval,
            self._topic,
        )

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Price broadcaster stopped")

    async def tick(self) -> dict[str, Any]:
        """Fetch and publish once. Returns the published payload."""
        try:
            quote = await self._cache.get_quote(self._symbol)
        except QuoteUnavailable as e:
            logger.error("Broadcast fetch for %s failed: %s", self._symbol, e)
            payload = self._error_payload()
        except Exception:
            logger.exception("Unexpected error fetching %s for broadcast", self._symbol)
            payload = self._error_payload()
        else:
            payload = {
                "symbol": quote.symbol,
                "price": float(quote.price),
                "timestamp": self._clock(),
            }

        delivered = self._publisher.publish(self._topic, payload)
        logger.debug("Broadcast %s to %d subscriber(s)", payload, delivered)
        return payload

    # --- Internal ---

    def _error_payload(self) -> dict[str, Any]:
        return {
            "symbol": self._symbol,
            "price": ERROR_PRICE,
            "timestamp": self._clock(),
            "error": FETCH_ERROR,
        }

    async def _run_loop(self) -> None:
        """Tick on a fixed schedule. The first tick already happened in start()."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            try:
                await self.tick()
            except Exception:
                logger.exception("Broadcast tick failed")

            next_tick += self._interval
            now = loop.time()
            if next_tick <= now:
                skipped = int((now - next_tick) // self._interval) + 1
                next_tick += skipped * self._interval
                logger.warning("Broadcast tick overran, skipping %d slot(s)", skipped)
