"""Factory for creating market data clients."""

from __future__ import annotations

import logging

from ..config import Settings
from .interface import MarketDataClient

logger = logging.getLogger(__name__)


def create_market_data_client(settings: Settings | None = None) -> MarketDataClient:
    """Create the appropriate market data client based on settings.

    - MARKET_DATA_SOURCE=simulator -> SimulatedMarketClient (GBM simulation)
    - anything else               -> CoinbaseMarketClient (real data)
    """
    settings = settings or Settings.from_env()

    if settings.market_data_source == "simulator":
        from .simulator import SimulatedMarketClient

        logger.info("Market data source: GBM Simulator")
        return SimulatedMarketClient()

    from .coinbase_client import CoinbaseMarketClient

    logger.info("Market data source: Coinbase (%s)", settings.coinbase_base_url)
    return CoinbaseMarketClient(
        base_url=settings.coinbase_base_url,
        timeout=settings.upstream_timeout_seconds,
    )
