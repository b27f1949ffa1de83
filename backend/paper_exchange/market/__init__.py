"""Market data subsystem.

Public API:
    Quote                     - Immutable price observation
    Currency, ExchangeRates   - Reference data served alongside quotes
    QuoteCache                - Fresh/stale quote cache in front of a client
    MarketDataClient          - Abstract interface for upstream providers
    create_market_data_client - Factory that selects Coinbase or the simulator
    PriceBroker               - In-process publish/subscribe transport
    BroadcastScheduler        - Periodic price broadcast
    create_stream_router      - FastAPI router factory for the SSE endpoint
"""

from .broadcast import PRICE_TOPIC, BroadcastScheduler
from .broker import PriceBroker, Publisher
from .cache import QuoteCache
from .factory import create_market_data_client
from .interface import MarketDataClient
from .models import CacheEntry, Currency, ExchangeRates, Quote
from .stream import create_stream_router

__all__ = [
    "Quote",
    "CacheEntry",
    "Currency",
    "ExchangeRates",
    "QuoteCache",
    "MarketDataClient",
    "create_market_data_client",
    "PriceBroker",
    "Publisher",
    "BroadcastScheduler",
    "PRICE_TOPIC",
    "create_stream_router",
]
