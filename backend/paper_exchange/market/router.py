"""REST endpoints for quotes, symbols, currencies and exchange rates."""

from __future__ import annotations

from fastapi import APIRouter, Query

from .cache import QuoteCache


def create_market_router(quote_cache: QuoteCache) -> APIRouter:
    """Create the market data router bound to a QuoteCache."""
    router = APIRouter(prefix="/api/market", tags=["market"])

    @router.get("/quotes/{symbol}")
    async def get_quote(symbol: str) -> dict:
        """Current quote. `stale` is true when served from the fallback window."""
        quote = await quote_cache.get_quote(symbol)
        return {**quote.to_dict(), "stale": quote_cache.is_stale(quote)}

    @router.get("/quotes")
    async def get_quotes(symbols: str = Query(..., description="Comma-separated symbols")) -> dict:
        """Quotes for several symbols; unavailable ones are left out."""
        requested = [s for s in symbols.split(",") if s.strip()]
        quotes = await quote_cache.get_multiple(requested)
        return {
            "quotes": [
                {**quote.to_dict(), "stale": quote_cache.is_stale(quote)} for quote in quotes
            ]
        }

    @router.get("/symbols")
    async def get_symbols() -> dict:
        return {"symbols": await quote_cache.list_supported_symbols()}

    @router.get("/currencies")
    async def get_currencies() -> dict:
        currencies = await quote_cache.list_currencies()
        return {"currencies": [currency.to_dict() for currency in currencies]}

    @router.get("/exchange-rates")
    async def get_exchange_rates() -> dict:
        """USD rates; a fixed table is served when upstream is unreachable."""
        return (await quote_cache.get_exchange_rates()).to_dict()

    @router.get("/health")
    async def health() -> dict:
        return {"healthy": await quote_cache.health_check()}

    return router
