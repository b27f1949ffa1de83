"""FastAPI application factory wiring the market data and wallet components."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .exceptions import (
    AccountNotFound,
    AppError,
    InsufficientBalance,
    InvalidOrder,
    QuoteUnavailable,
    Unauthenticated,
    UpstreamUnavailable,
)
from .market.broadcast import BroadcastScheduler
from .market.broker import PriceBroker
from .market.cache import QuoteCache
from .market.factory import create_market_data_client
from .market.interface import MarketDataClient
from .market.router import create_market_router
from .market.stream import create_stream_router
from .wallet.auth import TokenRegistry
from .wallet.ledger import BalanceLedger
from .wallet.order_desk import OrderDesk
from .wallet.router import create_wallet_router
from .wallet.store import InMemoryAccountStore

logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[AppError], int]] = [
    (InvalidOrder, 400),
    (InsufficientBalance, 400),
    (Unauthenticated, 401),
    (AccountNotFound, 404),
    (QuoteUnavailable, 503),
    (UpstreamUnavailable, 503),
]


def status_for(error: AppError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"code": exc.code, "message": exc.message},
    )


def create_app(
    settings: Settings | None = None,
    client: MarketDataClient | None = None,
) -> FastAPI:
    """Build the application.

    The broadcaster starts with the app and stops on shutdown, after which
    the market data client is closed. Components are exposed on app.state
    for the registration layer (ledger.open_account, auth.issue).
    """
    settings = settings or Settings.from_env()
    client = client or create_market_data_client(settings)

    quote_cache = QuoteCache(
        client,
        fresh_window=settings.quote_fresh_seconds,
        stale_bound=settings.effective_stale_seconds,
    )
    broker = PriceBroker()
    scheduler = BroadcastScheduler(
        quote_cache,
        broker,
        symbol=settings.broadcast_symbol,
        interval=settings.broadcast_interval_seconds,
    )
    ledger = BalanceLedger(InMemoryAccountStore(), starting_balance=settings.starting_balance)
    auth = TokenRegistry()
    desk = OrderDesk(quote_cache, ledger)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            await client.aclose()
            logger.info("Market data client closed")

    app = FastAPI(title="Paper Exchange", lifespan=lifespan)
    app.state.settings = settings
    app.state.quote_cache = quote_cache
    app.state.broker = broker
    app.state.scheduler = scheduler
    app.state.ledger = ledger
    app.state.auth = auth
    app.state.order_desk = desk

    app.add_exception_handler(AppError, _handle_app_error)
    app.include_router(create_market_router(quote_cache))
    app.include_router(create_wallet_router(desk, ledger, auth))
    app.include_router(create_stream_router(broker))
    return app
