"""SSE streaming endpoint for broadcast price updates."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .broadcast import PRICE_TOPIC
from .broker import PriceBroker

logger = logging.getLogger(__name__)


def create_stream_router(broker: PriceBroker) -> APIRouter:
    """Create the SSE streaming router with a reference to the broker.

    This factory pattern lets us inject the broker without globals.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/prices")
    async def stream_prices(request: Request) -> StreamingResponse:
        """SSE endpoint for broadcast price updates.

        Relays every message the BroadcastScheduler publishes. The client
        connects with EventSource and receives events in the format:

            data: {"symbol": "BTC-USD", "price": 60123.45, "timestamp": 1707580800.0}

        Includes a retry directive so the browser auto-reconnects on
        disconnection (EventSource built-in behavior).
        """
        return StreamingResponse(
            _generate_events(broker, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    broker: PriceBroker,
    request: Request,
    keepalive: float = 15.0,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted broadcast events.

    Waits for published messages; emits an SSE comment every `keepalive`
    seconds of silence so proxies keep the connection open. Stops when the
    client disconnects (detected via request.is_disconnected()).
    """
    # Tell the client to retry after 1 second if the connection drops
    yield "retry: 1000\n\n"

    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    subscription = broker.subscribe(PRICE_TOPIC)
    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            try:
                payload = await asyncio.wait_for(subscription.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue

            yield f"data: {json.dumps(payload)}\n\n"
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
    finally:
        subscription.close()
