"""Tests for the SSE event generator."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from paper_exchange.market.broadcast import PRICE_TOPIC
from paper_exchange.market.broker import PriceBroker
from paper_exchange.market.stream import _generate_events, create_stream_router


class FakeRequest:
    """Request stand-in that reports a disconnect after `connected_checks` polls."""

    def __init__(self, connected_checks: int) -> None:
        self.client = SimpleNamespace(host="127.0.0.1")
        self._remaining = connected_checks

    async def is_disconnected(self) -> bool:
        if self._remaining <= 0:
            return True
        self._remaining -= 1
        return False


@pytest.mark.asyncio
class TestGenerateEvents:
    """Unit tests for SSE formatting and subscription lifecycle."""

    async def test_retry_directive_first(self):
        broker = PriceBroker()
        events = _generate_events(broker, FakeRequest(connected_checks=0))
        assert await events.__anext__() == "retry: 1000\n\n"
        await events.aclose()

    async def test_relays_published_payload(self):
        broker = PriceBroker()
        events = _generate_events(broker, FakeRequest(connected_checks=1))
        await events.__anext__()  # retry directive; subscribes on next step

        async def next_event():
            return await events.__anext__()

        payload = {"symbol": "BTC-USD", "price": 60000.0, "timestamp": 1.0}
        task = asyncio.create_task(next_event())
        await asyncio.sleep(0)
        broker.publish(PRICE_TOPIC, payload)
        event = await task

        assert event == f"data: {json.dumps(payload)}\n\n"
        await events.aclose()
        assert broker.subscriber_count(PRICE_TOPIC) == 0

    async def test_keepalive_on_silence(self):
        broker = PriceBroker()
        events = _generate_events(broker, FakeRequest(connected_checks=1), keepalive=0.01)
        await events.__anext__()
        assert await events.__anext__() == ": keepalive\n\n"
        await events.aclose()

    async def test_unsubscribes_on_disconnect(self):
        broker = PriceBroker()
        events = _generate_events(broker, FakeRequest(connected_checks=0))
        received = [event async for event in events]

        assert received == ["retry: 1000\n\n"]
        assert broker.subscriber_count(PRICE_TOPIC) == 0


class TestStreamRouter:
    def test_router_exposes_prices_route(self):
        router = create_stream_router(PriceBroker())
        assert "/api/stream/prices" in [route.path for route in router.routes]
