"""Tests for PriceBroker."""

import asyncio

import pytest

from paper_exchange.market.broker import PriceBroker


@pytest.mark.asyncio
class TestPriceBroker:
    """Unit tests for the in-process publish/subscribe broker."""

    async def test_publish_reaches_all_subscribers(self):
        broker = PriceBroker()
        first = broker.subscribe("priceUpdate")
        second = broker.subscribe("priceUpdate")

        delivered = broker.publish("priceUpdate", {"price": 1.0})

        assert delivered == 2
        assert await first.get() == {"price": 1.0}
        assert await second.get() == {"price": 1.0}

    async def test_publish_without_subscribers(self):
        broker = PriceBroker()
        assert broker.publish("priceUpdate", {"price": 1.0}) == 0

    async def test_topics_are_isolated(self):
        broker = PriceBroker()
        prices = broker.subscribe("priceUpdate")
        broker.subscribe("chat")

        assert broker.publish("chat", {"text": "hi"}) == 1
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(prices.get(), timeout=0.01)

    async def test_full_queue_drops_message(self):
        """Test that a slow subscriber misses messages instead of blocking publishers."""
        broker = PriceBroker(queue_size=1)
        slow = broker.subscribe("priceUpdate")
        fast = broker.subscribe("priceUpdate")

        broker.publish("priceUpdate", {"seq": 1})
        await fast.get()
        delivered = broker.publish("priceUpdate", {"seq": 2})

        assert delivered == 1
        assert await slow.get() == {"seq": 1}
        assert await fast.get() == {"seq": 2}

    async def test_unsubscribe(self):
        broker = PriceBroker()
        subscription = broker.subscribe("priceUpdate")
        subscription.close()
        subscription.close()  # Should not raise

        assert broker.subscriber_count("priceUpdate") == 0
        assert broker.publish("priceUpdate", {"price": 1.0}) == 0

    async def test_context_manager_and_iteration(self):
        broker = PriceBroker()
        async with broker.subscribe("priceUpdate") as subscription:
            assert broker.subscriber_count("priceUpdate") == 1
            broker.publish("priceUpdate", {"seq": 1})
            broker.publish("priceUpdate", {"seq": 2})

            received = []
            async for payload in subscription:
                received.append(payload["seq"])
                if len(received) == 2:
                    break

        assert received == [1, 2]
        assert broker.subscriber_count("priceUpdate") == 0
