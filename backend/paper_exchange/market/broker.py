"""In-process publish/subscribe transport for broadcast events."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Anything that can push a payload to a topic. Delivery is best-effort."""

    def publish(self, topic: str, payload: dict[str, Any]) -> int:
        """Publish a payload. Returns the number of subscribers it reached."""
        ...


class Subscription:
    """A subscriber's bounded inbox on one topic.

    Usable as an async iterator and as an async context manager that
    unsubscribes on exit:

        async with broker.subscribe("priceUpdate") as sub:
            async for payload in sub:
                ...
    """

    def __init__(self, broker: PriceBroker, topic: str, maxsize: int) -> None:
        self.topic = topic
        self._broker = broker
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)

    async def get(self) -> dict[str, Any]:
        return await self._queue.get()

    def close(self) -> None:
        self._broker.unsubscribe(self)

    def _offer(self, payload: dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> dict[str, Any]:
        return await self.get()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class PriceBroker:
    """Fan-out of published payloads to every subscriber of a topic.

    At-most-once: a subscriber whose queue is full misses the message,
    the publisher is never blocked by a slow reader.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic, self._queue_size)
        self._subscribers[topic].append(subscription)
        logger.debug("Subscriber added to %s (%d total)", topic, len(self._subscribers[topic]))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. No-op if it is already gone."""
        subscribers = self._subscribers.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def publish(self, topic: str, payload: dict[str, Any]) -> int:
        delivered = 0
        for subscription in list(self._subscribers.get(topic, [])):
            if subscription._offer(payload):
                delivered += 1
            else:
                logger.warning("Dropping %s message for a slow subscriber", topic)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))
