"""Event Notifier — best-effort broadcast of marketplace state changes.

Events are not authoritative state. Each one is kept in a bounded in-memory
history, handed to in-process subscribers and, when a Redis client is
configured, published as JSON on a Redis channel. A failing subscriber or an
unreachable Redis is logged and never fails the operation that produced the
event.
"""

from __future__ import annotations

import inspect
import json
from collections import deque
from typing import TYPE_CHECKING, Any

from nft_marketplace.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    import redis.asyncio as aioredis

    from nft_marketplace.domain.models import MarketplaceEvent

logger = get_logger(__name__)


class EventNotifier:
    """Fan-out of MarketplaceEvents to history, subscribers and Redis."""

    def __init__(
        self,
        redis: aioredis.Redis | None = None,
        channel: str = "marketplace:events",
        history_size: int = 256,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._history: deque[MarketplaceEvent] = deque(maxlen=history_size)
        self._subscribers: list[Callable[[MarketplaceEvent], Any]] = []

    def subscribe(self, callback: Callable[[MarketplaceEvent], Any]) -> None:
        """Register a sync or async callable invoked for every event."""
        self._subscribers.append(callback)

    async def publish(self, event: MarketplaceEvent) -> None:
        self._history.append(event)
        logger.info(
            "event.emitted",
            event_type=event.event_type.value,
            actor=event.actor,
            collection_id=event.collection_id,
            asset_id=event.asset_id,
            price=event.price,
        )

        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "event.subscriber_failed",
                    event_type=event.event_type.value,
                    error=str(exc),
                )

        if self._redis is not None:
            try:
                await self._redis.publish(self._channel, json.dumps(event.to_dict()))
            except Exception as exc:
                logger.warning("event.broadcast_failed", channel=self._channel, error=str(exc))

    def recent(self, limit: int = 50) -> list[MarketplaceEvent]:
        """Return up to ``limit`` most recent events, oldest first."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]
