"""Tests for the EventNotifier broadcast layer."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from nft_marketplace.domain.enums import EventType
from nft_marketplace.domain.models import MarketplaceEvent
from nft_marketplace.services.event_notifier import EventNotifier
from tests.conftest import COLLECTION, SELLER


def _event(asset_id: int = 1, price: int = 100) -> MarketplaceEvent:
    return MarketplaceEvent(EventType.ITEM_LISTED, SELLER, COLLECTION, asset_id, price)


class TestHistory:
    @pytest.mark.asyncio
    async def test_recent_returns_oldest_first(self) -> None:
        notifier = EventNotifier()
        for asset_id in range(1, 4):
            await notifier.publish(_event(asset_id))

        assert [e.asset_id for e in notifier.recent()] == [1, 2, 3]
        assert [e.asset_id for e in notifier.recent(limit=2)] == [2, 3]

    @pytest.mark.asyncio
    async def test_non_positive_limit_is_empty(self) -> None:
        notifier = EventNotifier()
        await notifier.publish(_event())
        assert notifier.recent(limit=0) == []

    @pytest.mark.asyncio
    async def test_history_is_bounded(self) -> None:
        notifier = EventNotifier(history_size=2)
        for asset_id in range(1, 6):
            await notifier.publish(_event(asset_id))

        assert [e.asset_id for e in notifier.recent()] == [4, 5]


class TestSubscribers:
    @pytest.mark.asyncio
    async def test_sync_and_async_subscribers(self) -> None:
        notifier = EventNotifier()
        sync_seen: list[MarketplaceEvent] = []
        async_seen: list[MarketplaceEvent] = []

        async def _async_cb(event: MarketplaceEvent) -> None:
            async_seen.append(event)

        notifier.subscribe(sync_seen.append)
        notifier.subscribe(_async_cb)

        event = _event()
        await notifier.publish(event)

        assert sync_seen == [event]
        assert async_seen == [event]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_others(self) -> None:
        notifier = EventNotifier()
        seen: list[MarketplaceEvent] = []

        def _broken(event: MarketplaceEvent) -> None:
            raise RuntimeError("subscriber down")

        notifier.subscribe(_broken)
        notifier.subscribe(seen.append)

        await notifier.publish(_event())

        assert len(seen) == 1
        assert len(notifier.recent()) == 1


class TestRedisBroadcast:
    @pytest.mark.asyncio
    async def test_publishes_json_on_channel(self) -> None:
        redis = AsyncMock()
        notifier = EventNotifier(redis=redis, channel="test:events")

        await notifier.publish(_event(asset_id=7, price=42))

        redis.publish.assert_awaited_once()
        channel, payload = redis.publish.await_args.args
        assert channel == "test:events"
        body = json.loads(payload)
        assert body["event_type"] == "ItemListed"
        assert body["asset_id"] == 7
        assert body["price"] == 42
        assert body["actor"] == SELLER

    @pytest.mark.asyncio
    async def test_redis_failure_is_swallowed(self) -> None:
        redis = AsyncMock()
        redis.publish.side_effect = ConnectionError("redis unreachable")
        notifier = EventNotifier(redis=redis)

        await notifier.publish(_event())

        assert len(notifier.recent()) == 1
