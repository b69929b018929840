"""Shared test fixtures for the NFT marketplace test suite.

Provides:
    - An in-memory SQLite database per test (aiosqlite, shared connection)
    - The in-process asset registry and simulated payment gateway
    - A MarketplaceService wired to all of the above
    - A factory that mints an asset and approves the marketplace for it
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
import pytest_asyncio

from nft_marketplace.infrastructure.database.engine import (
    build_engine,
    create_tables,
    make_session_factory,
)
from nft_marketplace.services.asset_registry import InMemoryAssetRegistry
from nft_marketplace.services.event_notifier import EventNotifier
from nft_marketplace.services.marketplace_service import MarketplaceService
from nft_marketplace.services.payment_service import SimulatedPaymentGateway

OPERATOR = "0x" + "A" * 40
COLLECTION = "0x" + "C" * 40
SELLER = "0x" + "5" * 40
BUYER = "0x" + "B" * 40
STRANGER = "0x" + "7" * 40


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


# ---------------------------------------------------------------------------
# Collaborator Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registry() -> InMemoryAssetRegistry:
    return InMemoryAssetRegistry()


@pytest.fixture
def payments() -> SimulatedPaymentGateway:
    return SimulatedPaymentGateway()


@pytest.fixture
def notifier() -> EventNotifier:
    return EventNotifier()


@pytest.fixture
def marketplace(session_factory, registry, payments, notifier) -> MarketplaceService:
    return MarketplaceService(
        session_factory=session_factory,
        asset_registry=registry,
        payments=payments,
        operator=OPERATOR,
        notifier=notifier,
    )


@pytest.fixture
def approved_asset(registry: InMemoryAssetRegistry) -> Callable[..., int]:
    """Return a factory: mint ``asset_id`` to ``owner`` and approve the marketplace."""

    def _make(asset_id: int, owner: str = SELLER, approve: bool = True) -> int:
        registry.mint(COLLECTION, asset_id, owner)
        if approve:
            registry.approve(COLLECTION, asset_id, owner, OPERATOR)
        return asset_id

    return _make
