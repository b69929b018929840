"""Domain value objects returned by the marketplace service.

These are immutable snapshots, detached from any database session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from nft_marketplace.domain.enums import EventType

# Largest amount storable in the BIGINT price and balance columns.
MAX_AMOUNT = 2**63 - 1


@dataclass(frozen=True)
class Listing:
    """An active sale offer for one asset at one price by one seller.

    Attributes:
        collection_id: Identifier of the asset collection (e.g. token contract).
        asset_id: Identifier of the asset inside its collection.
        price: Positive amount in the smallest currency unit.
        seller: Principal entitled to the proceeds of the sale.
    """

    collection_id: str
    asset_id: int
    price: int
    seller: str


@dataclass(frozen=True)
class MarketplaceEvent:
    """A broadcast record of one successful state-mutating operation."""

    event_type: EventType
    actor: str
    collection_id: str
    asset_id: int
    price: int
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Serialize for JSON broadcast."""
        return {
            "event_type": self.event_type.value,
            "actor": self.actor,
            "collection_id": self.collection_id,
            "asset_id": self.asset_id,
            "price": self.price,
            "occurred_at": self.occurred_at.isoformat(),
        }
