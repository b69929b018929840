"""Access guard and precondition checks.

Each check is a small function that *returns* a typed failure (or None) so
operations can compose them explicitly, in order, at their top:

    raise_if(check_price_positive(price))
    raise_if(await check_owner(registry, collection_id, asset_id, caller))

Ownership and approval are delegated to the asset registry on every call.
Nothing is cached: an asset may change hands between listing and sale.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nft_marketplace.domain.exceptions import (
    MarketplaceError,
    NoProceedsError,
    NotApprovedForMarketplaceError,
    NotOwnerError,
    PriceMustBeAboveZeroError,
    PriceNotMetError,
    ProceedsOverflowError,
)
from nft_marketplace.domain.models import MAX_AMOUNT

if TYPE_CHECKING:
    from nft_marketplace.domain.collaborators import AssetRegistry
    from nft_marketplace.domain.models import Listing


# ---------------------------------------------------------------------------
# Access predicates
# ---------------------------------------------------------------------------


async def is_owner(
    registry: AssetRegistry, collection_id: str, asset_id: int, principal: str
) -> bool:
    owner = await registry.owner_of(collection_id, asset_id)
    return owner is not None and owner == principal


async def is_authorized_for_transfer(
    registry: AssetRegistry, collection_id: str, asset_id: int, operator: str
) -> bool:
    """True if the registry approves ``operator`` (this service) to move the asset."""
    approved = await registry.get_approved(collection_id, asset_id)
    return approved is not None and approved == operator


# ---------------------------------------------------------------------------
# Typed checks
# ---------------------------------------------------------------------------


async def check_owner(
    registry: AssetRegistry, collection_id: str, asset_id: int, principal: str
) -> NotOwnerError | None:
    if await is_owner(registry, collection_id, asset_id, principal):
        return None
    return NotOwnerError(collection_id, asset_id, principal)


async def check_approved(
    registry: AssetRegistry, collection_id: str, asset_id: int, operator: str
) -> NotApprovedForMarketplaceError | None:
    if await is_authorized_for_transfer(registry, collection_id, asset_id, operator):
        return None
    return NotApprovedForMarketplaceError(collection_id, asset_id)


def check_price_positive(price: int) -> PriceMustBeAboveZeroError | None:
    if price > 0:
        return None
    return PriceMustBeAboveZeroError(price)


def check_price_met(listing: Listing, payment_amount: int) -> PriceNotMetError | None:
    if payment_amount >= listing.price:
        return None
    return PriceNotMetError(
        listing.collection_id, listing.asset_id, listing.price, payment_amount
    )


def check_has_proceeds(seller: str, balance: int) -> NoProceedsError | None:
    if balance > 0:
        return None
    return NoProceedsError(seller)


def check_proceeds_capacity(
    seller: str, balance: int, amount: int
) -> ProceedsOverflowError | None:
    if balance + amount <= MAX_AMOUNT:
        return None
    return ProceedsOverflowError(seller, balance, amount)


def raise_if(failure: MarketplaceError | None) -> None:
    """Raise ``failure`` if a check produced one."""
    if failure is not None:
        raise failure
