"""Listing REST API routes.

Routes:
    POST   /api/v1/listings                                 — listItem
    GET    /api/v1/listings                                 — Browse active listings
    GET    /api/v1/listings/{collection_id}/{asset_id}      — getListing
    PATCH  /api/v1/listings/{collection_id}/{asset_id}      — updateListing
    DELETE /api/v1/listings/{collection_id}/{asset_id}      — cancelListing
    POST   /api/v1/listings/{collection_id}/{asset_id}/buy  — buyItem

The caller is taken from the X-Principal-Id header.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nft_marketplace.api.deps import get_marketplace, get_principal
from nft_marketplace.schemas.marketplace import (
    BuyItemRequest,
    ListingLookupResponse,
    ListingResponse,
    ListItemRequest,
    UpdateListingRequest,
)
from nft_marketplace.services.marketplace_service import MarketplaceService

router = APIRouter(prefix="/api/v1/listings", tags=["Listings"])


@router.post(
    "",
    response_model=ListingResponse,
    status_code=201,
    summary="List an asset for sale",
)
async def list_item(
    request: ListItemRequest,
    caller: str = Depends(get_principal),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ListingResponse:
    """Create a listing. The caller must own the asset and have approved the marketplace."""
    listing = await marketplace.list_item(
        caller=caller,
        collection_id=request.collection_id,
        asset_id=request.asset_id,
        price=request.price,
    )
    return ListingResponse.model_validate(listing)


@router.get(
    "",
    response_model=list[ListingResponse],
    summary="Browse active listings",
)
async def get_listings(
    seller: str | None = None,
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> list[ListingResponse]:
    """Return every active listing, optionally filtered by seller."""
    listings = await marketplace.get_listings(seller=seller)
    return [ListingResponse.model_validate(item) for item in listings]


@router.get(
    "/{collection_id}/{asset_id}",
    response_model=ListingLookupResponse,
    summary="Get the listing for an asset",
)
async def get_listing(
    collection_id: str,
    asset_id: int,
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ListingLookupResponse:
    """Return the current listing; an unlisted asset reports listed=false."""
    listing = await marketplace.get_listing(collection_id, asset_id)
    if listing is None:
        return ListingLookupResponse(
            collection_id=collection_id, asset_id=asset_id, listed=False
        )
    return ListingLookupResponse(
        collection_id=collection_id,
        asset_id=asset_id,
        listed=True,
        price=listing.price,
        seller=listing.seller,
    )


@router.patch(
    "/{collection_id}/{asset_id}",
    response_model=ListingResponse,
    summary="Change the price of a listing",
)
async def update_listing(
    collection_id: str,
    asset_id: int,
    request: UpdateListingRequest,
    caller: str = Depends(get_principal),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ListingResponse:
    listing = await marketplace.update_listing(
        caller=caller,
        collection_id=collection_id,
        asset_id=asset_id,
        new_price=request.new_price,
    )
    return ListingResponse.model_validate(listing)


@router.delete(
    "/{collection_id}/{asset_id}",
    response_model=ListingResponse,
    summary="Cancel a listing",
)
async def cancel_listing(
    collection_id: str,
    asset_id: int,
    caller: str = Depends(get_principal),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ListingResponse:
    """Remove a listing. Returns the listing as it was before removal."""
    listing = await marketplace.cancel_listing(
        caller=caller, collection_id=collection_id, asset_id=asset_id
    )
    return ListingResponse.model_validate(listing)


@router.post(
    "/{collection_id}/{asset_id}/buy",
    response_model=ListingResponse,
    summary="Buy a listed asset",
)
async def buy_item(
    collection_id: str,
    asset_id: int,
    request: BuyItemRequest,
    buyer: str = Depends(get_principal),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ListingResponse:
    """Buy an asset. Returns the listing that was sold."""
    listing = await marketplace.buy_item(
        buyer=buyer,
        collection_id=collection_id,
        asset_id=asset_id,
        payment_amount=request.payment_amount,
    )
    return ListingResponse.model_validate(listing)
