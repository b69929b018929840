"""Pydantic API schemas."""

from nft_marketplace.schemas.marketplace import (
    AssetResponse,
    BuyItemRequest,
    HealthResponse,
    ListingLookupResponse,
    ListingResponse,
    ListItemRequest,
    MarketplaceEventResponse,
    MintAssetRequest,
    ProceedsResponse,
    UpdateListingRequest,
    WithdrawalResponse,
)

__all__ = [
    "AssetResponse",
    "BuyItemRequest",
    "HealthResponse",
    "ListingLookupResponse",
    "ListingResponse",
    "ListItemRequest",
    "MarketplaceEventResponse",
    "MintAssetRequest",
    "ProceedsResponse",
    "UpdateListingRequest",
    "WithdrawalResponse",
]
