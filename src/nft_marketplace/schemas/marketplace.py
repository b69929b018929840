"""Pydantic schemas for the marketplace API.

These schemas define the request/response shapes for the REST API. They are
separate from the ORM models and the domain value objects to keep clean
boundaries between the API, service and database layers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from nft_marketplace.domain.models import MAX_AMOUNT

# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class ListItemRequest(BaseModel):
    """Request body for listing an asset for sale."""

    collection_id: str = Field(
        ...,
        min_length=1,
        max_length=66,
        description="Identifier of the asset collection (e.g. token contract address)",
        examples=["0x5FbDB2315678afecb367f032d93F642f64180aa3"],
    )
    asset_id: int = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        description="Identifier of the asset within its collection",
        examples=[7],
    )
    price: int = Field(
        ...,
        le=MAX_AMOUNT,
        description="Asking price in the smallest currency unit; must be above zero",
        examples=[100],
    )


class UpdateListingRequest(BaseModel):
    """Request body for changing the price of an active listing."""

    new_price: int = Field(
        ...,
        le=MAX_AMOUNT,
        description="Replacement price in the smallest currency unit; must be above zero",
    )


class BuyItemRequest(BaseModel):
    """Request body for buying a listed asset."""

    payment_amount: int = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        description="Funds sent with the purchase; any excess over the price is not refunded",
    )


class MintAssetRequest(BaseModel):
    """Request body for minting an asset in the simulated registry."""

    collection_id: str = Field(..., min_length=1, max_length=66)
    asset_id: int = Field(..., ge=0, le=MAX_AMOUNT)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Response schema for an active listing."""

    model_config = ConfigDict(from_attributes=True)

    collection_id: str
    asset_id: int
    price: int
    seller: str


class ListingLookupResponse(BaseModel):
    """Response schema for a listing lookup; absent keys report listed=false, price 0."""

    collection_id: str
    asset_id: int
    listed: bool
    price: int = 0
    seller: str | None = None


class ProceedsResponse(BaseModel):
    """Withdrawable balance of a seller."""

    seller: str
    balance: int


class WithdrawalResponse(BaseModel):
    """Outcome of a successful withdrawal."""

    seller: str
    amount: int


class MarketplaceEventResponse(BaseModel):
    """Response schema for a broadcast event."""

    event_type: str
    actor: str
    collection_id: str
    asset_id: int
    price: int
    occurred_at: datetime


class AssetResponse(BaseModel):
    """Ownership record in the simulated registry."""

    collection_id: str
    asset_id: int
    owner: str | None
    approved: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    database: str = "unknown"
    redis: str = "unknown"
    marketplace: str = "unknown"
