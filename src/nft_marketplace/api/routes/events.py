"""Recent marketplace events (best-effort history, not authoritative state)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from nft_marketplace.api.deps import get_marketplace
from nft_marketplace.schemas.marketplace import MarketplaceEventResponse
from nft_marketplace.services.marketplace_service import MarketplaceService

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


@router.get(
    "",
    response_model=list[MarketplaceEventResponse],
    summary="Get recent events",
)
async def get_events(
    limit: int = Query(default=50, ge=1, le=1000),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> list[MarketplaceEventResponse]:
    events = marketplace.notifier.recent(limit)
    return [MarketplaceEventResponse(**e.to_dict()) for e in events]
