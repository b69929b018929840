"""Proceeds REST API routes.

Routes:
    GET    /api/v1/proceeds/{seller}   — getProceeds
    POST   /api/v1/proceeds/withdraw   — withdrawProceeds (caller's own balance)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nft_marketplace.api.deps import get_marketplace, get_principal
from nft_marketplace.schemas.marketplace import ProceedsResponse, WithdrawalResponse
from nft_marketplace.services.marketplace_service import MarketplaceService

router = APIRouter(prefix="/api/v1/proceeds", tags=["Proceeds"])


@router.post(
    "/withdraw",
    response_model=WithdrawalResponse,
    summary="Withdraw all proceeds of the caller",
)
async def withdraw_proceeds(
    caller: str = Depends(get_principal),
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> WithdrawalResponse:
    amount = await marketplace.withdraw_proceeds(caller)
    return WithdrawalResponse(seller=caller, amount=amount)


@router.get(
    "/{seller}",
    response_model=ProceedsResponse,
    summary="Get a seller's withdrawable balance",
)
async def get_proceeds(
    seller: str,
    marketplace: MarketplaceService = Depends(get_marketplace),
) -> ProceedsResponse:
    balance = await marketplace.get_proceeds(seller)
    return ProceedsResponse(seller=seller, balance=balance)
