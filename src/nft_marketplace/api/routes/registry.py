"""Simulated asset registry routes, mounted only when collaborators are simulated.

Routes:
    POST   /api/v1/registry/assets                                      — Mint to the caller
    GET    /api/v1/registry/assets/{collection_id}/{asset_id}           — Ownership record
    POST   /api/v1/registry/assets/{collection_id}/{asset_id}/approve   — Approve the marketplace
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from nft_marketplace.api.deps import get_app_settings, get_principal, get_simulated_registry
from nft_marketplace.config import Settings
from nft_marketplace.schemas.marketplace import AssetResponse, MintAssetRequest
from nft_marketplace.services.asset_registry import InMemoryAssetRegistry, RegistryError

router = APIRouter(prefix="/api/v1/registry/assets", tags=["Simulated registry"])


async def _asset_response(
    registry: InMemoryAssetRegistry, collection_id: str, asset_id: int
) -> AssetResponse:
    return AssetResponse(
        collection_id=collection_id,
        asset_id=asset_id,
        owner=await registry.owner_of(collection_id, asset_id),
        approved=await registry.get_approved(collection_id, asset_id),
    )


@router.post("", response_model=AssetResponse, status_code=201, summary="Mint an asset")
async def mint_asset(
    request: MintAssetRequest,
    caller: str = Depends(get_principal),
    registry: InMemoryAssetRegistry = Depends(get_simulated_registry),
) -> AssetResponse:
    try:
        registry.mint(request.collection_id, request.asset_id, caller)
    except RegistryError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return await _asset_response(registry, request.collection_id, request.asset_id)


@router.get(
    "/{collection_id}/{asset_id}",
    response_model=AssetResponse,
    summary="Get an ownership record",
)
async def get_asset(
    collection_id: str,
    asset_id: int,
    registry: InMemoryAssetRegistry = Depends(get_simulated_registry),
) -> AssetResponse:
    return await _asset_response(registry, collection_id, asset_id)


@router.post(
    "/{collection_id}/{asset_id}/approve",
    response_model=AssetResponse,
    summary="Approve the marketplace to move an asset",
)
async def approve_marketplace(
    collection_id: str,
    asset_id: int,
    caller: str = Depends(get_principal),
    registry: InMemoryAssetRegistry = Depends(get_simulated_registry),
    settings: Settings = Depends(get_app_settings),
) -> AssetResponse:
    try:
        registry.approve(collection_id, asset_id, caller, settings.marketplace_operator)
    except RegistryError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    return await _asset_response(registry, collection_id, asset_id)
