"""FastAPI dependency injection providers.

These are used with Depends() in route handlers to inject the marketplace
service, the authenticated principal and configuration.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from nft_marketplace.config import Settings, get_settings
from nft_marketplace.services.asset_registry import InMemoryAssetRegistry
from nft_marketplace.services.marketplace_service import MarketplaceService


def get_marketplace(request: Request) -> MarketplaceService:
    """Provide the MarketplaceService built during application startup."""
    marketplace = getattr(request.app.state, "marketplace", None)
    if marketplace is None:
        raise HTTPException(status_code=503, detail="Marketplace not initialized")
    return marketplace


def get_principal(
    x_principal_id: str = Header(
        ...,
        min_length=1,
        max_length=66,
        description="Identifier of the already-authenticated caller",
    ),
) -> str:
    """Provide the identity of the caller."""
    return x_principal_id


def get_simulated_registry(request: Request) -> InMemoryAssetRegistry:
    """Provide the in-process asset registry (simulation mode only)."""
    registry = getattr(request.app.state, "asset_registry", None)
    if not isinstance(registry, InMemoryAssetRegistry):
        raise HTTPException(status_code=404, detail="Simulated registry not enabled")
    return registry


def get_app_settings() -> Settings:
    """Provide the application settings."""
    return get_settings()
