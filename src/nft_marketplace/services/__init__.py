"""Application services — use case orchestration."""

from nft_marketplace.services.asset_registry import InMemoryAssetRegistry, RegistryError
from nft_marketplace.services.event_notifier import EventNotifier
from nft_marketplace.services.marketplace_service import MarketplaceService
from nft_marketplace.services.payment_service import Payout, SimulatedPaymentGateway
from nft_marketplace.services.reentrancy_guard import Operation, ReentrancyGuard

__all__ = [
    "EventNotifier",
    "InMemoryAssetRegistry",
    "MarketplaceService",
    "Operation",
    "Payout",
    "ReentrancyGuard",
    "RegistryError",
    "SimulatedPaymentGateway",
]
