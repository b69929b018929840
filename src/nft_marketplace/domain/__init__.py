"""Domain layer — pure business logic with zero framework dependencies."""

from nft_marketplace.domain.collaborators import AssetRegistry, PaymentGateway
from nft_marketplace.domain.enums import (
    ErrorCategory,
    EventType,
    ListingStatus,
)
from nft_marketplace.domain.exceptions import (
    AlreadyListedError,
    AssetTransferError,
    MarketplaceError,
    NoProceedsError,
    NotApprovedForMarketplaceError,
    NotListedError,
    NotOwnerError,
    PriceMustBeAboveZeroError,
    PriceNotMetError,
    ProceedsOverflowError,
    ReentrancyError,
    WithdrawCallError,
)
from nft_marketplace.domain.models import Listing, MarketplaceEvent
from nft_marketplace.domain.state_machine import (
    ListingStateMachine,
    check_transition,
)

__all__ = [
    "AssetRegistry",
    "PaymentGateway",
    "ErrorCategory",
    "EventType",
    "ListingStatus",
    "AlreadyListedError",
    "AssetTransferError",
    "MarketplaceError",
    "NoProceedsError",
    "NotApprovedForMarketplaceError",
    "NotListedError",
    "NotOwnerError",
    "PriceMustBeAboveZeroError",
    "PriceNotMetError",
    "ProceedsOverflowError",
    "ReentrancyError",
    "WithdrawCallError",
    "Listing",
    "MarketplaceEvent",
    "ListingStateMachine",
    "check_transition",
]
