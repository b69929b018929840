"""Domain exceptions for the NFT marketplace.

These exceptions are framework-agnostic and represent precondition violations.
None of them is transient: a failed operation has no partial effect and the
caller must correct its inputs and resubmit. They are translated to HTTP
responses by the API layer's middleware.
"""

from nft_marketplace.domain.enums import ErrorCategory


class MarketplaceError(Exception):
    """Base exception for all domain errors."""

    category: ErrorCategory | None = None

    def __init__(self, message: str, code: str = "MARKETPLACE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Authorization Errors ---


class AuthorizationError(MarketplaceError):
    """The caller (or this service) lacks the right to act on an asset."""

    category = ErrorCategory.AUTHORIZATION


class NotOwnerError(AuthorizationError):
    """Raised when the caller is not the asset's current owner."""

    def __init__(self, collection_id: str, asset_id: int, principal: str) -> None:
        super().__init__(
            message=f"{principal} does not own asset {collection_id}/{asset_id}",
            code="NOT_OWNER",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id
        self.principal = principal


class NotApprovedForMarketplaceError(AuthorizationError):
    """Raised when the registry has not authorized this service to move the asset."""

    def __init__(self, collection_id: str, asset_id: int) -> None:
        super().__init__(
            message=f"Marketplace is not approved to transfer asset {collection_id}/{asset_id}",
            code="NOT_APPROVED_FOR_MARKETPLACE",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id


# --- State Consistency Errors ---


class ListingStateError(MarketplaceError):
    """The listing registry is not in the state the operation requires."""

    category = ErrorCategory.STATE


class AlreadyListedError(ListingStateError):
    """Raised when listing an asset that already has an active listing."""

    def __init__(self, collection_id: str, asset_id: int) -> None:
        super().__init__(
            message=f"Asset already listed: {collection_id}/{asset_id}",
            code="ALREADY_LISTED",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id


class NotListedError(ListingStateError):
    """Raised when an operation needs an active listing and there is none."""

    def __init__(self, collection_id: str, asset_id: int) -> None:
        super().__init__(
            message=f"Asset not listed: {collection_id}/{asset_id}",
            code="NOT_LISTED",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id


# --- Value Errors ---


class PriceError(MarketplaceError):
    """A price or payment amount is unacceptable."""

    category = ErrorCategory.VALUE


class PriceMustBeAboveZeroError(PriceError):
    """Raised when a listing price is zero or negative."""

    def __init__(self, price: int) -> None:
        super().__init__(
            message=f"Price must be above zero, got {price}",
            code="PRICE_MUST_BE_ABOVE_ZERO",
        )
        self.price = price


class PriceNotMetError(PriceError):
    """Raised when a buyer offers less than the listed price."""

    def __init__(self, collection_id: str, asset_id: int, price: int, payment: int) -> None:
        super().__init__(
            message=(
                f"Price not met for {collection_id}/{asset_id}: "
                f"price {price}, payment {payment}, short by {price - payment}"
            ),
            code="PRICE_NOT_MET",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id
        self.price = price
        self.payment = payment

    @property
    def shortfall(self) -> int:
        return self.price - self.payment


# --- Ledger Errors ---


class LedgerError(MarketplaceError):
    """The proceeds ledger cannot satisfy the request."""

    category = ErrorCategory.LEDGER


class NoProceedsError(LedgerError):
    """Raised when withdrawing with a zero balance."""

    def __init__(self, seller: str) -> None:
        super().__init__(
            message=f"No proceeds to withdraw for {seller}",
            code="NO_PROCEEDS",
        )
        self.seller = seller


class ProceedsOverflowError(LedgerError):
    """Raised when crediting a sale would push a balance past the storable maximum."""

    def __init__(self, seller: str, balance: int, amount: int) -> None:
        super().__init__(
            message=f"Crediting {amount} to {seller} would overflow balance {balance}",
            code="PROCEEDS_OVERFLOW",
        )
        self.seller = seller
        self.balance = balance
        self.amount = amount


# --- External Collaborator Errors ---


class CollaboratorError(MarketplaceError):
    """An external collaborator reported failure; the operation was rolled back."""

    category = ErrorCategory.COLLABORATOR


class WithdrawCallError(CollaboratorError):
    """Raised when the payment gateway fails to pay out a withdrawal."""

    def __init__(self, seller: str, amount: int) -> None:
        super().__init__(
            message=f"Payout of {amount} to {seller} failed",
            code="WITHDRAW_CALL_ERROR",
        )
        self.seller = seller
        self.amount = amount


class AssetTransferError(CollaboratorError):
    """Raised when the asset registry rejects or fails a sale transfer."""

    def __init__(self, collection_id: str, asset_id: int, seller: str, buyer: str) -> None:
        super().__init__(
            message=(
                f"Transfer of {collection_id}/{asset_id} "
                f"from {seller} to {buyer} failed"
            ),
            code="ASSET_TRANSFER_ERROR",
        )
        self.collection_id = collection_id
        self.asset_id = asset_id
        self.seller = seller
        self.buyer = buyer


# --- Reentrancy Errors ---


class ReentrancyError(MarketplaceError):
    """Raised when a nested call tries to mutate state while an operation is in progress."""

    category = ErrorCategory.REENTRANCY

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"Reentrant call rejected: {operation}",
            code="REENTRANCY",
        )
        self.operation = operation
