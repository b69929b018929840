"""Marketplace Service — listing/escrow state machine and proceeds ledger.

This is the application layer that coordinates between:
    - Access guard and precondition checks (domain/guards.py)
    - Listing state machine (transition guard)
    - Repositories (listing registry and proceeds ledger)
    - External collaborators (asset registry, payment gateway)
    - Event notifier (broadcast after commit)

Every public method is one atomic unit of work run under the shared
ReentrancyGuard. Mutating methods follow the same order: read-only checks,
then ledger/registry writes, then the single external call, then the event.
Both REST routes and the simulation script call into this service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nft_marketplace.domain.enums import EventType
from nft_marketplace.domain.exceptions import AssetTransferError, WithdrawCallError
from nft_marketplace.domain.guards import (
    check_approved,
    check_has_proceeds,
    check_owner,
    check_price_met,
    check_price_positive,
    check_proceeds_capacity,
    raise_if,
)
from nft_marketplace.domain.models import Listing, MarketplaceEvent
from nft_marketplace.domain.state_machine import check_transition
from nft_marketplace.infrastructure.database.repositories import (
    ListingRepository,
    ProceedsRepository,
)
from nft_marketplace.logging_config import get_logger
from nft_marketplace.services.event_notifier import EventNotifier
from nft_marketplace.services.reentrancy_guard import ReentrancyGuard

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from nft_marketplace.domain.collaborators import AssetRegistry, PaymentGateway

logger = get_logger(__name__)


class MarketplaceService:
    """Lists, sells, updates and cancels assets; pays out seller proceeds."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        asset_registry: AssetRegistry,
        payments: PaymentGateway,
        operator: str,
        notifier: EventNotifier | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            session_factory: Factory for the sessions backing the two tables.
            asset_registry: Ownership authority; also performs sale transfers.
            payments: Gateway used to release withdrawn proceeds.
            operator: This service's identity as seen by the asset registry.
            notifier: Receives one event per successful mutating operation.
        """
        self._registry = asset_registry
        self._payments = payments
        self._operator = operator
        self._notifier = notifier or EventNotifier()
        self._guard = ReentrancyGuard(session_factory, self._notifier)

    @property
    def notifier(self) -> EventNotifier:
        return self._notifier

    @property
    def guard(self) -> ReentrancyGuard:
        return self._guard

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_item(
        self, caller: str, collection_id: str, asset_id: int, price: int
    ) -> Listing:
        """Offer an asset the caller owns for sale at ``price``."""
        async with self._guard.operation("list_item") as op:
            listings = ListingRepository(op.session)
            current = await listings.get(collection_id, asset_id)

            raise_if(check_transition(current, "list_item", collection_id, asset_id))
            raise_if(await check_owner(self._registry, collection_id, asset_id, caller))
            raise_if(check_price_positive(price))
            raise_if(
                await check_approved(self._registry, collection_id, asset_id, self._operator)
            )

            op.begin_effects()
            listing = await listings.add(
                Listing(
                    collection_id=collection_id,
                    asset_id=asset_id,
                    price=price,
                    seller=caller,
                )
            )
            op.emit(
                MarketplaceEvent(EventType.ITEM_LISTED, caller, collection_id, asset_id, price)
            )

        logger.info(
            "listing.created",
            collection_id=collection_id,
            asset_id=asset_id,
            price=price,
            seller=caller,
        )
        return listing

    async def update_listing(
        self, caller: str, collection_id: str, asset_id: int, new_price: int
    ) -> Listing:
        """Replace the price of an active listing. The seller is unchanged."""
        async with self._guard.operation("update_listing") as op:
            listings = ListingRepository(op.session)
            current = await listings.get(collection_id, asset_id)

            raise_if(check_transition(current, "update_listing", collection_id, asset_id))
            raise_if(await check_owner(self._registry, collection_id, asset_id, caller))
            raise_if(check_price_positive(new_price))

            op.begin_effects()
            listing = await listings.update_price(collection_id, asset_id, new_price)
            op.emit(
                MarketplaceEvent(
                    EventType.UPDATED_LISTING, caller, collection_id, asset_id, new_price
                )
            )

        logger.info(
            "listing.updated",
            collection_id=collection_id,
            asset_id=asset_id,
            old_price=current.price,
            new_price=new_price,
        )
        return listing

    async def cancel_listing(self, caller: str, collection_id: str, asset_id: int) -> Listing:
        """Withdraw an active listing. Returns the listing that was removed.

        Ownership is checked against the registry now, not against the recorded
        seller: if the asset moved outside the marketplace, only its new owner
        can cancel.
        """
        async with self._guard.operation("cancel_listing") as op:
            listings = ListingRepository(op.session)
            current = await listings.get(collection_id, asset_id)

            raise_if(check_transition(current, "cancel_listing", collection_id, asset_id))
            raise_if(await check_owner(self._registry, collection_id, asset_id, caller))

            op.begin_effects()
            await listings.remove(collection_id, asset_id)
            op.emit(
                MarketplaceEvent(
                    EventType.ITEM_CANCELLED, caller, collection_id, asset_id, current.price
                )
            )

        logger.info("listing.cancelled", collection_id=collection_id, asset_id=asset_id)
        return current

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    async def buy_item(
        self, buyer: str, collection_id: str, asset_id: int, payment_amount: int
    ) -> Listing:
        """Buy a listed asset. Returns the listing that was sold.

        The seller is credited and the listing removed before the registry is
        asked to move the asset, so a callback from the registry sees the sale
        as already settled. Payment above the price is kept by the service and
        credited to no one.
        """
        async with self._guard.operation("buy_item") as op:
            listings = ListingRepository(op.session)
            proceeds = ProceedsRepository(op.session)
            listing = await listings.get(collection_id, asset_id)

            raise_if(check_transition(listing, "buy_item", collection_id, asset_id))
            raise_if(check_price_met(listing, payment_amount))
            balance = await proceeds.get_balance(listing.seller)
            raise_if(check_proceeds_capacity(listing.seller, balance, listing.price))

            op.begin_effects()
            await proceeds.credit(listing.seller, listing.price)
            await listings.remove(collection_id, asset_id)

            try:
                await op.call_external(
                    self._registry.transfer,
                    collection_id,
                    asset_id,
                    listing.seller,
                    buyer,
                    self._operator,
                )
            except Exception as exc:
                logger.error(
                    "listing.transfer_failed",
                    collection_id=collection_id,
                    asset_id=asset_id,
                    error=str(exc),
                )
                raise AssetTransferError(collection_id, asset_id, listing.seller, buyer) from exc

            op.emit(
                MarketplaceEvent(
                    EventType.ITEM_BOUGHT, buyer, collection_id, asset_id, listing.price
                )
            )

        if payment_amount > listing.price:
            logger.warning(
                "listing.overpayment_retained",
                collection_id=collection_id,
                asset_id=asset_id,
                surplus=payment_amount - listing.price,
            )
        logger.info(
            "listing.bought",
            collection_id=collection_id,
            asset_id=asset_id,
            price=listing.price,
            buyer=buyer,
            seller=listing.seller,
        )
        return listing

    # ------------------------------------------------------------------
    # Proceeds
    # ------------------------------------------------------------------

    async def withdraw_proceeds(self, caller: str) -> int:
        """Pay the caller's whole balance out. Returns the amount paid.

        The balance is zeroed before the payment gateway is called; a payout
        failure rolls the zeroing back.
        """
        async with self._guard.operation("withdraw_proceeds") as op:
            proceeds = ProceedsRepository(op.session)
            amount = await proceeds.get_balance(caller)

            raise_if(check_has_proceeds(caller, amount))

            op.begin_effects()
            await proceeds.zero(caller)

            try:
                sent = await op.call_external(self._payments.send, caller, amount)
            except Exception as exc:
                logger.error("proceeds.payout_failed", seller=caller, amount=amount, error=str(exc))
                raise WithdrawCallError(caller, amount) from exc
            if not sent:
                logger.error("proceeds.payout_failed", seller=caller, amount=amount)
                raise WithdrawCallError(caller, amount)

        logger.info("proceeds.withdrawn", seller=caller, amount=amount)
        return amount

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def get_listing(self, collection_id: str, asset_id: int) -> Listing | None:
        """Return the active listing for a key, or None when it is not listed."""
        async with self._guard.operation("get_listing") as op:
            return await ListingRepository(op.session).get(collection_id, asset_id)

    async def get_listings(self, seller: str | None = None) -> list[Listing]:
        """Return every active listing, optionally for one seller."""
        async with self._guard.operation("get_listings") as op:
            return await ListingRepository(op.session).get_all(seller=seller)

    async def get_proceeds(self, seller: str) -> int:
        """Return a seller's withdrawable balance."""
        async with self._guard.operation("get_proceeds") as op:
            return await ProceedsRepository(op.session).get_balance(seller)

    async def get_total_proceeds(self) -> int:
        """Return the sum of all outstanding balances."""
        async with self._guard.operation("get_total_proceeds") as op:
            return await ProceedsRepository(op.session).total()
