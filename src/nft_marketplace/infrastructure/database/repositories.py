"""Repository classes for database access.

Repositories encapsulate all SQL queries and provide a clean interface
to the service layer. They accept an AsyncSession and never manage
their own transactions (that's the caller's responsibility).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select

from nft_marketplace.domain.models import Listing
from nft_marketplace.infrastructure.database.orm_models import (
    ListingRecord,
    ProceedsRecord,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _to_listing(record: ListingRecord) -> Listing:
    return Listing(
        collection_id=record.collection_id,
        asset_id=record.asset_id,
        price=record.price,
        seller=record.seller,
    )


class ListingRepository:
    """Data access for the listing registry."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, collection_id: str, asset_id: int) -> Listing | None:
        """Fetch the active listing for a key, or None."""
        record = await self._get_record(collection_id, asset_id)
        return _to_listing(record) if record is not None else None

    async def get_all(self, seller: str | None = None) -> list[Listing]:
        """Fetch active listings, optionally for one seller."""
        stmt = select(ListingRecord).order_by(
            ListingRecord.collection_id, ListingRecord.asset_id
        )
        if seller is not None:
            stmt = stmt.where(ListingRecord.seller == seller)
        result = await self._session.execute(stmt)
        return [_to_listing(r) for r in result.scalars().all()]

    async def add(self, listing: Listing) -> Listing:
        """Insert a new listing (call AFTER the not-listed check)."""
        self._session.add(
            ListingRecord(
                collection_id=listing.collection_id,
                asset_id=listing.asset_id,
                price=listing.price,
                seller=listing.seller,
            )
        )
        await self._session.flush()
        return listing

    async def update_price(
        self, collection_id: str, asset_id: int, new_price: int
    ) -> Listing:
        """Replace the price of an existing listing; the seller is unchanged."""
        record = await self._get_record(collection_id, asset_id)
        if record is None:
            raise LookupError(f"No listing row for {collection_id}/{asset_id}")
        record.price = new_price
        await self._session.flush()
        return _to_listing(record)

    async def remove(self, collection_id: str, asset_id: int) -> None:
        """Delete the listing row for a key."""
        await self._session.execute(
            delete(ListingRecord).where(
                ListingRecord.collection_id == collection_id,
                ListingRecord.asset_id == asset_id,
            )
        )
        await self._session.flush()

    async def _get_record(self, collection_id: str, asset_id: int) -> ListingRecord | None:
        result = await self._session.execute(
            select(ListingRecord).where(
                ListingRecord.collection_id == collection_id,
                ListingRecord.asset_id == asset_id,
            )
        )
        return result.scalar_one_or_none()


class ProceedsRepository:
    """Data access for the proceeds ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_balance(self, seller: str) -> int:
        """Return the withdrawable balance of a seller (0 if never credited)."""
        result = await self._session.execute(
            select(ProceedsRecord.amount).where(ProceedsRecord.seller == seller)
        )
        amount = result.scalar_one_or_none()
        return amount or 0

    async def credit(self, seller: str, amount: int) -> int:
        """Add ``amount`` to a seller's balance and return the new balance."""
        result = await self._session.execute(
            select(ProceedsRecord).where(ProceedsRecord.seller == seller)
        )
        record = result.scalar_one_or_none()
        if record is None:
            record = ProceedsRecord(seller=seller, amount=amount)
            self._session.add(record)
        else:
            record.amount += amount
        await self._session.flush()
        return record.amount

    async def zero(self, seller: str) -> None:
        """Reset a seller's balance to 0."""
        result = await self._session.execute(
            select(ProceedsRecord).where(ProceedsRecord.seller == seller)
        )
        record = result.scalar_one_or_none()
        if record is not None:
            record.amount = 0
            await self._session.flush()

    async def total(self) -> int:
        """Sum of all outstanding balances."""
        result = await self._session.execute(
            select(func.coalesce(func.sum(ProceedsRecord.amount), 0))
        )
        return int(result.scalar_one())
