"""SQLAlchemy 2.0 ORM models for the NFT marketplace.

Two tables, and no other persisted state:
    1. listings  — active sale offers keyed by (collection_id, asset_id).
    2. proceeds  — per-seller withdrawable balances.

Design decisions:
    - Amounts are integers in the smallest currency unit (no rounding).
    - A listing row exists iff the key is listed; price 0 is never stored,
      enforced by a CHECK constraint.
    - Balances are zeroed in place on withdrawal, never negative.
    - Events are broadcast, not stored (see services/event_notifier.py).
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    String,
    event,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# ---------------------------------------------------------------------------
# Helper: auto-set updated_at on flush
# ---------------------------------------------------------------------------
def _set_updated_at(mapper, connection, target):  # noqa: ANN001
    """SQLAlchemy event listener that updates `updated_at` before flush."""
    if hasattr(target, "updated_at"):
        target.updated_at = datetime.now(UTC)


# ---------------------------------------------------------------------------
# 1. listings
# ---------------------------------------------------------------------------
class ListingRecord(Base):
    """An active listing of one asset at one price by one seller."""

    __tablename__ = "listings"

    # --- Composite Primary Key ---
    collection_id: Mapped[str] = mapped_column(
        String(66),
        primary_key=True,
        comment="Identifier of the asset collection (registry contract)",
    )
    asset_id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        comment="Identifier of the asset within its collection",
    )

    # --- Offer ---
    price: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Asking price in the smallest currency unit",
    )
    seller: Mapped[str] = mapped_column(
        String(66),
        nullable=False,
        comment="Principal credited with the proceeds and allowed to modify",
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # --- Table Constraints & Indexes ---
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_listing_positive_price"),
        Index("idx_listing_seller", "seller"),
    )

    def __repr__(self) -> str:
        return (
            f"<ListingRecord {self.collection_id}/{self.asset_id} "
            f"price={self.price} seller={self.seller}>"
        )


# ---------------------------------------------------------------------------
# 2. proceeds
# ---------------------------------------------------------------------------
class ProceedsRecord(Base):
    """Funds owed to a seller, held in custody until withdrawn."""

    __tablename__ = "proceeds"

    seller: Mapped[str] = mapped_column(
        String(66),
        primary_key=True,
    )
    amount: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        comment="Withdrawable balance in the smallest currency unit",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_proceeds_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ProceedsRecord seller={self.seller} amount={self.amount}>"


# ---------------------------------------------------------------------------
# Register the auto-update listeners for updated_at
# ---------------------------------------------------------------------------
event.listen(ListingRecord, "before_update", _set_updated_at)
event.listen(ProceedsRecord, "before_update", _set_updated_at)
