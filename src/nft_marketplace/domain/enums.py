"""Domain enumerations for the NFT marketplace.

These enums define the canonical states and event names used throughout the
system. They are framework-agnostic (no SQLAlchemy, no FastAPI imports).
"""

import enum


class ListingStatus(enum.StrEnum):
    """Lifecycle states of a (collection_id, asset_id) key.

    A key is LISTED iff a listing row with a positive price exists for it.
    Transitions are enforced by ListingStateMachine (domain/state_machine.py).
    """

    UNLISTED = "UNLISTED"
    LISTED = "LISTED"


class EventType(enum.StrEnum):
    """Events broadcast after a successful state-mutating operation.

    Every successful listItem, buyItem, cancelListing and updateListing
    produces exactly one event. Withdrawals are not broadcast.
    """

    ITEM_LISTED = "ItemListed"
    ITEM_BOUGHT = "ItemBought"
    ITEM_CANCELLED = "ItemCancelled"
    UPDATED_LISTING = "UpdatedListing"


class ErrorCategory(enum.StrEnum):
    """Taxonomy of marketplace failures, used by the API layer for status codes."""

    AUTHORIZATION = "authorization"
    STATE = "state"
    VALUE = "value"
    LEDGER = "ledger"
    COLLABORATOR = "collaborator"
    REENTRANCY = "reentrancy"
