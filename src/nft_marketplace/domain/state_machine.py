"""Listing State Machine Guard.

Uses python-statemachine to enforce legal listing transitions at the domain
level. A (collection_id, asset_id) key is either UNLISTED (no row, price 0) or
LISTED (a row with a positive price); there is no partial state in between.

Transition table:
    UNLISTED -> LISTED     (list_item)
    LISTED   -> LISTED     (update_listing)
    LISTED   -> UNLISTED   (buy_item)
    LISTED   -> UNLISTED   (cancel_listing)

A rejected transition is reported as the typed state-consistency failure the
caller should see: AlreadyListed when the key is LISTED, NotListed otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from nft_marketplace.domain.enums import ListingStatus
from nft_marketplace.domain.exceptions import (
    AlreadyListedError,
    ListingStateError,
    NotListedError,
)

if TYPE_CHECKING:
    from nft_marketplace.domain.models import Listing


class ListingStateMachine(StateMachine):
    """State machine that guards the lifecycle of a single listing key.

    Usage:
        sm = ListingStateMachine(current_status="UNLISTED")
        sm.list_item()   # transitions to LISTED
        sm.status        # "LISTED"
    """

    # --- States ---
    UNLISTED = State("UNLISTED", initial=True)
    LISTED = State("LISTED")

    # --- Events / Transitions ---
    list_item = UNLISTED.to(LISTED)
    update_listing = LISTED.to(LISTED)
    buy_item = LISTED.to(UNLISTED)
    cancel_listing = LISTED.to(UNLISTED)

    def __init__(self, current_status: str = ListingStatus.UNLISTED) -> None:
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=str(current_status))

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches ListingStatus)."""
        return str(self.current_state.value)


def status_of(listing: Listing | None) -> ListingStatus:
    """Map a stored listing (or its absence) onto a ListingStatus."""
    if listing is None or listing.price <= 0:
        return ListingStatus.UNLISTED
    return ListingStatus.LISTED


def check_transition(
    listing: Listing | None,
    event_name: str,
    collection_id: str,
    asset_id: int,
) -> ListingStateError | None:
    """Return the failure that firing ``event_name`` would produce, or None.

    Raises:
        ValueError: If the event name is not defined on the machine.
    """
    sm = ListingStateMachine(current_status=status_of(listing))
    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(f"Unknown event '{event_name}'")
    try:
        event_method()
    except TransitionNotAllowed:
        if sm.status == ListingStatus.LISTED:
            return AlreadyListedError(collection_id, asset_id)
        return NotListedError(collection_id, asset_id)
    return None
