"""Tests for the access guard predicates and typed precondition checks."""

from __future__ import annotations

import pytest

from nft_marketplace.domain.exceptions import (
    NoProceedsError,
    NotApprovedForMarketplaceError,
    NotOwnerError,
    PriceMustBeAboveZeroError,
    PriceNotMetError,
    ProceedsOverflowError,
)
from nft_marketplace.domain.guards import (
    check_approved,
    check_has_proceeds,
    check_owner,
    check_price_met,
    check_price_positive,
    check_proceeds_capacity,
    is_authorized_for_transfer,
    is_owner,
    raise_if,
)
from nft_marketplace.domain.models import MAX_AMOUNT, Listing
from nft_marketplace.services.asset_registry import InMemoryAssetRegistry
from tests.conftest import BUYER, COLLECTION, OPERATOR, SELLER, STRANGER


@pytest.fixture
def minted(registry: InMemoryAssetRegistry) -> InMemoryAssetRegistry:
    registry.mint(COLLECTION, 1, SELLER)
    return registry


class TestAccessPredicates:
    @pytest.mark.asyncio
    async def test_owner(self, minted: InMemoryAssetRegistry) -> None:
        assert await is_owner(minted, COLLECTION, 1, SELLER) is True
        assert await is_owner(minted, COLLECTION, 1, STRANGER) is False

    @pytest.mark.asyncio
    async def test_unknown_asset_has_no_owner(self, minted: InMemoryAssetRegistry) -> None:
        assert await is_owner(minted, COLLECTION, 404, SELLER) is False

    @pytest.mark.asyncio
    async def test_authorization_names_this_operator(self, minted: InMemoryAssetRegistry) -> None:
        assert await is_authorized_for_transfer(minted, COLLECTION, 1, OPERATOR) is False

        minted.approve(COLLECTION, 1, SELLER, STRANGER)
        assert await is_authorized_for_transfer(minted, COLLECTION, 1, OPERATOR) is False

        minted.approve(COLLECTION, 1, SELLER, OPERATOR)
        assert await is_authorized_for_transfer(minted, COLLECTION, 1, OPERATOR) is True

    @pytest.mark.asyncio
    async def test_ownership_is_not_cached(self, minted: InMemoryAssetRegistry) -> None:
        assert await is_owner(minted, COLLECTION, 1, SELLER) is True
        await minted.transfer(COLLECTION, 1, SELLER, BUYER, operator=SELLER)
        assert await is_owner(minted, COLLECTION, 1, SELLER) is False
        assert await is_owner(minted, COLLECTION, 1, BUYER) is True


class TestTypedChecks:
    @pytest.mark.asyncio
    async def test_check_owner(self, minted: InMemoryAssetRegistry) -> None:
        assert await check_owner(minted, COLLECTION, 1, SELLER) is None
        failure = await check_owner(minted, COLLECTION, 1, STRANGER)
        assert isinstance(failure, NotOwnerError)
        assert failure.principal == STRANGER

    @pytest.mark.asyncio
    async def test_check_approved(self, minted: InMemoryAssetRegistry) -> None:
        failure = await check_approved(minted, COLLECTION, 1, OPERATOR)
        assert isinstance(failure, NotApprovedForMarketplaceError)

    @pytest.mark.parametrize("price", [0, -1])
    def test_price_must_be_positive(self, price: int) -> None:
        failure = check_price_positive(price)
        assert isinstance(failure, PriceMustBeAboveZeroError)
        assert failure.price == price

    def test_positive_price_passes(self) -> None:
        assert check_price_positive(1) is None

    def test_price_met(self) -> None:
        listing = Listing(COLLECTION, 1, 100, SELLER)
        assert check_price_met(listing, 100) is None
        assert check_price_met(listing, 150) is None

        failure = check_price_met(listing, 60)
        assert isinstance(failure, PriceNotMetError)
        assert (failure.price, failure.payment, failure.shortfall) == (100, 60, 40)

    def test_has_proceeds(self) -> None:
        assert check_has_proceeds(SELLER, 5) is None
        assert isinstance(check_has_proceeds(SELLER, 0), NoProceedsError)

    def test_proceeds_capacity(self) -> None:
        assert check_proceeds_capacity(SELLER, 0, MAX_AMOUNT) is None
        assert check_proceeds_capacity(SELLER, MAX_AMOUNT - 5, 5) is None

        failure = check_proceeds_capacity(SELLER, MAX_AMOUNT - 5, 6)
        assert isinstance(failure, ProceedsOverflowError)
        assert (failure.balance, failure.amount) == (MAX_AMOUNT - 5, 6)


class TestRaiseIf:
    def test_none_does_nothing(self) -> None:
        raise_if(None)

    def test_failure_is_raised(self) -> None:
        with pytest.raises(NoProceedsError):
            raise_if(NoProceedsError(SELLER))
