"""Tests for the reentrancy guard.

Collaborators here call back into the marketplace from inside the external
call, the way a hostile payee or asset contract would.
"""

from __future__ import annotations

import asyncio

import pytest

from nft_marketplace.domain.exceptions import (
    MarketplaceError,
    NoProceedsError,
    NotListedError,
    ReentrancyError,
    WithdrawCallError,
)
from nft_marketplace.services.marketplace_service import MarketplaceService
from nft_marketplace.services.payment_service import SimulatedPaymentGateway
from nft_marketplace.services.reentrancy_guard import Operation
from tests.conftest import BUYER, COLLECTION, OPERATOR, SELLER, STRANGER


class CallbackGateway(SimulatedPaymentGateway):
    """Runs ``on_send`` before paying; errors from it are recorded, not raised."""

    def __init__(self, swallow: bool = True) -> None:
        super().__init__()
        self.on_send = None
        self.swallow = swallow
        self.callback_errors: list[MarketplaceError] = []

    async def send(self, recipient: str, amount: int) -> bool:
        if self.on_send is not None:
            try:
                await self.on_send(recipient, amount)
            except MarketplaceError as exc:
                if not self.swallow:
                    raise
                self.callback_errors.append(exc)
        return await super().send(recipient, amount)


@pytest.fixture
def gateway() -> CallbackGateway:
    return CallbackGateway()


@pytest.fixture
def hostile_marketplace(session_factory, registry, gateway, notifier) -> MarketplaceService:
    return MarketplaceService(
        session_factory=session_factory,
        asset_registry=registry,
        payments=gateway,
        operator=OPERATOR,
        notifier=notifier,
    )


@pytest.fixture
def on_transfer(registry, monkeypatch):
    """Install a coroutine that runs inside the registry transfer call."""
    original = registry.transfer

    def _install(hook):
        async def _transfer(*args, **kwargs):
            await hook()
            return await original(*args, **kwargs)

        monkeypatch.setattr(registry, "transfer", _transfer)

    return _install


async def _sell(marketplace, approved_asset, asset_id: int = 1, price: int = 100) -> None:
    approved_asset(asset_id)
    await marketplace.list_item(SELLER, COLLECTION, asset_id, price)
    await marketplace.buy_item(BUYER, COLLECTION, asset_id, price)


class TestReentrantWithdraw:
    @pytest.mark.asyncio
    async def test_nested_withdraw_sees_zero_balance(
        self, hostile_marketplace, gateway, approved_asset
    ) -> None:
        await _sell(hostile_marketplace, approved_asset)

        async def _withdraw_again(recipient: str, amount: int) -> None:
            await hostile_marketplace.withdraw_proceeds(recipient)

        gateway.on_send = _withdraw_again

        assert await hostile_marketplace.withdraw_proceeds(SELLER) == 100
        assert len(gateway.callback_errors) == 1
        assert isinstance(gateway.callback_errors[0], NoProceedsError)
        assert gateway.total_paid(SELLER) == 100
        assert await hostile_marketplace.get_proceeds(SELLER) == 0

    @pytest.mark.asyncio
    async def test_propagated_nested_error_rolls_back(
        self, session_factory, registry, notifier, approved_asset
    ) -> None:
        gateway = CallbackGateway(swallow=False)
        marketplace = MarketplaceService(session_factory, registry, gateway, OPERATOR, notifier)
        await _sell(marketplace, approved_asset)

        async def _withdraw_again(recipient: str, amount: int) -> None:
            await marketplace.withdraw_proceeds(recipient)

        gateway.on_send = _withdraw_again

        with pytest.raises(WithdrawCallError) as exc_info:
            await marketplace.withdraw_proceeds(SELLER)

        assert isinstance(exc_info.value.__cause__, NoProceedsError)
        assert gateway.payouts == []
        assert await marketplace.get_proceeds(SELLER) == 100

    @pytest.mark.asyncio
    async def test_nested_mutation_is_rejected(
        self, hostile_marketplace, gateway, approved_asset
    ) -> None:
        await _sell(hostile_marketplace, approved_asset)
        approved_asset(2)

        async def _list_during_payout(recipient: str, amount: int) -> None:
            await hostile_marketplace.list_item(SELLER, COLLECTION, 2, 5)

        gateway.on_send = _list_during_payout

        await hostile_marketplace.withdraw_proceeds(SELLER)

        assert [type(e) for e in gateway.callback_errors] == [ReentrancyError]
        assert gateway.callback_errors[0].operation == "list_item"
        assert await hostile_marketplace.get_listing(COLLECTION, 2) is None

    @pytest.mark.asyncio
    async def test_nested_read_sees_zeroed_balance(
        self, hostile_marketplace, gateway, approved_asset
    ) -> None:
        await _sell(hostile_marketplace, approved_asset)
        seen: list[int] = []

        async def _peek(recipient: str, amount: int) -> None:
            seen.append(await hostile_marketplace.get_proceeds(recipient))

        gateway.on_send = _peek

        await hostile_marketplace.withdraw_proceeds(SELLER)
        assert seen == [0]


class TestReentrantTransfer:
    @pytest.mark.asyncio
    async def test_nested_buy_of_same_asset_fails_not_listed(
        self, marketplace, approved_asset, on_transfer
    ) -> None:
        approved_asset(1)
        await marketplace.list_item(SELLER, COLLECTION, 1, 100)
        errors: list[MarketplaceError] = []

        async def _buy_again() -> None:
            try:
                await marketplace.buy_item(STRANGER, COLLECTION, 1, 100)
            except MarketplaceError as exc:
                errors.append(exc)

        on_transfer(_buy_again)

        await marketplace.buy_item(BUYER, COLLECTION, 1, 100)

        assert [type(e) for e in errors] == [NotListedError]
        assert await marketplace.get_proceeds(SELLER) == 100

    @pytest.mark.asyncio
    async def test_nested_read_sees_settled_sale(
        self, marketplace, approved_asset, on_transfer
    ) -> None:
        approved_asset(1)
        await marketplace.list_item(SELLER, COLLECTION, 1, 100)
        seen: list[tuple] = []

        async def _peek() -> None:
            seen.append(
                (
                    await marketplace.get_listing(COLLECTION, 1),
                    await marketplace.get_proceeds(SELLER),
                )
            )

        on_transfer(_peek)

        await marketplace.buy_item(BUYER, COLLECTION, 1, 100)
        assert seen == [(None, 100)]

    @pytest.mark.asyncio
    async def test_nested_withdraw_during_sale_is_rejected(
        self, marketplace, payments, approved_asset, on_transfer
    ) -> None:
        approved_asset(1)
        await marketplace.list_item(SELLER, COLLECTION, 1, 100)
        errors: list[MarketplaceError] = []

        async def _withdraw() -> None:
            try:
                await marketplace.withdraw_proceeds(SELLER)
            except MarketplaceError as exc:
                errors.append(exc)

        on_transfer(_withdraw)

        await marketplace.buy_item(BUYER, COLLECTION, 1, 100)

        assert [type(e) for e in errors] == [ReentrancyError]
        assert payments.payouts == []
        assert await marketplace.get_proceeds(SELLER) == 100


class TestGuardState:
    @pytest.mark.asyncio
    async def test_lock_released_after_failure(self, marketplace) -> None:
        with pytest.raises(NoProceedsError):
            await marketplace.withdraw_proceeds(SELLER)

        assert marketplace.guard.locked is False
        assert marketplace.guard.active_operation is None

    @pytest.mark.asyncio
    async def test_active_operation_visible_inside(self, marketplace) -> None:
        async with marketplace.guard.operation("inspect") as op:
            assert marketplace.guard.locked is True
            assert marketplace.guard.active_operation is op
            assert op.reentrant is False
        assert marketplace.guard.locked is False

    @pytest.mark.asyncio
    async def test_task_spawned_by_collaborator_runs_normally_once_outer_call_ends(
        self, marketplace, approved_asset, on_transfer
    ) -> None:
        approved_asset(1)
        approved_asset(2)
        await marketplace.list_item(SELLER, COLLECTION, 1, 100)
        sale_done = asyncio.Event()
        spawned: list[asyncio.Task] = []

        async def _list_later():
            await sale_done.wait()
            assert marketplace.guard.locked is False
            assert marketplace.guard.active_operation is None
            listed = await marketplace.list_item(SELLER, COLLECTION, 2, 50)
            return listed, await marketplace.get_proceeds(SELLER)

        async def _spawn() -> None:
            spawned.append(asyncio.create_task(_list_later()))

        on_transfer(_spawn)

        await marketplace.buy_item(BUYER, COLLECTION, 1, 100)
        sale_done.set()
        listed, balance = await spawned[0]

        assert listed.price == 50
        assert balance == 100
        assert (await marketplace.get_listing(COLLECTION, 2)).price == 50

    @pytest.mark.asyncio
    async def test_finished_operation_is_not_active(self, marketplace) -> None:
        async with marketplace.guard.operation("inspect") as op:
            pass

        assert op.active is False
        assert marketplace.guard.active_operation is None

    @pytest.mark.asyncio
    async def test_concurrent_tasks_are_serialized(self, marketplace, approved_asset) -> None:
        approved_asset(1)
        await marketplace.list_item(SELLER, COLLECTION, 1, 100)

        results = await asyncio.gather(
            marketplace.buy_item(BUYER, COLLECTION, 1, 100),
            marketplace.buy_item(STRANGER, COLLECTION, 1, 100),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, NotListedError)) == 1
        assert await marketplace.get_proceeds(SELLER) == 100


class TestOperationOrdering:
    def test_external_call_before_effects_is_refused(self) -> None:
        op = Operation("inspect", session=None, reentrant=False)

        async def _noop() -> None:
            return None

        with pytest.raises(RuntimeError, match="before internal state changes"):
            asyncio.run(op.call_external(_noop))

    def test_emit_before_effects_is_refused(self) -> None:
        op = Operation("inspect", session=None, reentrant=False)
        with pytest.raises(RuntimeError, match="outside the effects phase"):
            op.emit(None)

    def test_nested_operation_cannot_begin_effects(self) -> None:
        op = Operation("cancel_listing", session=None, reentrant=True)
        with pytest.raises(ReentrancyError):
            op.begin_effects()
