#!/usr/bin/env python3
"""NFT Marketplace — End-to-End Simulation.

Simulates three scenarios with SellerBot and BuyerBot agents against an
in-memory SQLite database, the in-process asset registry and the simulated
payment gateway:

    Scenario 1: Happy Path
        - Seller lists asset #1 at 100
        - Buyer pays 150 -> listing removed, seller credited 100 (surplus kept)
        - Seller withdraws -> balance 0, payout of 100

    Scenario 2: Rejected Operations
        - Buyer underpays -> PriceNotMet
        - Stranger updates the listing -> NotOwner
        - Seller cancels twice -> second cancel is NotListed

    Scenario 3: Malicious Payee
        - A payment gateway that calls withdrawProceeds again while paying
        - The nested withdrawal sees a zero balance -> NoProceeds
        - The seller is paid exactly once

Usage:
    python simulation.py
    python simulation.py --scenario 3
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass

from nft_marketplace.domain.exceptions import MarketplaceError
from nft_marketplace.infrastructure.database.engine import (
    build_engine,
    create_tables,
    make_session_factory,
)
from nft_marketplace.logging_config import get_logger, setup_logging
from nft_marketplace.services.asset_registry import InMemoryAssetRegistry
from nft_marketplace.services.marketplace_service import MarketplaceService
from nft_marketplace.services.payment_service import SimulatedPaymentGateway

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

OPERATOR = "0x" + "A" * 40
COLLECTION = "0x" + "C" * 40


# ---------------------------------------------------------------------------
# Bot Agents
# ---------------------------------------------------------------------------
@dataclass
class SellerBot:
    """Simulated seller that mints, approves and lists assets."""

    wallet: str = "0x" + "5" * 40

    async def list_new_asset(
        self,
        marketplace: MarketplaceService,
        registry: InMemoryAssetRegistry,
        asset_id: int,
        price: int,
    ) -> None:
        registry.mint(COLLECTION, asset_id, self.wallet)
        registry.approve(COLLECTION, asset_id, self.wallet, OPERATOR)
        await marketplace.list_item(self.wallet, COLLECTION, asset_id, price)
        logger.info("🟢 SELLER: Asset listed", asset_id=asset_id, price=price)


@dataclass
class BuyerBot:
    """Simulated buyer."""

    wallet: str = "0x" + "B" * 40

    async def buy(self, marketplace: MarketplaceService, asset_id: int, payment: int) -> None:
        await marketplace.buy_item(self.wallet, COLLECTION, asset_id, payment)
        logger.info("🔵 BUYER: Asset bought", asset_id=asset_id, payment=payment)


class ReentrantPaymentGateway(SimulatedPaymentGateway):
    """Payee that tries to withdraw a second time while being paid."""

    def __init__(self) -> None:
        super().__init__()
        self.marketplace: MarketplaceService | None = None
        self.nested_error: MarketplaceError | None = None

    async def send(self, recipient: str, amount: int) -> bool:
        if self.marketplace is not None and self.nested_error is None:
            try:
                await self.marketplace.withdraw_proceeds(recipient)
            except MarketplaceError as exc:
                self.nested_error = exc
        return await super().send(recipient, amount)


async def build_marketplace(
    payments: SimulatedPaymentGateway | None = None,
) -> tuple[MarketplaceService, InMemoryAssetRegistry, SimulatedPaymentGateway]:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    registry = InMemoryAssetRegistry()
    payments = payments or SimulatedPaymentGateway()
    marketplace = MarketplaceService(
        session_factory=make_session_factory(engine),
        asset_registry=registry,
        payments=payments,
        operator=OPERATOR,
    )
    return marketplace, registry, payments


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------
async def scenario_happy_path() -> bool:
    marketplace, registry, payments = await build_marketplace()
    seller, buyer = SellerBot(), BuyerBot()

    await seller.list_new_asset(marketplace, registry, asset_id=1, price=100)
    await buyer.buy(marketplace, asset_id=1, payment=150)

    balance = await marketplace.get_proceeds(seller.wallet)
    listing = await marketplace.get_listing(COLLECTION, 1)
    logger.info("📒 LEDGER: After sale", seller_balance=balance, listed=listing is not None)

    amount = await marketplace.withdraw_proceeds(seller.wallet)
    logger.info("💸 SELLER: Withdrew", amount=amount)

    return (
        listing is None
        and balance == 100
        and await marketplace.get_proceeds(seller.wallet) == 0
        and payments.total_paid(seller.wallet) == 100
        and await registry.owner_of(COLLECTION, 1) == buyer.wallet
    )


async def scenario_rejections() -> bool:
    marketplace, registry, _ = await build_marketplace()
    seller, buyer = SellerBot(), BuyerBot()
    await seller.list_new_asset(marketplace, registry, asset_id=2, price=100)

    rejected: list[str] = []
    attempts = [
        marketplace.buy_item(buyer.wallet, COLLECTION, 2, 99),
        marketplace.update_listing(buyer.wallet, COLLECTION, 2, 50),
    ]
    for attempt in attempts:
        try:
            await attempt
        except MarketplaceError as exc:
            rejected.append(exc.code)
            logger.info("⛔ REJECTED", code=exc.code, message=exc.message)

    await marketplace.cancel_listing(seller.wallet, COLLECTION, 2)
    try:
        await marketplace.cancel_listing(seller.wallet, COLLECTION, 2)
    except MarketplaceError as exc:
        rejected.append(exc.code)
        logger.info("⛔ REJECTED", code=exc.code, message=exc.message)

    return rejected == ["PRICE_NOT_MET", "NOT_OWNER", "NOT_LISTED"]


async def scenario_malicious_payee() -> bool:
    gateway = ReentrantPaymentGateway()
    marketplace, registry, _ = await build_marketplace(payments=gateway)
    gateway.marketplace = marketplace
    seller, buyer = SellerBot(), BuyerBot()

    await seller.list_new_asset(marketplace, registry, asset_id=3, price=100)
    await buyer.buy(marketplace, asset_id=3, payment=100)
    await marketplace.withdraw_proceeds(seller.wallet)

    nested = gateway.nested_error.code if gateway.nested_error else None
    logger.info("🛡️ GUARD: Nested withdrawal", outcome=nested)
    return nested == "NO_PROCEEDS" and gateway.total_paid(seller.wallet) == 100


SCENARIOS = {
    1: ("Happy path", scenario_happy_path),
    2: ("Rejected operations", scenario_rejections),
    3: ("Malicious payee", scenario_malicious_payee),
}


async def main(selected: int | None) -> int:
    failures = 0
    for number, (title, scenario) in SCENARIOS.items():
        if selected is not None and number != selected:
            continue
        logger.info(f"===== Scenario {number}: {title} =====")
        passed = await scenario()
        logger.info("scenario.finished", scenario=number, passed=passed)
        failures += 0 if passed else 1
    return failures


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="NFT marketplace simulation")
    parser.add_argument("--scenario", type=int, choices=sorted(SCENARIOS), default=None)
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.scenario)))
