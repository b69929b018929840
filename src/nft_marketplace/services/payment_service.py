"""Payment Service — releases escrowed proceeds to sellers.

For MVP: a simulated gateway that generates fake transaction hashes and
records every payout, so withdrawals can be exercised without a real payment
rail. It can be switched into a failing mode to exercise the rollback path.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from nft_marketplace.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Payout:
    """One completed transfer of funds to a recipient."""

    recipient: str
    amount: int
    tx_hash: str


class SimulatedPaymentGateway:
    """Implements the PaymentGateway protocol in memory."""

    def __init__(self, fail: bool = False) -> None:
        """Initialize the gateway.

        Args:
            fail: If True, every payout reports failure instead of paying.
        """
        self.fail = fail
        self.payouts: list[Payout] = []

    async def send(self, recipient: str, amount: int) -> bool:
        if self.fail:
            logger.warning("payment.payout_failed", recipient=recipient, amount=amount)
            return False

        tx_hash = "0x" + uuid.uuid4().hex + uuid.uuid4().hex
        self.payouts.append(Payout(recipient=recipient, amount=amount, tx_hash=tx_hash))
        logger.info(
            "payment.payout_simulated",
            tx_hash=tx_hash,
            amount=amount,
            to_wallet=recipient,
        )
        return True

    def total_paid(self, recipient: str) -> int:
        """Sum of all payouts made to ``recipient``."""
        return sum(p.amount for p in self.payouts if p.recipient == recipient)
