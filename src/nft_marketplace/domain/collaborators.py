"""External collaborator protocols.

Defines the interfaces of the two systems this service hands control to:
the asset registry (ownership truth and transfers) and the payment gateway
(release of escrowed funds). These are Protocols (structural subtyping) so
concrete implementations don't need to inherit from a base class.

Either collaborator may call back into the marketplace while it is being
invoked. The service treats every such call as a reentry vector.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetRegistry(Protocol):
    """Authority that proves and executes ownership of non-fungible assets.

    Concrete implementations:
        - services/asset_registry.py (InMemoryAssetRegistry)
    """

    async def owner_of(self, collection_id: str, asset_id: int) -> str | None:
        """Return the current owner, or None if the asset does not exist."""
        ...

    async def get_approved(self, collection_id: str, asset_id: int) -> str | None:
        """Return the operator approved to move the asset, if any."""
        ...

    async def transfer(
        self,
        collection_id: str,
        asset_id: int,
        from_owner: str,
        to_owner: str,
        operator: str,
    ) -> None:
        """Move the asset from ``from_owner`` to ``to_owner`` on behalf of ``operator``.

        Raises:
            Exception: Any failure; the marketplace rolls the sale back.
        """
        ...


@runtime_checkable
class PaymentGateway(Protocol):
    """Primitive that releases escrowed funds to a recipient.

    Concrete implementations:
        - services/payment_service.py (SimulatedPaymentGateway)
    """

    async def send(self, recipient: str, amount: int) -> bool:
        """Pay ``amount`` to ``recipient``.

        Returns:
            True on success. A falsy result (or a raised exception) is a failure.
        """
        ...
