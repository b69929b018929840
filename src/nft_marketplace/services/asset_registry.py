"""In-process asset registry used in simulation mode and tests.

Behaves like a non-fungible token collection: one owner per asset, at most
one approved operator per asset, and the approval is cleared whenever the
asset changes hands.
"""

from __future__ import annotations

from nft_marketplace.logging_config import get_logger

logger = get_logger(__name__)


class RegistryError(Exception):
    """Raised when the registry refuses a mint, approval or transfer."""


class InMemoryAssetRegistry:
    """Implements the AssetRegistry protocol on plain dictionaries."""

    def __init__(self) -> None:
        self._owners: dict[tuple[str, int], str] = {}
        self._approvals: dict[tuple[str, int], str] = {}

    # ------------------------------------------------------------------
    # Registry administration (not part of the protocol)
    # ------------------------------------------------------------------

    def mint(self, collection_id: str, asset_id: int, owner: str) -> None:
        key = (collection_id, asset_id)
        if key in self._owners:
            raise RegistryError(f"Asset already exists: {collection_id}/{asset_id}")
        self._owners[key] = owner
        logger.info("registry.minted", collection_id=collection_id, asset_id=asset_id, owner=owner)

    def approve(self, collection_id: str, asset_id: int, owner: str, operator: str) -> None:
        """Let ``operator`` move the asset on behalf of ``owner``."""
        key = (collection_id, asset_id)
        if self._owners.get(key) != owner:
            raise RegistryError(f"{owner} does not own {collection_id}/{asset_id}")
        self._approvals[key] = operator
        logger.info(
            "registry.approved",
            collection_id=collection_id,
            asset_id=asset_id,
            operator=operator,
        )

    # ------------------------------------------------------------------
    # AssetRegistry protocol
    # ------------------------------------------------------------------

    async def owner_of(self, collection_id: str, asset_id: int) -> str | None:
        return self._owners.get((collection_id, asset_id))

    async def get_approved(self, collection_id: str, asset_id: int) -> str | None:
        return self._approvals.get((collection_id, asset_id))

    async def transfer(
        self,
        collection_id: str,
        asset_id: int,
        from_owner: str,
        to_owner: str,
        operator: str,
    ) -> None:
        key = (collection_id, asset_id)
        if self._owners.get(key) != from_owner:
            raise RegistryError(f"{from_owner} does not own {collection_id}/{asset_id}")
        if operator != from_owner and self._approvals.get(key) != operator:
            raise RegistryError(f"{operator} is not approved for {collection_id}/{asset_id}")

        self._owners[key] = to_owner
        self._approvals.pop(key, None)
        logger.info(
            "registry.transferred",
            collection_id=collection_id,
            asset_id=asset_id,
            from_owner=from_owner,
            to_owner=to_owner,
        )
