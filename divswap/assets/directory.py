"""Directory of asset ledgers known to the exchange.

An address is a valid asset exactly when a ledger is registered for it;
pool creation uses this to reject plain accounts as pair members.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from divswap.assets.base import AssetLedger
from divswap.errors import InvalidAsset
from divswap.models.types import normalize_address

logger = structlog.get_logger()


class AssetDirectory:
    """Address -> AssetLedger lookup."""

    def __init__(self, assets: list[AssetLedger] | None = None) -> None:
        self._assets: dict[str, AssetLedger] = {}
        for asset in assets or []:
            self.register(asset)

    def register(self, asset: AssetLedger) -> None:
        """Register an asset ledger under its address.

        Raises:
            TypeError: If asset does not satisfy the AssetLedger protocol
            InvalidAsset: If another ledger is registered under the same address
        """
        if not isinstance(asset, AssetLedger):
            raise TypeError(f"Not an asset ledger: {type(asset).__name__}")
        address = normalize_address(asset.address, validate=True)
        existing = self._assets.get(address)
        if existing is not None and existing is not asset:
            raise InvalidAsset(f"Address {address} already holds an asset")
        self._assets[address] = asset
        logger.debug("asset_registered", asset=address[-8:])

    def is_asset(self, address: str) -> bool:
        return normalize_address(address) in self._assets

    def get(self, address: str) -> AssetLedger:
        """Look up the ledger for address.

        Raises:
            InvalidAsset: If nothing is registered under address
        """
        asset = self._assets.get(normalize_address(address))
        if asset is None:
            raise InvalidAsset(f"No asset registered at {address}")
        return asset

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and self.is_asset(address)

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
