"""External asset ledgers the pools hold and move."""

from divswap.assets.base import AssetLedger
from divswap.assets.directory import AssetDirectory
from divswap.assets.memory import InMemoryAsset

__all__ = ["AssetLedger", "AssetDirectory", "InMemoryAsset"]
