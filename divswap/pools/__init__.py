"""Pools and the owner-governed registry that deploys them."""

from divswap.pools.pool import Pool
from divswap.pools.registry import Registry, derive_pool_id

__all__ = ["Pool", "Registry", "derive_pool_id"]
