"""Owner-governed registry that deploys one Pool per asset pair.

Pairs are keyed order-independently, so (A, B) and (B, A) are the same
pool. Pool identifiers are derived deterministically from the pair and a
creation nonce, the way on-chain factories derive pair addresses.
"""

from __future__ import annotations

import structlog
from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import keccak

from divswap.assets.directory import AssetDirectory
from divswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from divswap.errors import AlreadyExists, InvalidAsset, OnlyOwnerViolation, Unauthorized, UnknownPool
from divswap.models.events import EventLog, OwnerAdded, OwnerRemoved, PoolAdded
from divswap.models.types import is_valid_address, normalize_address
from divswap.pools.pool import Pool

logger = structlog.get_logger()


def derive_pool_id(registry_id: str, asset_a: str, asset_b: str, nonce: int) -> str:
    """Deterministic pool address: last 20 bytes of keccak(abi.encode(...)).

    Args:
        registry_id: Address of the deploying registry
        asset_a: First asset address (as passed to create_pool)
        asset_b: Second asset address
        nonce: Number of pools the registry created before this one
    """
    encoded = encode(
        ["address", "address", "address", "uint256"],
        [
            bytes.fromhex(registry_id[2:]),
            bytes.fromhex(asset_a[2:]),
            bytes.fromhex(asset_b[2:]),
            nonce,
        ],
    )
    return "0x" + keccak(encoded)[-20:].hex()


class Registry:
    """Directory of pools plus the set of accounts allowed to manage it.

    The creator becomes the first owner. The owner set is never empty.
    """

    def __init__(
        self,
        creator: str,
        assets: AssetDirectory,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        events: EventLog | None = None,
        address: str | None = None,
    ) -> None:
        creator = normalize_address(creator, validate=True)
        self.assets = assets
        self.config = config
        self.events = events if events is not None else EventLog()
        self.address = normalize_address(
            address or "0x" + keccak(encode(["address"], [bytes.fromhex(creator[2:])]))[-20:].hex(),
            validate=True,
        )
        # dict as an insertion-ordered set
        self._owners: dict[str, None] = {creator: None}
        self._pools: dict[frozenset[str], Pool] = {}
        self._pools_by_id: dict[str, Pool] = {}
        self._pool_list: list[str] = []

    # --- Owners ---

    def is_owner(self, account: str) -> bool:
        return normalize_address(account) in self._owners

    @property
    def owners(self) -> list[str]:
        return list(self._owners)

    def _require_owner(self, caller: str) -> str:
        caller = normalize_address(caller)
        if caller not in self._owners:
            logger.warning("unauthorized_call", caller=caller[-8:])
            raise Unauthorized(f"{caller} is not an owner")
        return caller

    def add_owner(self, caller: str, new_owner: str) -> None:
        """Grant the owner role. Adding an existing owner is a no-op.

        Raises:
            Unauthorized: If caller is not an owner
        """
        self._require_owner(caller)
        new_owner = normalize_address(new_owner, validate=True)
        if new_owner in self._owners:
            logger.debug("owner_already_present", account=new_owner[-8:])
            return
        self._owners[new_owner] = None
        logger.info("owner_added", account=new_owner[-8:])
        self.events.emit(OwnerAdded(account=new_owner))

    def renounce_owner(self, caller: str) -> None:
        """Give up the caller's own owner role.

        Raises:
            Unauthorized: If caller is not an owner
            OnlyOwnerViolation: If caller is the last owner
        """
        caller = self._require_owner(caller)
        if len(self._owners) == 1:
            raise OnlyOwnerViolation("The only owner cannot renounce")
        del self._owners[caller]
        logger.info("owner_removed", account=caller[-8:])
        self.events.emit(OwnerRemoved(account=caller))

    # --- Pools ---

    def create_pool(self, caller: str, asset_a: str, asset_b: str) -> str:
        """Deploy a pool for an asset pair.

        Returns:
            The new pool's identifier

        Raises:
            Unauthorized: If caller is not an owner
            InvalidAsset: If the assets are equal or not registered
            AlreadyExists: If a pool exists for the pair in either order
        """
        self._require_owner(caller)
        if not is_valid_address(normalize_address(asset_a)) or not is_valid_address(
            normalize_address(asset_b)
        ):
            raise InvalidAsset("Pool assets must be valid addresses")
        asset_a = normalize_address(asset_a)
        asset_b = normalize_address(asset_b)

        pair_key = frozenset([asset_a, asset_b])
        if len(pair_key) == 2 and pair_key in self._pools:
            raise AlreadyExists(f"Pool for {asset_a[-8:]}/{asset_b[-8:]} already exists")

        pool_id = derive_pool_id(self.address, asset_a, asset_b, len(self._pool_list))
        # Pool construction validates distinct, registered assets
        pool = Pool(
            address=pool_id,
            assets=self.assets,
            asset_a=asset_a,
            asset_b=asset_b,
            config=self.config,
            events=self.events,
        )

        self._pools[pair_key] = pool
        self._pools_by_id[pool_id] = pool
        self._pool_list.append(pool_id)
        logger.info("pool_created", pool=pool_id, asset_a=asset_a[-8:], asset_b=asset_b[-8:])
        self.events.emit(PoolAdded(asset_a=asset_a, asset_b=asset_b, pool_id=pool_id))
        return pool_id

    def get_pools(self) -> list[str]:
        """Pool identifiers in creation order."""
        return list(self._pool_list)

    def get_pool(self, asset_a: str, asset_b: str) -> Pool | None:
        """Pool for a pair (order independent), or None."""
        pair_key = frozenset([normalize_address(asset_a), normalize_address(asset_b)])
        return self._pools.get(pair_key)

    def pool_at(self, pool_id: str) -> Pool:
        """Look up a pool by identifier.

        Raises:
            UnknownPool: If no pool has this identifier
        """
        pool = self._pools_by_id.get(normalize_address(pool_id))
        if pool is None:
            raise UnknownPool(f"No pool at {pool_id}")
        return pool

    def __len__(self) -> int:
        return len(self._pool_list)
