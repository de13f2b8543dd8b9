"""Exchange: applies an ordered log of operation requests.

The Exchange owns the asset directory, the registry and the shared event
log. Each request is applied exactly once, in order. Domain errors become
failed OperationResults; the operation that raised them changed nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import structlog

from divswap.assets.directory import AssetDirectory
from divswap.assets.memory import InMemoryAsset
from divswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from divswap.errors import DivSwapError, TransferFailed, UnknownPool
from divswap.models.events import EventLog
from divswap.models.operations import (
    AddOwner,
    AssetApprove,
    AssetTransfer,
    CreateAsset,
    CreatePool,
    Operation,
    OperationResult,
    PayoutDividends,
    PoolRef,
    ProvideLiquidity,
    ReceiveProfits,
    RemoveLiquidity,
    RenounceOwner,
    Scenario,
    Swap,
    TransferShares,
)
from divswap.pools.pool import Pool
from divswap.pools.registry import Registry

logger = structlog.get_logger()


class Exchange:
    """Registry, assets and event log behind a single request dispatcher."""

    def __init__(
        self,
        owner: str,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        assets: AssetDirectory | None = None,
        events: EventLog | None = None,
    ) -> None:
        self.assets = assets if assets is not None else AssetDirectory()
        self.events = events if events is not None else EventLog()
        self.registry = Registry(owner, self.assets, config=config, events=self.events)
        self._handlers: dict[str, Callable[[Any], Any]] = {
            "create_asset": self._create_asset,
            "asset_transfer": self._asset_transfer,
            "asset_approve": self._asset_approve,
            "add_owner": self._add_owner,
            "renounce_owner": self._renounce_owner,
            "create_pool": self._create_pool,
            "provide_liquidity": self._provide_liquidity,
            "remove_liquidity": self._remove_liquidity,
            "swap": self._swap,
            "transfer_shares": self._transfer_shares,
            "payout_dividends": self._payout_dividends,
            "receive_profits": self._receive_profits,
        }

    @classmethod
    def from_scenario(cls, scenario: Scenario, config: PoolConfig = DEFAULT_POOL_CONFIG) -> Exchange:
        return cls(scenario.owner, config=config)

    def pool(self, ref: PoolRef) -> Pool:
        """Resolve a pool by identifier or by creation index.

        Raises:
            UnknownPool: If the reference matches no pool
        """
        if isinstance(ref, int):
            pools = self.registry.get_pools()
            if not 0 <= ref < len(pools):
                raise UnknownPool(f"No pool at index {ref}")
            ref = pools[ref]
        return self.registry.pool_at(ref)

    def apply(self, operation: Operation, index: int = 0) -> OperationResult:
        """Apply one operation and report its outcome."""
        try:
            value = self._handlers[operation.kind](operation)
        except DivSwapError as e:
            logger.warning("operation_failed", index=index, kind=operation.kind, code=e.code, reason=str(e))
            return OperationResult(index=index, kind=operation.kind, ok=False, error=e.code, detail=str(e))
        except ArithmeticError as e:
            logger.warning("operation_failed", index=index, kind=operation.kind, code="arithmetic", reason=str(e))
            return OperationResult(
                index=index, kind=operation.kind, ok=False, error="arithmetic", detail=str(e)
            )
        logger.debug("operation_applied", index=index, kind=operation.kind)
        return OperationResult(index=index, kind=operation.kind, ok=True, value=value)

    def run(self, operations: Iterable[Operation]) -> list[OperationResult]:
        """Apply operations in order. Failures do not stop the log."""
        results = [self.apply(op, index) for index, op in enumerate(operations)]
        failed = sum(1 for r in results if not r.ok)
        logger.info("operations_replayed", total=len(results), failed=failed)
        return results

    # --- Handlers ---

    def _create_asset(self, op: CreateAsset) -> str:
        asset = InMemoryAsset(
            op.address,
            symbol=op.symbol,
            initial_holder=op.holder,
            initial_supply=op.supply,
        )
        self.assets.register(asset)
        return asset.address

    def _asset_transfer(self, op: AssetTransfer) -> None:
        if not self.assets.get(op.asset).transfer(op.sender, op.to, op.amount):
            raise TransferFailed(f"Could not transfer {op.amount} of {op.asset} from {op.sender}")

    def _asset_approve(self, op: AssetApprove) -> None:
        spender = self.pool(op.spender).address if isinstance(op.spender, int) else op.spender
        if not self.assets.get(op.asset).approve(op.owner, spender, op.amount):
            raise TransferFailed(f"Could not approve {op.amount} of {op.asset} for {spender}")

    def _add_owner(self, op: AddOwner) -> None:
        self.registry.add_owner(op.caller, op.account)

    def _renounce_owner(self, op: RenounceOwner) -> None:
        self.registry.renounce_owner(op.caller)

    def _create_pool(self, op: CreatePool) -> str:
        return self.registry.create_pool(op.caller, op.asset_a, op.asset_b)

    def _provide_liquidity(self, op: ProvideLiquidity) -> Any:
        return self.pool(op.pool).provide_liquidity(op.caller, op.amount_a, op.amount_b)

    def _remove_liquidity(self, op: RemoveLiquidity) -> Any:
        return self.pool(op.pool).remove_liquidity(op.caller, op.shares)

    def _swap(self, op: Swap) -> Any:
        return self.pool(op.pool).swap(op.caller, op.amount_in, op.asset_in)

    def _transfer_shares(self, op: TransferShares) -> None:
        self.pool(op.pool).transfer(op.caller, op.to, op.amount)

    def _payout_dividends(self, op: PayoutDividends) -> Any:
        return self.pool(op.pool).payout_dividends(op.caller)

    def _receive_profits(self, op: ReceiveProfits) -> int:
        return self.pool(op.pool).receive_profits(op.caller, op.amount, op.asset)
