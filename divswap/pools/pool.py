"""Pool: constant product reserves, LP shares and fee dividends for one pair.

A Pool composes three parts:
- the reserve engine (reserve_a, reserve_b, k) priced by ConstantProduct
- a ShareLedger of LP shares
- a DividendLedger that receives every swap fee instead of the reserves

Reserves are the pool's own record of what it holds for trading. They are
never re-read from the asset ledgers, so assets sent to the pool account
directly change neither prices nor dividends.

Every mutating operation runs in an atomic section:
1. a re-entrancy guard rejects nested calls (e.g. from a hostile asset)
2. checks and state effects happen before any asset transfer
3. on any failure the ledger entries the operation wrote are restored from
   an undo log, reserves and k from a snapshot, and completed asset
   transfers are reversed from the journal, so nothing is half-applied
Events are buffered and only emitted once the operation commits.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import structlog

from divswap.amm.base import DividendAmounts, LiquidityResult, RemovalResult, SwapResult
from divswap.amm.constant_product import ConstantProduct, constant_product
from divswap.assets.base import AssetLedger
from divswap.assets.directory import AssetDirectory
from divswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from divswap.errors import (
    DivSwapError,
    InsufficientOutput,
    InsufficientShares,
    InvalidAsset,
    NoLiquidity,
    ReentrancyError,
    TransferFailed,
    UnknownAsset,
    WrongProportion,
)
from divswap.ledger.dividends import DividendLedger
from divswap.ledger.shares import ShareLedger
from divswap.ledger.undo import UndoLog
from divswap.models.events import Event, EventLog
from divswap.models.types import AssetSide, normalize_address
from divswap.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class _PoolSnapshot:
    reserve_a: int
    reserve_b: int
    k: int


class _Journal:
    """Reversal actions for asset transfers completed inside an operation.

    A pull is reversed by the pool sending the amount back. A push is
    reversed by calling transfer(recipient, pool, amount) on the asset with
    no authorization from the recipient. Only ledgers that do not check the
    sender, such as InMemoryAsset, honour that; against any other ledger the
    reversal fails and the operation surfaces as TransferFailed.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[str, Callable[[], bool]]] = []

    def record(self, description: str, reverse: Callable[[], bool]) -> None:
        self._entries.append((description, reverse))

    def unwind(self) -> list[str]:
        """Run reversals newest first. Returns descriptions of those that failed."""
        failed = []
        for description, reverse in reversed(self._entries):
            try:
                reversed_ok = reverse()
            except Exception:
                logger.exception("transfer_reversal_raised", transfer=description)
                reversed_ok = False
            if not reversed_ok:
                failed.append(description)
        self._entries.clear()
        return failed


class Pool:
    """Constant product pool whose swap fees are paid out as dividends."""

    def __init__(
        self,
        address: str,
        assets: AssetDirectory,
        asset_a: str,
        asset_b: str,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        events: EventLog | None = None,
        amm: ConstantProduct = constant_product,
    ) -> None:
        """Create an empty pool for a pair of registered assets.

        Raises:
            InvalidAsset: If the assets are identical or either is not registered
        """
        asset_a_norm = normalize_address(asset_a)
        asset_b_norm = normalize_address(asset_b)
        if asset_a_norm == asset_b_norm:
            raise InvalidAsset("Asset A must be different from asset B")
        if not assets.is_asset(asset_a_norm) or not assets.is_asset(asset_b_norm):
            raise InvalidAsset("Pool assets must be registered asset ledgers")

        self.address = normalize_address(address, validate=True)
        self.asset_a = asset_a_norm
        self.asset_b = asset_b_norm
        self.config = config
        self.events = events if events is not None else EventLog()
        self._amm = amm
        self._ledgers: dict[AssetSide, AssetLedger] = {
            AssetSide.A: assets.get(asset_a_norm),
            AssetSide.B: assets.get(asset_b_norm),
        }

        self._reserves: dict[AssetSide, int] = {AssetSide.A: 0, AssetSide.B: 0}
        self._k = 0
        self._undo = UndoLog()
        self._dividends = DividendLedger(
            magnitude=config.dividend_magnitude,
            policy=config.undistributed_policy,
            undo=self._undo,
        )
        self._shares = ShareLedger(
            pool_id=self.address,
            dividends=self._dividends,
            name=config.share_name,
            symbol=self._share_symbol(),
            emit=self._buffer_event,
            undo=self._undo,
        )

        self._entered = False
        self._pending_events: list[Event] = []

    def _share_symbol(self) -> str:
        parts = [self.config.share_symbol_prefix]
        for side in AssetSide:
            ledger = self._ledgers[side]
            parts.append(getattr(ledger, "symbol", "") or ledger.address[2:8])
        return "-".join(parts)

    # --- Reads ---

    def get_reserves(self) -> tuple[int, int]:
        """(reserve_a, reserve_b) as recorded by the pool."""
        return self._reserves[AssetSide.A], self._reserves[AssetSide.B]

    def get_k(self) -> int:
        """Invariant recorded at the last liquidity change (reserve_a * reserve_b)."""
        return self._k

    def get_token_addresses(self) -> tuple[str, str]:
        return self.asset_a, self.asset_b

    @property
    def name(self) -> str:
        return self._shares.name

    @property
    def symbol(self) -> str:
        return self._shares.symbol

    @property
    def total_supply(self) -> int:
        return self._shares.total_supply

    def balance_of(self, account: str) -> int:
        return self._shares.balance_of(account)

    def holders(self) -> list[str]:
        """Accounts currently holding shares."""
        return self._shares.holders()

    def allowance(self, owner: str, spender: str) -> int:
        return self._shares.allowance(owner, spender)

    @property
    def dividends(self) -> DividendLedger:
        return self._dividends

    def side_of(self, asset: str) -> AssetSide:
        """Resolve an asset address to its side of the pair.

        Raises:
            UnknownAsset: If asset is not part of this pool
        """
        asset_norm = normalize_address(asset)
        if asset_norm == self.asset_a:
            return AssetSide.A
        if asset_norm == self.asset_b:
            return AssetSide.B
        raise UnknownAsset(f"Asset {asset} is not traded by pool {self.address}")

    def asset_for(self, side: AssetSide) -> str:
        return self.asset_a if side is AssetSide.A else self.asset_b

    # --- Liquidity ---

    def provide_liquidity(self, caller: str, amount_a: int, amount_b: int) -> LiquidityResult:
        """Deposit both assets and mint shares to caller.

        The first deposit mints floor(sqrt(amount_a * amount_b)) shares. Later
        deposits must match the reserve ratio exactly and mint
        total_shares * amount_a // reserve_a.

        Raises:
            WrongProportion: If the amounts do not match the reserve ratio
            NoLiquidity: If the deposit would mint zero shares
            TransferFailed: If either asset cannot be pulled from caller
        """
        caller = normalize_address(caller)
        S(amount_a).to_uint256()
        S(amount_b).to_uint256()

        with self._atomic() as journal:
            reserve_a, reserve_b = self.get_reserves()
            total = self._shares.total_supply
            if total == 0:
                minted = self._amm.initial_shares(amount_a, amount_b)
            else:
                if not self._amm.is_proportional(amount_a, amount_b, reserve_a, reserve_b):
                    raise WrongProportion(
                        f"Deposit {amount_a}:{amount_b} does not match reserves {reserve_a}:{reserve_b}"
                    )
                minted = self._amm.proportional_shares(amount_a, reserve_a, total)
            if minted == 0:
                raise NoLiquidity("Deposit is too small to mint any shares")

            self._set_reserves(
                (S(reserve_a) + S(amount_a)).to_uint256(),
                (S(reserve_b) + S(amount_b)).to_uint256(),
            )
            self._k = self._reserve_product()
            self._shares.mint(caller, minted)
            self._dividends.release_undistributed(self._shares.total_supply)

            self._pull(journal, AssetSide.A, caller, amount_a)
            self._pull(journal, AssetSide.B, caller, amount_b)

        logger.info(
            "liquidity_provided",
            pool=self.address[-8:],
            provider=caller[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            shares=minted,
        )
        return LiquidityResult(
            amount_a=amount_a,
            amount_b=amount_b,
            shares_minted=minted,
            pool_address=self.address,
        )

    def remove_liquidity(self, caller: str, shares: int) -> RemovalResult:
        """Burn shares and pay out the matching fraction of both reserves.

        Dividends accrued on the burned shares stay claimable.

        Raises:
            InsufficientShares: If the pool has no shares or caller holds fewer
            TransferFailed: If either payout cannot be pushed
        """
        caller = normalize_address(caller)

        with self._atomic() as journal:
            total = self._shares.total_supply
            if total == 0:
                raise InsufficientShares("No liquidity", code="no-liquidity")
            balance = self._shares.balance_of(caller)
            if shares < 0 or shares > balance:
                raise InsufficientShares(f"Cannot remove {shares} shares, {caller} holds {balance}")

            reserve_a, reserve_b = self.get_reserves()
            out_a, out_b = self._amm.removal_amounts(shares, total, reserve_a, reserve_b)

            self._shares.burn(caller, shares)
            self._set_reserves(
                (S(reserve_a) - S(out_a)).value,
                (S(reserve_b) - S(out_b)).value,
            )
            self._k = self._reserve_product()

            self._push(journal, AssetSide.A, caller, out_a)
            self._push(journal, AssetSide.B, caller, out_b)

        logger.info(
            "liquidity_removed",
            pool=self.address[-8:],
            provider=caller[-8:],
            shares=shares,
            amount_a=out_a,
            amount_b=out_b,
        )
        return RemovalResult(
            shares_burned=shares,
            amount_a=out_a,
            amount_b=out_b,
            pool_address=self.address,
        )

    # --- Trading ---

    def quote_swap(self, amount_in: int, asset_in: str) -> SwapResult:
        """Simulate swap() against the current reserves without changing state.

        Raises:
            UnknownAsset: If asset_in is not part of this pool
        """
        side_in = self.side_of(asset_in)
        fee, net = self._amm.split_fee(amount_in, self.config.fee_bps)
        amount_out = self._amm.amount_out_for_net(
            net, self._reserves[side_in], self._reserves[side_in.other]
        )
        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_address=self.address,
            token_in=self.asset_for(side_in),
            token_out=self.asset_for(side_in.other),
            fee=fee,
        )

    def swap(self, caller: str, amount_in: int, asset_in: str) -> SwapResult:
        """Sell amount_in of asset_in for the other asset of the pair.

        The fee (fee_bps of amount_in) bypasses the reserves and is
        distributed to current share holders on the input side.

        Raises:
            UnknownAsset: If asset_in is not part of this pool
            NoLiquidity: If the pool has no reserves
            InsufficientOutput: If the swap would pay out nothing
            TransferFailed: If the input cannot be pulled or the output pushed
        """
        caller = normalize_address(caller)
        side_in = self.side_of(asset_in)
        side_out = side_in.other
        S(amount_in).to_uint256()

        with self._atomic() as journal:
            reserve_in = self._reserves[side_in]
            reserve_out = self._reserves[side_out]
            if reserve_in == 0 or reserve_out == 0:
                raise NoLiquidity("Pool has no reserves to trade against")

            fee, net = self._amm.split_fee(amount_in, self.config.fee_bps)
            amount_out = self._amm.amount_out_for_net(net, reserve_in, reserve_out)
            if amount_out == 0:
                raise InsufficientOutput(f"Swapping {amount_in} would return nothing")

            self._reserves[side_in] = (S(reserve_in) + S(net)).to_uint256()
            self._reserves[side_out] = (S(reserve_out) - S(amount_out)).value
            self._dividends.receive_profit(side_in, fee, self._shares.total_supply)

            self._pull(journal, side_in, caller, amount_in)
            self._push(journal, side_out, caller, amount_out)

        logger.info(
            "swap_executed",
            pool=self.address[-8:],
            trader=caller[-8:],
            side_in=side_in.value,
            amount_in=amount_in,
            amount_out=amount_out,
            fee=fee,
        )
        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_address=self.address,
            token_in=self.asset_for(side_in),
            token_out=self.asset_for(side_out),
            fee=fee,
        )

    # --- Shares ---

    def transfer(self, caller: str, to: str, amount: int) -> None:
        """Transfer caller's shares; accrued dividends stay with caller.

        Raises:
            InsufficientBalance: If amount exceeds caller's balance
        """
        with self._atomic():
            self._shares.transfer(caller, to, amount)

    def approve(self, caller: str, spender: str, amount: int) -> None:
        with self._atomic():
            self._shares.approve(caller, spender, amount)

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> None:
        """Transfer owner's shares using caller's allowance.

        Raises:
            InsufficientAllowance: If amount exceeds the allowance
            InsufficientBalance: If amount exceeds owner's balance
        """
        with self._atomic():
            self._shares.transfer_from(caller, owner, to, amount)

    # --- Dividends ---

    def get_and_update_dividends(self, account: str) -> DividendAmounts:
        """Dividends accrued by account and not yet paid out.

        Pure read: checkpointing only happens in payout_dividends, so
        repeated calls return the same amounts.
        """
        balance = self._shares.balance_of(account)
        return DividendAmounts(
            amount_a=self._dividends.accrued(account, AssetSide.A, balance),
            amount_b=self._dividends.accrued(account, AssetSide.B, balance),
        )

    def payout_dividends(self, caller: str) -> DividendAmounts:
        """Pay caller everything accrued on both sides.

        Raises:
            TransferFailed: If a payout cannot be pushed
        """
        caller = normalize_address(caller)

        with self._atomic() as journal:
            accrued = self.get_and_update_dividends(caller)
            for side, amount in zip(AssetSide, accrued, strict=True):
                self._dividends.record_withdrawal(caller, side, amount)
            for side, amount in zip(AssetSide, accrued, strict=True):
                self._push(journal, side, caller, amount)

        if accrued.amount_a or accrued.amount_b:
            logger.info(
                "dividends_paid",
                pool=self.address[-8:],
                holder=caller[-8:],
                amount_a=accrued.amount_a,
                amount_b=accrued.amount_b,
            )
        return accrued

    def receive_profits(self, caller: str, amount: int, asset: str) -> int:
        """Pull amount of a pair asset from caller and distribute it to holders.

        Returns:
            The amount folded into the accumulator (0 if it was retained or
            discarded because no shares exist)

        Raises:
            UnknownAsset: If asset is not part of this pool
            TransferFailed: If the amount cannot be pulled
        """
        caller = normalize_address(caller)
        side = self.side_of(asset)
        S(amount).to_uint256()

        with self._atomic() as journal:
            distributed = self._dividends.receive_profit(side, amount, self._shares.total_supply)
            self._pull(journal, side, caller, amount)

        logger.info(
            "profits_received",
            pool=self.address[-8:],
            sender=caller[-8:],
            side=side.value,
            amount=amount,
            distributed=distributed,
        )
        return distributed

    # --- Internals ---

    def _set_reserves(self, reserve_a: int, reserve_b: int) -> None:
        self._reserves[AssetSide.A] = reserve_a
        self._reserves[AssetSide.B] = reserve_b

    def _reserve_product(self) -> int:
        return (S(self._reserves[AssetSide.A]) * S(self._reserves[AssetSide.B])).value

    def _buffer_event(self, event: Event) -> None:
        self._pending_events.append(event)

    def _snapshot(self) -> _PoolSnapshot:
        return _PoolSnapshot(
            reserve_a=self._reserves[AssetSide.A],
            reserve_b=self._reserves[AssetSide.B],
            k=self._k,
        )

    def _restore(self, snapshot: _PoolSnapshot) -> None:
        self._set_reserves(snapshot.reserve_a, snapshot.reserve_b)
        self._k = snapshot.k
        self._undo.rollback()

    @contextlib.contextmanager
    def _atomic(self) -> Iterator[_Journal]:
        """Run a mutating operation all-or-nothing.

        Raises:
            ReentrancyError: If another operation on this pool is in progress
        """
        if self._entered:
            raise ReentrancyError(f"Pool {self.address} is already executing an operation")
        self._entered = True
        self._undo.clear()
        snapshot = self._snapshot()
        journal = _Journal()
        self._pending_events = []
        try:
            yield journal
        except Exception as exc:
            self._restore(snapshot)
            self._pending_events = []
            failed = journal.unwind()
            logger.warning(
                "pool_operation_reverted",
                pool=self.address[-8:],
                error=type(exc).__name__,
                reason=str(exc),
            )
            if failed:
                logger.error("transfer_reversal_failed", pool=self.address[-8:], transfers=failed)
                raise TransferFailed(
                    f"Could not reverse transfers after failure: {', '.join(failed)}"
                ) from exc
            raise
        finally:
            self._entered = False

        self._undo.clear()
        pending, self._pending_events = self._pending_events, []
        for event in pending:
            self.events.emit(event)

    def _pull(self, journal: _Journal, side: AssetSide, sender: str, amount: int) -> None:
        """Pull amount from sender into the pool (sender must have approved it)."""
        if amount == 0:
            return
        ledger = self._ledgers[side]
        ok = self._call_asset(
            lambda: ledger.transfer_from(self.address, sender, self.address, amount)
        )
        if not ok:
            raise TransferFailed(f"Could not pull {amount} of {ledger.address} from {sender}")
        journal.record(
            f"pull {amount} of {ledger.address} from {sender}",
            lambda: ledger.transfer(self.address, sender, amount),
        )

    def _push(self, journal: _Journal, side: AssetSide, recipient: str, amount: int) -> None:
        """Send amount from the pool to recipient."""
        if amount == 0:
            return
        ledger = self._ledgers[side]
        ok = self._call_asset(lambda: ledger.transfer(self.address, recipient, amount))
        if not ok:
            raise TransferFailed(f"Could not send {amount} of {ledger.address} to {recipient}")
        journal.record(
            f"push {amount} of {ledger.address} to {recipient}",
            lambda: ledger.transfer(recipient, self.address, amount),
        )

    @staticmethod
    def _call_asset(call: Callable[[], bool]) -> bool:
        """Invoke an asset ledger, mapping its own failures to TransferFailed."""
        try:
            return bool(call())
        except DivSwapError:
            raise
        except Exception as exc:
            raise TransferFailed(f"Asset call raised {type(exc).__name__}: {exc}") from exc

    def __repr__(self) -> str:
        return f"Pool({self.symbol} @ {self.address})"
