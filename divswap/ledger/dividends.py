"""Magnified-accumulator dividend ledger.

Fees are distributed pro rata to share holders in O(1), independent of the
number of holders. For each side s of the pool:

    acc[s]                    += profit * M // total_shares     (on profit)
    correction[account][s]    -= acc[s] * delta                 (on balance change)
    accrued(account, s)        = (acc[s] * balance + correction[account][s]) // M
                                 - withdrawn[account][s]

The correction cancels the effect a balance change would otherwise have on
profit that was distributed before it: newly minted shares owe nothing for
past fees, and burned or transferred shares keep their past entitlement.
Only the balance held at the instant of each distribution matters.

Rounding from the `// total_shares` step stays in the pool as dust and is
never redistributed.
"""

from __future__ import annotations

from enum import Enum

import structlog

from divswap.constants import DIVIDEND_MAGNITUDE
from divswap.ledger.undo import UndoLog
from divswap.models.types import AssetSide, normalize_address
from divswap.safe_int import S

logger = structlog.get_logger()

_ZERO_ENTRY = {AssetSide.A: 0, AssetSide.B: 0}


class UndistributedPolicy(str, Enum):
    """What happens to profit received while no shares exist."""

    # Escrow it and add it to the first distribution made while shares exist
    RETAIN = "retain"
    # Drop it; the assets stay in the pool account untracked
    DISCARD = "discard"


class DividendLedger:
    """Per-pool dividend accounting for both sides of the pair."""

    def __init__(
        self,
        magnitude: int = DIVIDEND_MAGNITUDE,
        policy: UndistributedPolicy = UndistributedPolicy.RETAIN,
        undo: UndoLog | None = None,
    ) -> None:
        if magnitude <= 0:
            raise ValueError(f"Dividend magnitude must be positive: {magnitude}")
        self.magnitude = magnitude
        self.policy = policy
        self._undo = undo
        self._acc: dict[AssetSide, int] = {AssetSide.A: 0, AssetSide.B: 0}
        self._undistributed: dict[AssetSide, int] = {AssetSide.A: 0, AssetSide.B: 0}
        # Entries are created lazily on an account's first balance change or payout.
        # Per-account dicts are replaced, never mutated, so the undo log can keep
        # a reference to the previous one.
        self._corrections: dict[str, dict[AssetSide, int]] = {}
        self._withdrawn: dict[str, dict[AssetSide, int]] = {}

    def accumulator(self, side: AssetSide) -> int:
        """Profit per share for side, scaled by the magnitude."""
        return self._acc[side]

    def undistributed(self, side: AssetSide) -> int:
        """Profit held back because no shares existed when it arrived."""
        return self._undistributed[side]

    def correction(self, account: str, side: AssetSide) -> int:
        entry = self._corrections.get(normalize_address(account))
        return entry[side] if entry else 0

    def withdrawn(self, account: str, side: AssetSide) -> int:
        entry = self._withdrawn.get(normalize_address(account))
        return entry[side] if entry else 0

    def receive_profit(self, side: AssetSide, amount: int, total_shares: int) -> int:
        """Distribute amount over the current total_shares.

        Returns:
            The amount actually folded into the accumulator (including any
            previously retained profit), 0 if nothing was distributed
        """
        if amount < 0:
            raise ValueError(f"Profit cannot be negative: {amount}")

        if total_shares == 0:
            if amount == 0:
                return 0
            if self.policy is UndistributedPolicy.RETAIN:
                self._save(self._undistributed, side)
                self._undistributed[side] = (S(self._undistributed[side]) + S(amount)).to_uint256()
                logger.info("profit_retained", side=side.value, amount=amount)
            else:
                logger.warning("profit_discarded", side=side.value, amount=amount)
            return 0

        total = S(amount) + S(self._undistributed[side])
        if total == 0:
            return 0
        increment = total * S(self.magnitude) // S(total_shares)
        self._save(self._acc, side)
        self._save(self._undistributed, side)
        self._acc[side] = (S(self._acc[side]) + increment).to_uint256()
        self._undistributed[side] = 0
        logger.debug(
            "profit_distributed",
            side=side.value,
            amount=total.value,
            total_shares=total_shares,
        )
        return total.value

    def release_undistributed(self, total_shares: int) -> None:
        """Distribute retained profit once shares exist again."""
        if total_shares == 0:
            return
        for side in AssetSide:
            if self._undistributed[side]:
                self.receive_profit(side, 0, total_shares)

    def on_balance_change(self, account: str, delta: int) -> None:
        """Neutralize a share balance change of delta for account."""
        if delta == 0:
            return
        account = normalize_address(account)
        entry = dict(self._corrections.get(account, _ZERO_ENTRY))
        for side in AssetSide:
            adjustment = S(self._acc[side]) * S(delta)
            entry[side] = S(entry[side]).signed_sub(adjustment).to_int256()
        self._save(self._corrections, account)
        self._corrections[account] = entry

    def on_transfer(self, sender: str, recipient: str, amount: int) -> None:
        self.on_balance_change(sender, -amount)
        self.on_balance_change(recipient, amount)

    def accumulative(self, account: str, side: AssetSide, balance: int) -> int:
        """Total dividends ever earned by account on side (paid or not)."""
        magnified = S(self._acc[side]) * S(balance) + S(self.correction(account, side))
        return (magnified // S(self.magnitude)).to_uint256()

    def accrued(self, account: str, side: AssetSide, balance: int) -> int:
        """Dividends earned by account on side and not yet withdrawn."""
        return (S(self.accumulative(account, side, balance)) - S(self.withdrawn(account, side))).value

    def record_withdrawal(self, account: str, side: AssetSide, amount: int) -> None:
        """Checkpoint a payout so it is not accrued again."""
        if amount <= 0:
            return
        account = normalize_address(account)
        entry = dict(self._withdrawn.get(account, _ZERO_ENTRY))
        entry[side] = (S(entry[side]) + S(amount)).to_uint256()
        self._save(self._withdrawn, account)
        self._withdrawn[account] = entry

    def _save(self, table: dict, key: object) -> None:
        if self._undo is not None:
            self._undo.save_item(table, key)
