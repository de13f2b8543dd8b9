"""Tests for the magnified-accumulator dividend ledger.

Shares are moved through a ShareLedger so every balance change reaches the
DividendLedger exactly the way a pool drives it.
"""

import itertools
import math
from fractions import Fraction

import pytest

from divswap.ledger.dividends import DividendLedger, UndistributedPolicy
from divswap.ledger.shares import ShareLedger
from divswap.ledger.undo import UndoLog
from divswap.models.types import AssetSide
from divswap.safe_int import Int256Overflow
from tests.helpers.constants import ALICE, BILLY, LP1, ONE

POOL_ID = "0x00000000000000000000000000000000000000aa"


@pytest.fixture
def dividends() -> DividendLedger:
    return DividendLedger()


@pytest.fixture
def shares(dividends: DividendLedger) -> ShareLedger:
    """Alice holds 100 shares and Billy 200."""
    ledger = ShareLedger(POOL_ID, dividends, name="Liquidity Pool Shares", symbol="LP-GLD-SLV")
    ledger.mint(ALICE, 100)
    ledger.mint(BILLY, 200)
    return ledger


def distribute(dividends: DividendLedger, shares: ShareLedger, side: AssetSide, amount: int) -> int:
    return dividends.receive_profit(side, amount, shares.total_supply)


def accrued(dividends: DividendLedger, shares: ShareLedger, account: str, side: AssetSide) -> int:
    return dividends.accrued(account, side, shares.balance_of(account))


def pay_out(dividends: DividendLedger, shares: ShareLedger, account: str) -> tuple[int, int]:
    """Checkpoint everything account accrued, like Pool.payout_dividends."""
    paid = []
    for side in AssetSide:
        amount = accrued(dividends, shares, account, side)
        dividends.record_withdrawal(account, side, amount)
        paid.append(amount)
    return paid[0], paid[1]


class TestDistribution:
    """Tests for pro rata distribution of profit."""

    def test_distribute_side_a(self, dividends, shares):
        distribute(dividends, shares, AssetSide.A, ONE)

        assert accrued(dividends, shares, ALICE, AssetSide.A) == 333333333333333333
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 0
        assert accrued(dividends, shares, BILLY, AssetSide.A) == 666666666666666666
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 0

    def test_distribute_side_b(self, dividends, shares):
        distribute(dividends, shares, AssetSide.B, ONE)

        assert accrued(dividends, shares, ALICE, AssetSide.A) == 0
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 333333333333333333
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 666666666666666666

    def test_payout_both_sides(self, dividends, shares):
        distribute(dividends, shares, AssetSide.A, 2 * ONE)
        distribute(dividends, shares, AssetSide.B, ONE)

        assert pay_out(dividends, shares, ALICE) == (666666666666666666, 333333333333333333)
        # Nothing left after the checkpoint
        assert accrued(dividends, shares, ALICE, AssetSide.A) == 0
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 0

    def test_total_accrued_never_exceeds_profit(self, dividends, shares):
        distribute(dividends, shares, AssetSide.A, ONE)
        total = sum(accrued(dividends, shares, account, AssetSide.A) for account in (ALICE, BILLY))
        assert total <= ONE
        # Rounding dust is bounded by the number of holders
        assert ONE - total <= 2

    def test_receive_profit_returns_distributed_amount(self, dividends, shares):
        assert distribute(dividends, shares, AssetSide.A, ONE) == ONE

    def test_zero_profit_is_a_noop(self, dividends, shares):
        assert distribute(dividends, shares, AssetSide.A, 0) == 0
        assert dividends.accumulator(AssetSide.A) == 0

    def test_negative_profit_raises(self, dividends, shares):
        with pytest.raises(ValueError):
            distribute(dividends, shares, AssetSide.A, -1)


class TestTimingIndependence:
    """Balance changes between two distributions do not leak entitlement."""

    def test_read_between_distributions_has_no_side_effects(self, dividends, shares):
        distribute(dividends, shares, AssetSide.B, ONE // 2)
        accrued(dividends, shares, ALICE, AssetSide.B)
        distribute(dividends, shares, AssetSide.B, ONE // 2)

        assert accrued(dividends, shares, ALICE, AssetSide.B) == 333333333333333333
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 666666666666666666

    def test_payout_between_distributions_has_no_side_effects(self, dividends, shares):
        distribute(dividends, shares, AssetSide.B, ONE // 2)
        _, first = pay_out(dividends, shares, ALICE)
        distribute(dividends, shares, AssetSide.B, ONE // 2)

        assert first == 166666666666666666
        remaining = accrued(dividends, shares, ALICE, AssetSide.B)
        # Paid plus remaining equals what an untouched holder accrues
        assert first + remaining == 333333333333333333
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 666666666666666666

    def test_mint_and_burn_between_distributions(self, dividends, shares):
        distribute(dividends, shares, AssetSide.B, ONE)
        shares.mint(ALICE, 100)
        distribute(dividends, shares, AssetSide.B, ONE)
        shares.burn(BILLY, 200)
        distribute(dividends, shares, AssetSide.B, ONE)

        # ONE * 100/300 + ONE * 200/400 + ONE * 200/200
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 1833333333333333333
        # ONE * 200/300 + ONE * 200/400 + ONE * 0/200
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 1166666666666666666

    def test_transfer_between_distributions(self, dividends, shares):
        distribute(dividends, shares, AssetSide.B, ONE)
        shares.transfer(ALICE, BILLY, 50)
        distribute(dividends, shares, AssetSide.B, ONE)

        # floor(ONE * 100/300) + floor(ONE * 50/300)
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 499999999999999999
        # floor(ONE * 200/300) + floor(ONE * 250/300)
        assert accrued(dividends, shares, BILLY, AssetSide.B) == 1499999999999999999

    def test_new_holder_owes_nothing_for_past_profit(self, dividends, shares):
        distribute(dividends, shares, AssetSide.A, ONE)
        shares.mint("0x00000000000000000000000000000000000000cc", 300)
        assert accrued(dividends, shares, "0x00000000000000000000000000000000000000cc", AssetSide.A) == 0

    def test_burned_shares_keep_their_entitlement(self, dividends, shares):
        distribute(dividends, shares, AssetSide.A, ONE)
        shares.burn(ALICE, 100)
        assert shares.balance_of(ALICE) == 0
        assert accrued(dividends, shares, ALICE, AssetSide.A) == 333333333333333333


BALANCE_CHANGES = [
    ("mint", LP1, 70),
    ("transfer", ALICE, BILLY, 40),
    ("burn", BILLY, 60),
    ("mint", ALICE, 25),
]
PROFITS = [ONE, 7 * ONE // 3, 12345678901234567, 5]


def apply_change(shares: ShareLedger, change: tuple) -> None:
    action, *args = change
    getattr(shares, action)(*args)


class TestInterleavings:
    """Accruals match pro rata shares of each distribution, in any order of balance changes."""

    @pytest.mark.parametrize("order", list(itertools.permutations(range(len(BALANCE_CHANGES)))))
    def test_accrual_matches_pro_rata_reference(self, dividends, shares, order):
        accounts = (ALICE, BILLY, LP1)
        exact = dict.fromkeys(accounts, Fraction(0))
        floors = dict.fromkeys(accounts, 0)
        # Sum of balances held at each distribution, bounds the magnified rounding
        held = dict.fromkeys(accounts, 0)

        for profit, index in zip(PROFITS, order, strict=True):
            apply_change(shares, BALANCE_CHANGES[index])
            distribute(dividends, shares, AssetSide.B, profit)
            total = shares.total_supply
            for account in accounts:
                balance = shares.balance_of(account)
                exact[account] += Fraction(profit * balance, total)
                floors[account] += profit * balance // total
                held[account] += balance

        for account in accounts:
            got = accrued(dividends, shares, account, AssetSide.B)
            lower = math.floor(exact[account] - Fraction(held[account], dividends.magnitude))
            assert lower <= got <= math.floor(exact[account])
            assert floors[account] - 1 <= got <= floors[account] + len(PROFITS) - 1

        paid = sum(accrued(dividends, shares, account, AssetSide.B) for account in accounts)
        assert paid <= sum(PROFITS)

class TestUndistributedProfit:
    """Profit that arrives while no shares exist."""

    def test_retain_then_release(self):
        dividends = DividendLedger(policy=UndistributedPolicy.RETAIN)
        assert dividends.receive_profit(AssetSide.A, 1_000, 0) == 0
        assert dividends.undistributed(AssetSide.A) == 1_000

        shares = ShareLedger(POOL_ID, dividends, name="n", symbol="s")
        shares.mint(ALICE, 10)
        dividends.release_undistributed(shares.total_supply)

        assert dividends.undistributed(AssetSide.A) == 0
        assert accrued(dividends, shares, ALICE, AssetSide.A) == 1_000

    def test_retained_profit_joins_next_distribution(self):
        dividends = DividendLedger()
        dividends.receive_profit(AssetSide.B, 500, 0)
        shares = ShareLedger(POOL_ID, dividends, name="n", symbol="s")
        shares.mint(ALICE, 10)

        assert dividends.receive_profit(AssetSide.B, 500, shares.total_supply) == 1_000
        assert accrued(dividends, shares, ALICE, AssetSide.B) == 1_000

    def test_discard(self):
        dividends = DividendLedger(policy=UndistributedPolicy.DISCARD)
        assert dividends.receive_profit(AssetSide.A, 1_000, 0) == 0
        assert dividends.undistributed(AssetSide.A) == 0

        shares = ShareLedger(POOL_ID, dividends, name="n", symbol="s")
        shares.mint(ALICE, 10)
        dividends.release_undistributed(shares.total_supply)
        assert accrued(dividends, shares, ALICE, AssetSide.A) == 0


class TestLedgerState:
    """Tests for rollback and bounds."""

    def test_rollback_restores_accumulator_and_withdrawals(self):
        undo = UndoLog()
        dividends = DividendLedger(undo=undo)
        shares = ShareLedger(POOL_ID, dividends, name="n", symbol="s", undo=undo)
        shares.mint(ALICE, 100)
        shares.mint(BILLY, 200)
        distribute(dividends, shares, AssetSide.A, ONE)
        undo.clear()

        pay_out(dividends, shares, ALICE)
        shares.transfer(BILLY, ALICE, 1)
        distribute(dividends, shares, AssetSide.A, ONE)
        undo.rollback()

        assert dividends.withdrawn(ALICE, AssetSide.A) == 0
        assert dividends.correction(ALICE, AssetSide.A) == 0
        assert dividends.correction(BILLY, AssetSide.A) == 0
        assert accrued(dividends, shares, ALICE, AssetSide.A) == 333333333333333333

    def test_rollback_forgets_new_accounts(self):
        undo = UndoLog()
        dividends = DividendLedger(undo=undo)
        shares = ShareLedger(POOL_ID, dividends, name="n", symbol="s", undo=undo)
        shares.mint(ALICE, 10)
        distribute(dividends, shares, AssetSide.B, ONE)
        undo.clear()

        shares.mint(BILLY, 10)
        undo.rollback()

        assert dividends.correction(BILLY, AssetSide.B) == 0
        assert shares.balance_of(BILLY) == 0

    def test_correction_overflow_raises(self):
        dividends = DividendLedger(magnitude=2**200)
        dividends.receive_profit(AssetSide.A, 2**50, 1)
        with pytest.raises(Int256Overflow):
            dividends.on_balance_change(ALICE, 2**10)

    def test_invalid_magnitude_raises(self):
        with pytest.raises(ValueError):
            DividendLedger(magnitude=0)
