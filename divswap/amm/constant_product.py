"""Fee-exclusive constant product AMM math.

Pools price swaps with x * y = k, but unlike UniswapV2 the fee never enters
the reserves: it is split off the input first and handed to the dividend
ledger. Only the net input moves the curve. The floor on amount_out means
the reserve product can only grow by rounding dust, so pools record k at
each liquidity change and swaps leave it untouched.

    fee = amount_in * fee_bps // 10000
    net = amount_in - fee
    amount_out = reserve_out * net // (reserve_in + net)

Liquidity math:

    first deposit:   shares = isqrt(amount_a * amount_b)
    later deposits:  amount_a * reserve_b == amount_b * reserve_a
                     shares = total_shares * amount_a // reserve_a
    removal:         out = reserve * shares // total_shares
"""

from __future__ import annotations

from divswap.amm.base import AMM
from divswap.constants import BPS_DENOMINATOR, FEE_BPS, UINT256_MAX
from divswap.safe_int import S


class ConstantProduct(AMM):
    """Constant product math with fees routed outside the reserves."""

    def split_fee(self, amount_in: int, fee_bps: int = FEE_BPS) -> tuple[int, int]:
        """Split a gross input into (fee, net).

        The fee is rounded down, so the net amount never loses more than
        fee_bps of the input.
        """
        fee = S(amount_in) * S(fee_bps) // S(BPS_DENOMINATOR)
        net = S(amount_in) - fee
        return fee.value, net.value

    def amount_out_for_net(self, amount_in_net: int, reserve_in: int, reserve_out: int) -> int:
        """Output for an input that already had the fee removed.

        Returns 0 for empty inputs or reserves.
        """
        if amount_in_net <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0
        numerator = S(reserve_out) * S(amount_in_net)
        denominator = S(reserve_in) + S(amount_in_net)
        return (numerator // denominator).value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int = FEE_BPS,
    ) -> int:
        """Calculate output amount for a gross input.

        Args:
            amount_in: Gross input amount (fee included)
            reserve_in: Reserve of the input asset
            reserve_out: Reserve of the output asset
            fee_bps: Fee in basis points (default 30)

        Returns:
            Output amount, 0 when the pool is empty or the input is 0
        """
        if amount_in <= 0:
            return 0
        _, net = self.split_fee(amount_in, fee_bps)
        return self.amount_out_for_net(net, reserve_in, reserve_out)

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int = FEE_BPS,
    ) -> int:
        """Smallest gross input whose output is at least amount_out.

        Returns:
            Required gross input, or max uint256 when amount_out cannot be
            reached (it would drain the output reserve)
        """
        if amount_out <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0
        if amount_out >= reserve_out:
            return UINT256_MAX

        # Net input needed, rounded up: reserve_in * out / (reserve_out - out)
        numerator = S(reserve_in) * S(amount_out)
        denominator = S(reserve_out) - S(amount_out)
        net_needed = numerator.div_up(denominator).value

        # Gross up for the fee, rounded up; the floor on the fee can make a
        # slightly smaller gross amount sufficient
        fee_multiplier = BPS_DENOMINATOR - fee_bps
        gross = (S(net_needed) * S(BPS_DENOMINATOR)).div_up(fee_multiplier).value
        while gross > 0 and self.split_fee(gross - 1, fee_bps)[1] >= net_needed:
            gross -= 1
        return gross

    def initial_shares(self, amount_a: int, amount_b: int) -> int:
        """Shares minted by the first deposit: floor(sqrt(a * b))."""
        return (S(amount_a) * S(amount_b)).sqrt().to_uint256()

    def is_proportional(self, amount_a: int, amount_b: int, reserve_a: int, reserve_b: int) -> bool:
        """Exact ratio check by cross-multiplication."""
        return S(amount_a) * S(reserve_b) == S(amount_b) * S(reserve_a)

    def proportional_shares(self, amount_a: int, reserve_a: int, total_shares: int) -> int:
        """Shares minted by a ratio-preserving deposit."""
        return (S(total_shares) * S(amount_a) // S(reserve_a)).to_uint256()

    def removal_amounts(
        self,
        shares: int,
        total_shares: int,
        reserve_a: int,
        reserve_b: int,
    ) -> tuple[int, int]:
        """Reserve amounts released by burning shares (rounded down)."""
        out_a = S(reserve_a) * S(shares) // S(total_shares)
        out_b = S(reserve_b) * S(shares) // S(total_shares)
        return out_a.value, out_b.value


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
