"""AMM (Automated Market Maker) pricing."""

from divswap.amm.base import AMM, DividendAmounts, LiquidityResult, RemovalResult, SwapResult
from divswap.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    # Base classes
    "AMM",
    "SwapResult",
    "LiquidityResult",
    "RemovalResult",
    "DividendAmounts",
    # Constant product
    "ConstantProduct",
    "constant_product",
]
