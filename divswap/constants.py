"""Protocol constants for the divswap settlement core.

Centralizes fee parameters, dividend precision and well-known addresses.
"""

from divswap.models.types import is_valid_address

# Swap fee in basis points (30 = 0.3%)
FEE_BPS = 30
BPS_DENOMINATOR = 10_000

# Scaling factor for the dividend accumulator (profit per share * M)
# 2^128 keeps per-distribution rounding far below one base unit
DIVIDEND_MAGNITUDE = 2**128

UINT256_MAX = 2**256 - 1
INT256_MAX = 2**255 - 1
INT256_MIN = -(2**255)


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Source of minted shares / destination of burned shares in Transfer records
ZERO_ADDRESS = _validate_address("zero", "0x0000000000000000000000000000000000000000")

# Default share token metadata
DEFAULT_SHARE_NAME = "Liquidity Pool Shares"
DEFAULT_SHARE_SYMBOL_PREFIX = "LP"
