"""Shared type definitions for registry, pool and operation models."""

import string
from enum import Enum
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

# Upper bound for Uint256 fields; kept here since constants imports this module
_UINT256_LIMIT = 1 << 256


class AssetSide(str, Enum):
    """Which side of a pool's pair an asset sits on.

    Resolved once per call from an asset address; everything downstream
    (reserves, dividend accumulators) is keyed by the side.
    """

    A = "a"
    B = "b"

    @property
    def other(self) -> "AssetSide":
        return AssetSide.B if self is AssetSide.A else AssetSide.A


def validate_uint256(value: Any) -> int:
    """Coerce an operation amount into an int in [0, 2^256).

    Scenario files may carry large amounts as decimal strings so JSON
    readers that parse numbers as floats keep full precision.

    Raises:
        ValueError: For bools, non-integers, or values outside uint256
    """
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    elif isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected a uint256 amount, got {value!r}")

    if not 0 <= value < _UINT256_LIMIT:
        raise ValueError(f"amount {value} is outside the uint256 range")
    return value


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """True for "0x" followed by exactly 40 hex digits."""
    if not isinstance(address, str) or len(address) != 42 or address[:2] != "0x":
        return False
    return all(ch in string.hexdigits for ch in address[2:])


# 20-byte hex address, normalized to lowercase
Address = Annotated[
    str,
    Field(pattern=r"^0x[a-fA-F0-9]{40}$"),
    AfterValidator(normalize_address),
]

# 256-bit unsigned integer (accepts int or decimal string, stored as int)
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer"),
]
