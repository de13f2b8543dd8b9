"""Test helpers module for shared test utilities.

- constants: Asset and account addresses, common amounts
- factories: Asset, directory and pool factories plus approve-then-act helpers
"""

from tests.helpers.constants import (
    ALICE,
    BILLY,
    BRONZE,
    GOLD,
    INITIAL_GOLD,
    INITIAL_SHARES,
    INITIAL_SILVER,
    LP1,
    LP2,
    NOT_AN_ASSET,
    ONE,
    OWNER,
    SILVER,
    SWAPPER,
)
from tests.helpers.factories import (
    approve,
    make_asset,
    make_directory,
    make_pool,
    provide,
    swap,
)

__all__ = [
    # Constants
    "GOLD",
    "SILVER",
    "BRONZE",
    "OWNER",
    "ALICE",
    "BILLY",
    "LP1",
    "LP2",
    "SWAPPER",
    "NOT_AN_ASSET",
    "ONE",
    "INITIAL_GOLD",
    "INITIAL_SILVER",
    "INITIAL_SHARES",
    # Factories
    "make_asset",
    "make_directory",
    "make_pool",
    "approve",
    "provide",
    "swap",
]
