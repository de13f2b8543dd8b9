"""Shared address and amount constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import GOLD, SILVER, ALICE
    # or
    from tests.helpers.constants import GOLD, SILVER, ALICE
"""

# =============================================================================
# Assets
# =============================================================================

GOLD = "0x601d000000000000000000000000000000000001"
SILVER = "0x5170000000000000000000000000000000000002"
BRONZE = "0xb705000000000000000000000000000000000003"

# =============================================================================
# Accounts
# =============================================================================

OWNER = "0x0000000000000000000000000000000000000a11"
ALICE = "0x00000000000000000000000000000000000a1ce0"
BILLY = "0x0000000000000000000000000000000000b111e0"
LP1 = "0x000000000000000000000000000000000000001a"
LP2 = "0x000000000000000000000000000000000000002a"
SWAPPER = "0x0000000000000000000000000000000000005a9a"
# Registered nowhere: a plain account, not an asset
NOT_AN_ASSET = "0x000000000000000000000000000000000000dead"

# =============================================================================
# Amounts (18 decimals)
# =============================================================================

ONE = 10**18

OWNER_SUPPLY = 10 * ONE
LP_FUNDING = 2 * ONE
SWAPPER_GOLD = ONE // 10
SWAPPER_SILVER = ONE // 2

# Reference deposit used throughout the pool tests
INITIAL_GOLD = 2 * ONE // 10
INITIAL_SILVER = ONE
INITIAL_SHARES = 447213595499957939
