"""Share and dividend bookkeeping for a single pool.

- shares.py: ShareLedger (balances, supply, allowances)
- dividends.py: DividendLedger (per-share accumulators and corrections)
- undo.py: UndoLog (prior values of entries written by the current operation)
"""

from divswap.ledger.dividends import DividendLedger, UndistributedPolicy
from divswap.ledger.shares import ShareLedger
from divswap.ledger.undo import UndoLog

__all__ = ["DividendLedger", "ShareLedger", "UndistributedPolicy", "UndoLog"]
