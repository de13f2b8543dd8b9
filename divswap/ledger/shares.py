"""LP share ledger.

Fungible, transferable shares representing ownership of one pool's reserves
and dividend entitlement. Every balance change is reported to the pool's
DividendLedger so that accrued dividends do not depend on when the change
happened between two distributions.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from divswap.constants import ZERO_ADDRESS
from divswap.errors import InsufficientAllowance, InsufficientBalance, InsufficientShares
from divswap.ledger.dividends import DividendLedger
from divswap.ledger.undo import UndoLog
from divswap.models.events import Transfer
from divswap.models.types import normalize_address
from divswap.safe_int import S

logger = structlog.get_logger()


class ShareLedger:
    """Balance, supply and allowance table for one pool's shares."""

    def __init__(
        self,
        pool_id: str,
        dividends: DividendLedger,
        name: str,
        symbol: str,
        emit: Callable[[Transfer], None] | None = None,
        undo: UndoLog | None = None,
    ) -> None:
        self.pool_id = normalize_address(pool_id)
        self.name = name
        self.symbol = symbol
        self._dividends = dividends
        self._emit = emit
        self._undo = undo
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def holders(self) -> list[str]:
        """Accounts with a non-zero balance, in first-credit order."""
        return [account for account, balance in self._balances.items() if balance > 0]

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Authorize spender to move up to amount of owner's shares."""
        S(amount).to_uint256()
        key = (normalize_address(owner), normalize_address(spender))
        self._save(self._allowances, key)
        self._allowances[key] = amount

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """Move amount shares from sender to to.

        Raises:
            InsufficientBalance: If amount exceeds the sender's balance
        """
        sender, to = normalize_address(sender), normalize_address(to)
        balance = self._balances.get(sender, 0)
        if amount < 0 or amount > balance:
            raise InsufficientBalance(
                f"Share transfer of {amount} exceeds balance {balance} of {sender}"
            )

        self._save(self._balances, sender)
        self._save(self._balances, to)
        self._balances[sender] = (S(balance) - S(amount)).value
        self._balances[to] = (S(self._balances.get(to, 0)) + S(amount)).to_uint256()
        self._dividends.on_transfer(sender, to, amount)
        self._record(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        """Move owner's shares on its behalf, consuming spender's allowance.

        Raises:
            InsufficientAllowance: If amount exceeds the allowance
            InsufficientBalance: If amount exceeds the owner's balance
        """
        key = (normalize_address(owner), normalize_address(spender))
        allowed = self._allowances.get(key, 0)
        if amount > allowed:
            raise InsufficientAllowance(f"Allowance {allowed} of {key[1]} is below {amount}")
        self.transfer(owner, to, amount)
        self._save(self._allowances, key)
        self._allowances[key] = allowed - amount

    def mint(self, to: str, amount: int) -> None:
        to = normalize_address(to)
        self._save_supply()
        self._save(self._balances, to)
        self._total_supply = (S(self._total_supply) + S(amount)).to_uint256()
        self._balances[to] = (S(self._balances.get(to, 0)) + S(amount)).to_uint256()
        self._dividends.on_balance_change(to, amount)
        self._record(ZERO_ADDRESS, to, amount)

    def burn(self, account: str, amount: int) -> None:
        """Destroy amount of account's shares.

        Raises:
            InsufficientShares: If amount exceeds the account's balance
        """
        account = normalize_address(account)
        balance = self._balances.get(account, 0)
        if amount > balance:
            raise InsufficientShares(f"Cannot burn {amount} shares, {account} holds {balance}")
        self._save_supply()
        self._save(self._balances, account)
        self._balances[account] = balance - amount
        self._total_supply = (S(self._total_supply) - S(amount)).value
        self._dividends.on_balance_change(account, -amount)
        self._record(account, ZERO_ADDRESS, amount)

    def _record(self, sender: str, recipient: str, amount: int) -> None:
        logger.debug(
            "shares_moved",
            pool=self.pool_id[-8:],
            sender=sender[-8:],
            recipient=recipient[-8:],
            amount=amount,
        )
        if self._emit is not None:
            self._emit(
                Transfer(pool_id=self.pool_id, sender=sender, recipient=recipient, amount=amount)
            )

    def _save(self, table: dict, key: object) -> None:
        if self._undo is not None:
            self._undo.save_item(table, key)

    def _save_supply(self) -> None:
        if self._undo is not None:
            self._undo.save_attr(self, "_total_supply")
