"""In-memory fungible asset ledger.

Reference implementation of the AssetLedger protocol, used for scenario
replay and tests. Behaves like a plain ERC20: transfers and pulls return
False instead of raising when the balance or allowance is short.
"""

from __future__ import annotations

from collections import defaultdict

import structlog

from divswap.models.types import normalize_address

logger = structlog.get_logger()


class InMemoryAsset:
    """ERC20-like balance, transfer and allowance table."""

    def __init__(
        self,
        address: str,
        symbol: str = "",
        initial_holder: str | None = None,
        initial_supply: int = 0,
    ) -> None:
        self._address = normalize_address(address, validate=True)
        self.symbol = symbol
        self._balances: defaultdict[str, int] = defaultdict(int)
        self._allowances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self.total_supply = 0
        if initial_holder is not None and initial_supply > 0:
            self.mint(initial_holder, initial_supply)

    @property
    def address(self) -> str:
        return self._address

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Mint amount cannot be negative: {amount}")
        self._balances[normalize_address(to)] += amount
        self.total_supply += amount

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        sender, to = normalize_address(sender), normalize_address(to)
        if amount < 0 or self._balances.get(sender, 0) < amount:
            logger.debug(
                "asset_transfer_rejected",
                asset=self.symbol or self._address[-8:],
                sender=sender[-8:],
                amount=amount,
            )
            return False
        self._balances[sender] -= amount
        self._balances[to] += amount
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        self._allowances[(normalize_address(owner), normalize_address(spender))] = amount
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        key = (normalize_address(owner), normalize_address(spender))
        if amount < 0 or self._allowances.get(key, 0) < amount:
            logger.debug(
                "asset_pull_rejected",
                asset=self.symbol or self._address[-8:],
                owner=key[0][-8:],
                spender=key[1][-8:],
                amount=amount,
            )
            return False
        if not self.transfer(owner, to, amount):
            return False
        self._allowances[key] -= amount
        return True

    def __repr__(self) -> str:
        return f"InMemoryAsset({self.symbol or self._address})"
