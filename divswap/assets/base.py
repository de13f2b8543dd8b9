"""Fungible asset capability consumed by pools.

Pools never implement asset ledgers; they only call this protocol to pull
caller funds (after the caller approved the pool) and to push payouts.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """Interface every tradeable asset must satisfy.

    Transfers return False (or raise) on failure; pools treat both the same
    way and abort the whole operation.
    """

    @property
    def address(self) -> str:
        """Address the asset is registered under."""
        ...

    def balance_of(self, account: str) -> int:
        """Balance held by account."""
        ...

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move amount from sender to to."""
        ...

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Authorize spender to pull up to amount from owner."""
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Pull amount from owner to to, consuming spender's allowance."""
        ...
