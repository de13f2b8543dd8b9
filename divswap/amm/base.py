"""Base classes and result types for AMM implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True)
class SwapResult:
    """Result of executing (or quoting) a swap through a pool."""

    amount_in: int
    amount_out: int
    pool_address: str
    token_in: str
    token_out: str
    # Portion of amount_in credited to liquidity providers, not to reserves
    fee: int = 0

    @property
    def amount_in_net(self) -> int:
        return self.amount_in - self.fee


@dataclass(frozen=True)
class LiquidityResult:
    """Result of providing liquidity."""

    amount_a: int
    amount_b: int
    shares_minted: int
    pool_address: str


@dataclass(frozen=True)
class RemovalResult:
    """Result of removing liquidity."""

    shares_burned: int
    amount_a: int
    amount_b: int
    pool_address: str


class DividendAmounts(NamedTuple):
    """Accrued (or paid) dividends for both sides of a pool."""

    amount_a: int
    amount_b: int


class AMM(ABC):
    """Abstract base class for AMM pricing math.

    Implementations may extend the base method signatures with additional
    optional parameters (e.g. a fee in basis points).
    """

    @abstractmethod
    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
    ) -> int:
        """Calculate output amount for a given gross input."""
        ...

    @abstractmethod
    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
    ) -> int:
        """Calculate the gross input required for a desired output."""
        ...
