"""Configuration for pools and logging."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog

from divswap.constants import (
    BPS_DENOMINATOR,
    DEFAULT_SHARE_NAME,
    DEFAULT_SHARE_SYMBOL_PREFIX,
    DIVIDEND_MAGNITUDE,
    FEE_BPS,
)
from divswap.ledger.dividends import UndistributedPolicy


@dataclass(frozen=True)
class PoolConfig:
    """Parameters shared by every pool a registry deploys.

    Attributes:
        fee_bps: Swap fee in basis points, paid to share holders (default: 30)
        dividend_magnitude: Accumulator scaling factor (default: 2^128)
        undistributed_policy: What to do with profit that arrives while no
            shares exist (default: retain until shares exist)
        share_name: Name of the share token of every pool
        share_symbol_prefix: Share symbols are "<prefix>-<A>-<B>"
    """

    fee_bps: int = FEE_BPS
    dividend_magnitude: int = DIVIDEND_MAGNITUDE
    undistributed_policy: UndistributedPolicy = UndistributedPolicy.RETAIN
    share_name: str = DEFAULT_SHARE_NAME
    share_symbol_prefix: str = DEFAULT_SHARE_SYMBOL_PREFIX

    def __post_init__(self) -> None:
        # Accept the plain string values used in env vars and scenario files
        object.__setattr__(
            self, "undistributed_policy", UndistributedPolicy(self.undistributed_policy)
        )
        if not 0 <= self.fee_bps < BPS_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOMINATOR}), got {self.fee_bps}")
        if self.dividend_magnitude <= 0:
            raise ValueError(f"dividend_magnitude must be positive, got {self.dividend_magnitude}")

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables.

        - DIVSWAP_FEE_BPS: Swap fee in basis points (default: 30)
        - DIVSWAP_UNDISTRIBUTED_POLICY: "retain" or "discard" (default: retain)
        - DIVSWAP_SHARE_NAME: Share token name
        """
        return cls(
            fee_bps=int(os.environ.get("DIVSWAP_FEE_BPS", str(FEE_BPS))),
            undistributed_policy=UndistributedPolicy(
                os.environ.get("DIVSWAP_UNDISTRIBUTED_POLICY", UndistributedPolicy.RETAIN.value)
            ),
            share_name=os.environ.get("DIVSWAP_SHARE_NAME", DEFAULT_SHARE_NAME),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()


def configure_logging(level: str | int | None = None, *, json: bool = False) -> None:
    """Configure structlog for scripts and embedding applications.

    Args:
        level: Log level name or number; falls back to DIVSWAP_LOG_LEVEL,
            then INFO
        json: Render JSON lines instead of the console format
    """
    if level is None:
        level = os.environ.get("DIVSWAP_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
