"""Pydantic models for events, operation requests and shared field types."""

from divswap.models.events import (
    Event,
    EventLog,
    OwnerAdded,
    OwnerRemoved,
    PoolAdded,
    Transfer,
)
from divswap.models.operations import Operation, OperationResult, Scenario
from divswap.models.types import Address, AssetSide, Uint256, normalize_address

__all__ = [
    # Types
    "Address",
    "AssetSide",
    "Uint256",
    "normalize_address",
    # Events
    "Event",
    "EventLog",
    "OwnerAdded",
    "OwnerRemoved",
    "PoolAdded",
    "Transfer",
    # Operations
    "Operation",
    "OperationResult",
    "Scenario",
]
