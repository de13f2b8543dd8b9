"""Event records produced for observers.

Registry events (OwnerAdded, OwnerRemoved, PoolAdded) and the share
Transfer record are the only externally observable side-channel signals.
Observers subscribe to an EventLog to refresh their cached views.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from divswap.models.types import Address, Uint256

logger = structlog.get_logger()


class OwnerAdded(BaseModel):
    """An account was granted the owner role."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["owner_added"] = "owner_added"
    account: Address


class OwnerRemoved(BaseModel):
    """An owner renounced its role."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["owner_removed"] = "owner_removed"
    account: Address


class PoolAdded(BaseModel):
    """A new pool was deployed for an asset pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["pool_added"] = "pool_added"
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")
    pool_id: Address = Field(alias="poolId")


class Transfer(BaseModel):
    """Movement of pool shares (mint and burn use the zero address)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["transfer"] = "transfer"
    pool_id: Address = Field(alias="poolId")
    sender: Address
    recipient: Address
    amount: Uint256


Event = Annotated[
    OwnerAdded | OwnerRemoved | PoolAdded | Transfer,
    Field(discriminator="kind"),
]

Listener = Callable[[Event], None]


class EventLog:
    """Append-only record of emitted events with observer fan-out.

    Listeners are called synchronously, in subscription order, after the
    event is appended. Events are emitted once the operation that produced
    them has committed, so a failing listener is logged and skipped; it
    never turns a committed operation into a failure.
    """

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._listeners: list[Listener] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)
        logger.debug("event_emitted", kind=event.kind)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "listener_failed",
                    kind=event.kind,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def events(self) -> list[Event]:
        """Snapshot of all emitted events, oldest first."""
        return list(self._events)

    def of_kind(self, kind: str) -> list[Event]:
        return [event for event in self._events if event.kind == kind]

    def __len__(self) -> int:
        return len(self._events)
