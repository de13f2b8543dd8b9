"""Per-operation undo log for the share and dividend ledgers.

Ledgers record the prior value of each entry they are about to overwrite.
Rolling back replays those values newest first, so a failed operation
costs time proportional to what it touched, not to the number of holders.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, MutableMapping
from typing import Any


class UndoLog:
    """Prior values of ledger entries written since the last clear()."""

    def __init__(self) -> None:
        self._entries: list[Callable[[], None]] = []

    def save_item(self, table: MutableMapping[Any, Any], key: Hashable) -> None:
        """Remember table[key] (or its absence) before it is written."""
        if key in table:
            old = table[key]
            self._entries.append(lambda: table.__setitem__(key, old))
        else:
            self._entries.append(lambda: table.pop(key, None))

    def save_attr(self, obj: object, name: str) -> None:
        old = getattr(obj, name)
        self._entries.append(lambda: setattr(obj, name, old))

    def rollback(self) -> None:
        """Restore every saved value, newest first, then clear the log."""
        while self._entries:
            self._entries.pop()()

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
