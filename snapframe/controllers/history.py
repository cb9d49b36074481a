"""Linear edit history for the single-image editor.

Snapshots are kept in an append-only arena with an index pointing at the
current entry.  Undo moves the index back and never goes below the
original image (entry 0); redo moves it forward again.  Pushing a new
snapshot after an undo discards the entries past the index, so history
stays linear.
"""

from __future__ import annotations

from typing import Generic, List, TypeVar

T = TypeVar("T")


class RedoUnavailableError(RuntimeError):
    """Raised when a redo operation is requested with no history."""


class EditHistory(Generic[T]):
    """Manage editor snapshots independently of the editing operations."""

    def __init__(self, original: T) -> None:
        self._snapshots: List[T] = [original]
        self._index = 0

    def __len__(self) -> int:
        """Number of entries up to and including the current one."""
        return self._index + 1

    @property
    def current(self) -> T:
        return self._snapshots[self._index]

    @property
    def original(self) -> T:
        return self._snapshots[0]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def push(self, snapshot: T) -> T:
        """Append ``snapshot`` as the new current entry."""
        del self._snapshots[self._index + 1:]
        self._snapshots.append(snapshot)
        self._index += 1
        return snapshot

    def undo(self) -> T:
        """Step back one entry; at the original this is a no-op."""
        if self.can_undo:
            self._index -= 1
        return self.current

    def redo(self) -> T:
        """Reapply the entry most recently undone."""
        if not self.can_redo:
            raise RedoUnavailableError("No redo history is available")
        self._index += 1
        return self.current

    def reset(self, original: T) -> None:
        """Drop all entries and start over from ``original``."""
        self._snapshots = [original]
        self._index = 0
