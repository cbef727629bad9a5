"""Selected-item bookkeeping keyed by item-store index."""

from __future__ import annotations


class SelectionSet:
    """Set of selected store indices.

    Indices are only meaningful for the store layout they were taken from, so
    the store clears this set on every structural change.
    """

    def __init__(self) -> None:
        self._indices: set[int] = set()

    def __contains__(self, index: object) -> bool:
        return index in self._indices

    def __len__(self) -> int:
        return len(self._indices)

    def __bool__(self) -> bool:
        return bool(self._indices)

    def indices(self) -> list[int]:
        """Return selected indices in ascending order."""
        return sorted(self._indices)

    def toggle(self, index: int) -> None:
        if index in self._indices:
            self._indices.remove(index)
        else:
            self._indices.add(index)

    def toggle_all(self, count: int) -> None:
        """Flip membership of every index in ``range(count)``."""
        self._indices ^= set(range(max(0, count)))

    def clear(self) -> None:
        self._indices.clear()
