"""Canonical ordered item sequence with tree splice operations.

The store is the one source of truth for what the list shows. Tree expansion
splices children directly after their parent, so an expanded node's
descendants always form one contiguous run of deeper levels. Every lookup is
by identity (tree path + source index), because providers rebuild items with
equal but distinct payloads between calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .selection import SelectionSet
from .types import Item, ItemIdentity


class ItemStore:
    """Ordered items plus refresh bookkeeping used by redraw heuristics."""

    def __init__(self, selection: SelectionSet | None = None) -> None:
        self.selection = selection if selection is not None else SelectionSet()
        self._items: list[Item] = []
        self.prev_length = -1
        self.prev_input = ""
        self.input_text = ""
        self.refreshed = False

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Item:
        return self._items[index]

    @property
    def items(self) -> list[Item]:
        """Return a copy of the current sequence."""
        return list(self._items)

    def item_at(self, index: int) -> Item | None:
        """Return item at ``index`` or ``None`` when out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def find_index(self, target: Item | ItemIdentity) -> int:
        """Return store index of ``target`` by identity, ``-1`` when absent."""
        identity = target.identity if isinstance(target, Item) else target
        for idx, item in enumerate(self._items):
            if item.tree_path == identity.tree_path and item.source_index == identity.source_index:
                return idx
        return -1

    def replace(self, items: Sequence[Item], max_display: int, input_text: str = "") -> None:
        """Install a new item batch truncated to ``max_display`` entries."""
        self.prev_length = len(self._items)
        self.prev_input = self.input_text
        self.input_text = input_text
        self._items = list(items[: max(0, max_display)])
        self.selection.clear()
        self.refreshed = True

    def clear(self) -> None:
        self._items = []
        self.selection.clear()

    def mark_drawn(self) -> None:
        """Record that the latest replacement has reached the host view."""
        self.refreshed = False

    def expand(self, parent: Item, children: Sequence[Item], grouped: bool = False) -> int:
        """Splice ``children`` under ``parent`` and return the children added count.

        Grouped expansion replaces the parent entry with ``children[0]``.
        Unknown parents get their children appended at the end.
        """
        previous_length = len(self._items)
        index = self.find_index(parent)
        if index >= 0:
            if grouped:
                if children:
                    self._items[index] = children[0]
            else:
                self._items[index + 1 : index + 1] = list(children)
                self._items[index] = parent
        else:
            self._items.extend(children)

        self.selection.clear()
        return len(self._items) - previous_length

    def collapse(self, item: Item) -> int:
        """Remove the descendant run of ``item`` and return the removed count."""
        if not item.is_tree or item.level < 0:
            return 0
        start = self.find_index(item)
        if start < 0:
            return 0

        end = len(self._items)
        for idx in range(start + 1, len(self._items)):
            if self._items[idx].level <= item.level:
                end = idx
                break

        removed = end - start - 1
        del self._items[start + 1 : end]
        self._items[start] = item
        self.selection.clear()
        return removed


def expanded_copy(item: Item, expanded: bool = True) -> Item:
    """Return ``item`` with its ``expanded`` flag set."""
    return replace(item, expanded=expanded)
