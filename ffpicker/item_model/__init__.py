"""Item model: immutable items, the ordered store, and the selection set."""

from __future__ import annotations

from .selection import SelectionSet
from .store import ItemStore, expanded_copy
from .types import Item, ItemHighlight, ItemIdentity, normalize_tree_path

__all__ = [
    "Item",
    "ItemHighlight",
    "ItemIdentity",
    "ItemStore",
    "SelectionSet",
    "expanded_copy",
    "normalize_tree_path",
]
