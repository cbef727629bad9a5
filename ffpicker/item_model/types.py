"""Item datatypes shared by the store, view, and preview modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TreePath = str | tuple[str, ...] | None


def normalize_tree_path(tree_path: object) -> TreePath:
    """Return a hashable, deep-comparable form of ``tree_path``.

    Providers may hand over tree paths as lists; those become tuples so that
    plain ``==`` performs the deep comparison identity lookups rely on.
    """
    if tree_path is None or isinstance(tree_path, str):
        return tree_path
    if isinstance(tree_path, (list, tuple)):
        return tuple(str(part) for part in tree_path)
    return str(tree_path)


@dataclass(frozen=True)
class ItemIdentity:
    """(tree path, source index) pair recognizing one logical item."""

    tree_path: TreePath
    source_index: int


@dataclass(frozen=True)
class ItemHighlight:
    """One highlight span inside an item's text (1-based character column)."""

    name: str
    hl_group: str
    col: int
    width: int


@dataclass(frozen=True)
class Item:
    """One entry received from the item provider.

    Items are read-only; tree state changes produce updated copies via
    ``dataclasses.replace``.
    """

    word: str
    display: str | None = None
    tree_path: TreePath = None
    source_index: int = 0
    source_name: str = ""
    level: int = 0
    is_tree: bool = False
    expanded: bool = False
    highlights: tuple[ItemHighlight, ...] = ()
    data: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tree_path", normalize_tree_path(self.tree_path))
        object.__setattr__(self, "highlights", tuple(self.highlights))

    @property
    def identity(self) -> ItemIdentity:
        return ItemIdentity(self.tree_path, self.source_index)

    @property
    def text(self) -> str:
        """Text shown for the item, preferring ``display`` over ``word``."""
        return self.display if self.display is not None else self.word
