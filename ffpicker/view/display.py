"""Display-string prefixes: source names and tree markers."""

from __future__ import annotations

import re

from ..item_model import Item

_WORD_TAIL_RE = re.compile(r"([a-zA-Z])[a-zA-Z]+")
_NON_ALPHA_RE = re.compile(r"[^a-zA-Z]")


def source_name_prefix(source_name: str, mode: str) -> str:
    """Return the source-name column for ``mode`` (``long``/``short``/``no``).

    Short names keep the first letter of each alphabetic run when the name
    has separators (``file_rec`` -> ``f_r``) and the first two characters
    otherwise.
    """
    if mode == "long":
        return source_name + " "
    if mode == "short":
        if _NON_ALPHA_RE.search(source_name):
            return _WORD_TAIL_RE.sub(r"\1", source_name) + " "
        return source_name[:2] + " "
    return ""


def tree_prefix(item: Item) -> str:
    """Return indentation plus ``+``/``-`` marker for tree display."""
    if not item.is_tree:
        marker = "  "
    elif item.expanded:
        marker = "- "
    else:
        marker = "+ "
    return " " * max(0, item.level) + marker


def item_prefix(item: Item, source_name_mode: str, display_tree: bool) -> str:
    prefix = source_name_prefix(item.source_name, source_name_mode)
    if display_tree:
        prefix += tree_prefix(item)
    return prefix


def display_line(item: Item, source_name_mode: str, display_tree: bool) -> str:
    """Return the full rendered string for one item."""
    return item_prefix(item, source_name_mode, display_tree) + item.text
