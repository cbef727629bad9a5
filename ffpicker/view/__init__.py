"""View projection: display order, cursor arithmetic, and display strings."""

from __future__ import annotations

from .display import display_line, item_prefix, source_name_prefix, tree_prefix
from .projector import ViewProjector

__all__ = [
    "ViewProjector",
    "display_line",
    "item_prefix",
    "source_name_prefix",
    "tree_prefix",
]
