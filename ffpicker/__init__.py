"""Public package surface for ffpicker.

Exports the list engine (``ListUi``) and its item types. ``main`` lazily
imports the terminal CLI so engine imports stay lightweight.
"""

from __future__ import annotations

from .actions import ActionFlags, UnknownActionError
from .config import UiParams
from .item_model import Item, ItemHighlight, ItemIdentity, ItemStore, SelectionSet
from .ui import ListUi


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ActionFlags",
    "Item",
    "ItemHighlight",
    "ItemIdentity",
    "ItemStore",
    "ListUi",
    "SelectionSet",
    "UiParams",
    "UnknownActionError",
    "main",
]
