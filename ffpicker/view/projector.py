"""Display-order projection of the item store.

Display lines are 1-based and follow the host buffer. With ``reversed`` the
last store item sits on line 1. Every conversion between cursor lines and
store indices goes through :class:`ViewProjector`; callers never assume the
forward mapping.
"""

from __future__ import annotations

from ..config import UiParams
from ..host import HighlightRequest
from ..item_model import Item, ItemStore, SelectionSet
from .display import display_line, item_prefix


class ViewProjector:
    """Map between display lines and store indices for one item store."""

    def __init__(self, store: ItemStore, reversed: bool = False) -> None:
        self.store = store
        self.reversed = reversed

    def __len__(self) -> int:
        return len(self.store)

    def index_for_line(self, line: int) -> int:
        """Return store index shown on display ``line``, ``-1`` outside range."""
        count = len(self.store)
        if line < 1 or line > count:
            return -1
        return count - line if self.reversed else line - 1

    def line_for_index(self, index: int) -> int:
        """Return display line showing store ``index``, ``0`` outside range."""
        count = len(self.store)
        if index < 0 or index >= count:
            return 0
        return count - index if self.reversed else index + 1

    def item_for_line(self, line: int) -> Item | None:
        index = self.index_for_line(line)
        return self.store.item_at(index) if index >= 0 else None

    def view_items(self) -> list[Item]:
        """Return items in display order."""
        items = self.store.items
        if self.reversed:
            items.reverse()
        return items

    def move_cursor(self, line: int, count: int, loop: bool, forward: bool = True) -> int:
        """Return the display line reached by moving ``count`` items.

        ``forward`` means towards later store items, which is upwards on
        screen when reversed. Overshooting wraps with ``loop`` and clamps
        otherwise.
        """
        total = len(self.store)
        step = count if forward != self.reversed else -count
        target = line + step
        if target <= 0:
            target = total if loop else 1
        elif target > total:
            target = 1 if loop else total
        return target

    def display_lines(self, params: UiParams) -> list[str]:
        return [
            display_line(item, params.display_source_name, params.display_tree)
            for item in self.view_items()
        ]

    def highlight_requests(
        self,
        params: UiParams,
        selection: SelectionSet,
    ) -> tuple[list[HighlightRequest], list[int]]:
        """Return per-line highlight requests and selected display lines.

        Only the first ``max_highlight_items`` store items are considered;
        selected items are skipped because the selection highlight wins.
        """
        requests: list[HighlightRequest] = []
        limit = max(0, params.max_highlight_items)
        for index, item in enumerate(self.store.items[:limit]):
            if not item.highlights or index in selection:
                continue
            requests.append(
                HighlightRequest(
                    line=self.line_for_index(index),
                    prefix=item_prefix(item, params.display_source_name, params.display_tree),
                    highlights=item.highlights,
                )
            )
        selected_lines = [self.line_for_index(index) for index in selection.indices()]
        return requests, [line for line in selected_lines if line > 0]

    def needs_forced_redraw(self, input_text: str) -> bool:
        """Return whether a refresh should re-render with cursor reset.

        True when the filter input changed since the previous refresh, when
        items were removed, or when a reversed view changed length (every
        line shifts in that case).
        """
        count = len(self.store)
        previous = self.store.prev_length
        return (
            input_text != self.store.prev_input
            or (previous > 0 and count < previous)
            or (self.reversed and count != previous)
        )
