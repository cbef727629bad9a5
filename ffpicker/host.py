"""Boundary types between the list engine and its host collaborators.

The engine never draws text or manages windows itself. It talks to a
``HostSurface`` (window, buffer, cursor, preview surface, messages) and a
``Dispatcher`` (the fuzzy-finder core that owns sources, item actions, and
redraw scheduling). Both are injected, which keeps the engine testable with
recording fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .item_model import Item, ItemHighlight


@dataclass
class Context:
    """Per-session state shared with the dispatcher."""

    input: str = ""
    done: bool = True
    max_items: int = 0
    path: str = ""
    win_id: int = -1


@dataclass(frozen=True)
class Options:
    """Session options relevant to the list UI."""

    name: str = "default"
    sync: bool = False
    sources: tuple[str, ...] = ()


@dataclass(frozen=True)
class HostLayout:
    """Host screen size plus the main list window rectangle (0-based)."""

    columns: int
    lines: int
    win_row: int = 0
    win_col: int = 0
    win_width: int = 0
    win_height: int = 0


@dataclass(frozen=True)
class WindowSpec:
    """Main list window request derived from resolved params."""

    split: str
    split_direction: str
    width: int
    height: int
    row: int = 0
    col: int = 0
    border: str | list[str] = "none"
    title: str = ""
    title_pos: str = "left"
    reversed: bool = False


@dataclass(frozen=True)
class HighlightRequest:
    """Highlights to apply on one display line."""

    line: int
    prefix: str
    highlights: tuple[ItemHighlight, ...]


@dataclass(frozen=True)
class StatusState:
    """Values a host statusline formatter needs."""

    name: str
    input: str
    done: bool
    item_count: int
    max_items: int


@dataclass(frozen=True)
class PreviewContext:
    """Geometry handed to preview content resolution.

    Border, title and z-index only apply to floating previews.
    """

    row: int
    col: int
    width: int
    height: int
    is_floating: bool
    split: str
    border: str | list[str] = "none"
    title: str = ""
    title_pos: str = "left"
    zindex: int = 100


@dataclass(frozen=True)
class PreviewContent:
    """Renderable preview payload produced by a content resolver."""

    lines: tuple[str, ...] = ()
    path: str | None = None
    syntax: str | None = None
    line_number: int = 0
    title: str = ""


PreviewResolver = Callable[[Item, dict[str, Any], PreviewContext], PreviewContent | None]


class HostSurface(Protocol):
    """Host calls used by the list engine."""

    def window_id(self) -> int: ...

    def open_window(self, spec: WindowSpec) -> None: ...

    def update_buffer(self, lines: Sequence[str], force: bool, cursor_pos: int) -> None: ...

    def highlight_items(self, requests: Sequence[HighlightRequest], selected_lines: Sequence[int]) -> None: ...

    def cursor_line(self) -> int: ...

    def set_cursor_line(self, line: int) -> None: ...

    def layout(self) -> HostLayout: ...

    def set_status(self, state: StatusState) -> None: ...

    def evaluate(self, expr: str, context: dict[str, object]) -> object: ...

    def open_preview(self, context: PreviewContext, content: PreviewContent) -> int: ...

    def update_preview(self, handle: int, context: PreviewContext, content: PreviewContent) -> None: ...

    def close_preview(self, handle: int) -> None: ...

    def execute_in_preview(self, handle: int, command: str) -> None: ...

    def close_window(self, cancel: bool) -> None: ...

    def open_filter(self, params: Any, text: str, item_count: int) -> None: ...

    def input_list(self, prompt: str, choices: Sequence[str]) -> str: ...

    def echo(self, text: str) -> None: ...

    def report_error(self, message: str) -> None: ...


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


@dataclass(frozen=True)
class Dispatcher:
    """Callbacks into the fuzzy-finder core that owns sources and actions."""

    redraw: Callable[..., None] = _noop
    redraw_tree: Callable[..., None] = _noop
    item_action: Callable[[str, str, list[Item], dict[str, Any]], None] = _noop
    action_names: Callable[[str, list[Item]], list[str]] = lambda _name, _items: []
    start: Callable[..., None] = _noop
    pop: Callable[[str], None] = _noop
    update_options: Callable[[str, dict[str, Any]], None] = _noop
    event: Callable[[str, str], None] = _noop
