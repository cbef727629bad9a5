"""Full-screen terminal implementation of the list host surface.

``TerminalHost`` keeps the buffer, cursor, preview, and message state the
list engine pushes into it and renders the whole frame as ANSI rows on
demand. The last screen row is reserved for the status line or filter
prompt.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from typing import Any

from ..host import (
    HighlightRequest,
    HostLayout,
    PreviewContent,
    PreviewContext,
    StatusState,
    WindowSpec,
)
from .ansi import display_width, fit_ansi_line
from .expr import evaluate_expression
from .theme import DEFAULT_THEME, UITheme

MAIN_WINDOW_ID = 1000
FIRST_PREVIEW_HANDLE = 2000
_LEADING_DIRECTIONS = ("topleft", "aboveleft", "leftabove")

SizeProvider = Callable[[], tuple[int, int]]


def _terminal_size() -> tuple[int, int]:
    term = shutil.get_terminal_size((80, 24))
    return term.columns, term.lines


class TerminalHost:
    """Host surface that draws into a single ANSI terminal screen."""

    def __init__(
        self,
        size: SizeProvider = _terminal_size,
        theme: UITheme = DEFAULT_THEME,
        read_key: Callable[[], str] | None = None,
    ) -> None:
        self.size = size
        self.theme = theme
        self.read_key = read_key
        self.spec: WindowSpec | None = None
        self.lines: list[str] = []
        self.cursor = 0
        self.top = 0
        self.highlights: dict[int, HighlightRequest] = {}
        self.selected_lines: set[int] = set()
        self.status: StatusState | None = None
        self.preview_handle = -1
        self.preview_context: PreviewContext | None = None
        self.preview_content: PreviewContent | None = None
        self.preview_top = 0
        self._next_preview_handle = FIRST_PREVIEW_HANDLE
        self.filter_text: str | None = None
        self.filter_prompt = ""
        self.message = ""
        self.message_is_error = False
        self.closed_with_cancel: bool | None = None
        self.on_window_closed: Callable[[bool], None] | None = None
        self.dirty = True

    # Window ------------------------------------------------------------

    def window_id(self) -> int:
        return MAIN_WINDOW_ID if self.spec is not None else -1

    def open_window(self, spec: WindowSpec) -> None:
        if spec != self.spec:
            self.spec = spec
            self.dirty = True

    def close_window(self, cancel: bool) -> None:
        self.spec = None
        self.lines = []
        self.cursor = 0
        self.top = 0
        self.filter_text = None
        self.closed_with_cancel = cancel
        self.dirty = True
        if self.on_window_closed is not None:
            self.on_window_closed(cancel)

    def update_buffer(self, lines: Sequence[str], force: bool, cursor_pos: int) -> None:
        """Replace buffer lines; ``force`` resets the cursor to the list head."""
        self.lines = list(lines)
        reversed_view = self.spec is not None and self.spec.reversed
        if cursor_pos > 0:
            self.cursor = cursor_pos
        elif force or self.cursor <= 0:
            self.cursor = len(self.lines) if reversed_view else 1
        self._clamp_cursor()
        self.dirty = True

    def highlight_items(self, requests: Sequence[HighlightRequest], selected_lines: Sequence[int]) -> None:
        self.highlights = {request.line: request for request in requests}
        self.selected_lines = set(selected_lines)
        self.dirty = True

    def cursor_line(self) -> int:
        return self.cursor

    def set_cursor_line(self, line: int) -> None:
        self.cursor = line
        self._clamp_cursor()
        self.dirty = True

    def _clamp_cursor(self) -> None:
        if not self.lines:
            self.cursor = 0
        else:
            self.cursor = min(max(self.cursor, 1), len(self.lines))

    def layout(self) -> HostLayout:
        columns, lines = self.size()
        row, col, width, height = self.window_rect()
        return HostLayout(
            columns=columns,
            lines=lines,
            win_row=row,
            win_col=col,
            win_width=width,
            win_height=height,
        )

    def window_rect(self) -> tuple[int, int, int, int]:
        """Return ``(row, col, width, height)`` of the list window (0-based)."""
        columns, lines = self.size()
        usable = max(1, lines - 1)
        spec = self.spec
        if spec is None or spec.split == "no":
            return 0, 0, columns, usable
        leading = spec.split_direction in _LEADING_DIRECTIONS
        if spec.split == "horizontal":
            height = min(spec.height, usable)
            return (0 if leading else usable - height), 0, columns, height
        if spec.split == "vertical":
            width = min(spec.width, columns)
            return 0, (0 if leading else columns - width), width, usable
        width = min(spec.width, columns)
        height = min(spec.height, usable)
        row = min(max(0, spec.row), usable - height)
        col = min(max(0, spec.col), columns - width)
        return row, col, width, height

    # Status and messages -------------------------------------------------

    def set_status(self, state: StatusState) -> None:
        self.status = state
        self.dirty = True

    def echo(self, text: str) -> None:
        self.message = text
        self.message_is_error = False
        self.dirty = True

    def report_error(self, message: str) -> None:
        self.message = message
        self.message_is_error = True
        self.dirty = True

    def clear_message(self) -> None:
        if self.message:
            self.message = ""
            self.dirty = True

    def evaluate(self, expr: str, context: dict[str, object]) -> object:
        columns, lines = self.size()
        names: dict[str, object] = {"columns": columns, "lines": lines}
        names.update(context)
        return evaluate_expression(expr, names)

    # Preview -------------------------------------------------------------

    def open_preview(self, context: PreviewContext, content: PreviewContent) -> int:
        self.preview_handle = self._next_preview_handle
        self._next_preview_handle += 1
        self.update_preview(self.preview_handle, context, content)
        return self.preview_handle

    def update_preview(self, handle: int, context: PreviewContext, content: PreviewContent) -> None:
        if handle != self.preview_handle:
            return
        if self.preview_content is None or self.preview_content.path != content.path:
            self.preview_top = 0
        self.preview_context = context
        self.preview_content = content
        if content.line_number > 0:
            self.preview_top = content.line_number - 1
        self.dirty = True

    def close_preview(self, handle: int) -> None:
        if handle != self.preview_handle:
            return
        self.preview_handle = -1
        self.preview_context = None
        self.preview_content = None
        self.preview_top = 0
        self.dirty = True

    def execute_in_preview(self, handle: int, command: str) -> None:
        """Run a scroll command (``down``/``up``/``top``/``bottom``) in the preview."""
        if handle != self.preview_handle or self.preview_content is None:
            return
        total = len(self.preview_content.lines)
        if command == "down":
            self.preview_top = min(self.preview_top + 1, max(0, total - 1))
        elif command == "up":
            self.preview_top = max(0, self.preview_top - 1)
        elif command == "top":
            self.preview_top = 0
        elif command == "bottom":
            self.preview_top = max(0, total - 1)
        else:
            self.report_error(f"unknown preview command: {command}")
            return
        self.dirty = True

    # Prompts -------------------------------------------------------------

    def open_filter(self, params: Any, text: str, item_count: int) -> None:
        self.filter_prompt = str(getattr(params, "prompt", "") or "")
        self.filter_text = text
        self.dirty = True

    def close_filter(self) -> str:
        text = self.filter_text or ""
        self.filter_text = None
        self.dirty = True
        return text

    @property
    def filter_open(self) -> bool:
        return self.filter_text is not None

    def input_list(self, prompt: str, choices: Sequence[str]) -> str:
        """Read a choice on the status row; ``TAB`` completes from ``choices``."""
        if self.read_key is None:
            return ""
        typed = ""
        while True:
            self.message = prompt + typed
            self.message_is_error = False
            self.dirty = True
            key = self.read_key()
            if key == "ENTER":
                break
            if key in ("ESC", "CTRL_C"):
                typed = ""
                break
            if key == "BACKSPACE":
                typed = typed[:-1]
            elif key == "CTRL_U":
                typed = ""
            elif key == "TAB":
                matches = [choice for choice in choices if choice.startswith(typed)]
                if matches:
                    typed = matches[0]
            elif len(key) == 1 and key.isprintable():
                typed += key
        self.clear_message()
        return typed

    # Rendering -------------------------------------------------------------

    def _styled_line(self, line_no: int, width: int) -> str:
        text = self.lines[line_no - 1]
        theme = self.theme
        if line_no in self.selected_lines:
            text = f"{theme.selected}*{text}{theme.reset}"
        else:
            request = self.highlights.get(line_no)
            if request is not None and theme.matched:
                text = self._apply_highlights(text, request)
        row = fit_ansi_line(text, width)
        if line_no == self.cursor:
            row = f"{theme.reverse}{row}{theme.reset}"
        return row

    def _apply_highlights(self, text: str, request: HighlightRequest) -> str:
        marked: set[int] = set()
        offset = len(request.prefix)
        for span in request.highlights:
            start = offset + span.col - 1
            marked.update(range(start, start + span.width))
        out: list[str] = []
        for index, ch in enumerate(text):
            if index in marked:
                out.append(f"{self.theme.matched}{ch}{self.theme.reset}")
            else:
                out.append(ch)
        return "".join(out)

    def _list_rows(self, height: int, width: int) -> list[str]:
        if self.cursor > 0:
            if self.cursor - 1 < self.top:
                self.top = self.cursor - 1
            elif self.cursor - 1 >= self.top + height:
                self.top = self.cursor - height
        self.top = max(0, min(self.top, max(0, len(self.lines) - height)))
        rows: list[str] = []
        for offset in range(height):
            line_no = self.top + offset + 1
            if line_no > len(self.lines):
                rows.append(" " * width)
            else:
                rows.append(self._styled_line(line_no, width))
        return rows

    def _preview_rows(self, height: int, width: int) -> list[str]:
        content = self.preview_content
        if content is None:
            return []
        rows = [fit_ansi_line(self._preview_title(content, width), width)]
        body = content.lines[self.preview_top : self.preview_top + max(0, height - 1)]
        rows.extend(fit_ansi_line(line, width) for line in body)
        rows.extend(" " * width for _ in range(height - len(rows)))
        return rows[:height]

    def _preview_title(self, content: PreviewContent, width: int) -> str:
        """Floating titles from params win over the resolver's title."""
        context = self.preview_context
        title = content.title
        pad = 0
        if context is not None and context.title:
            title = context.title
            if context.title_pos == "center":
                pad = max(0, (width - display_width(title)) // 2)
            elif context.title_pos == "right":
                pad = max(0, width - display_width(title))
        return " " * pad + f"{self.theme.preview_title}{title}{self.theme.reset}"

    def status_row(self, width: int) -> str:
        theme = self.theme
        if self.filter_text is not None:
            text = f"{theme.prompt}{self.filter_prompt}> {theme.reset}{self.filter_text}"
        elif self.message:
            style = theme.error if self.message_is_error else ""
            text = f"{style}{self.message}{theme.reset if style else ''}"
        elif self.status is not None:
            state = self.status
            text = f"[{state.name}] {self.cursor}/{state.item_count}"
            if state.max_items > state.item_count:
                text += f" ({state.max_items})"
            if state.input:
                text += f" {state.input}"
            if not state.done:
                text += " [async]"
            text = f"{theme.status}{text}{theme.reset}"
        else:
            text = ""
        return fit_ansi_line(text, width)

    def render(self) -> str:
        """Return the full frame as one ANSI string."""
        columns, lines = self.size()
        usable = max(1, lines - 1)
        canvas: list[list[tuple[int, int, str]]] = [[] for _ in range(usable)]

        if self.spec is not None:
            row, col, width, height = self.window_rect()
            for offset, text in enumerate(self._list_rows(height, width)):
                if row + offset < usable:
                    canvas[row + offset].append((col, width, text))

        context = self.preview_context
        if context is not None:
            width = max(1, min(context.width, columns - context.col))
            height = max(1, min(context.height, usable - context.row))
            for offset, text in enumerate(self._preview_rows(height, width)):
                if 0 <= context.row + offset < usable:
                    canvas[context.row + offset].append((context.col, width, text))

        out = ["\033[H"]
        for segments in canvas:
            out.append(_compose_row(segments, columns))
            out.append("\r\n")
        out.append(self.status_row(columns))
        self.dirty = False
        return "".join(out)


def _compose_row(segments: list[tuple[int, int, str]], columns: int) -> str:
    """Lay ``(col, width, text)`` segments out left to right; later overlaps are clipped."""
    out: list[str] = []
    cursor = 0
    for col, width, text in sorted(segments, key=lambda segment: segment[0]):
        if col < cursor:
            continue
        if col > cursor:
            out.append(" " * (col - cursor))
        width = min(width, columns - col)
        if width <= 0:
            break
        out.append(fit_ansi_line(text, width))
        cursor = col + width
    if cursor < columns:
        out.append(" " * (columns - cursor))
    return "".join(out)
