"""Preview content resolution for the terminal front end.

Items naming a readable file preview the file head with Pygments terminal
highlighting. Other items preview their text and tree position.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

from ..host import PreviewContent, PreviewContext
from ..item_model import Item

MAX_PREVIEW_BYTES = 256 * 1024


def highlight_source(source: str, path: Path, no_color: bool = False) -> str:
    """Return ``source`` with ANSI highlighting for ``path``'s language."""
    if no_color:
        return source
    try:
        lexer = get_lexer_for_filename(path.name, stripnl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False)
    return highlight(source, lexer, TerminalFormatter())


class PreviewResolver:
    """Callable preview resolver bound to display options."""

    def __init__(self, no_color: bool = False, root: Path | None = None) -> None:
        self.no_color = no_color
        self.root = root if root is not None else Path.cwd()

    def _file_for(self, item: Item) -> Path | None:
        candidate = Path(item.word).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        try:
            if candidate.is_file():
                return candidate
        except OSError:
            return None
        return None

    def __call__(self, item: Item, action_params: dict[str, Any], context: PreviewContext) -> PreviewContent | None:
        path = self._file_for(item)
        if path is None:
            if not item.word:
                return None
            depth = len(item.tree_path) if isinstance(item.tree_path, tuple) else 0
            lines = (item.text, "", f"level {item.level}, depth {depth}")
            return PreviewContent(lines=lines, title=item.text)

        try:
            with path.open("rb") as handle:
                raw = handle.read(MAX_PREVIEW_BYTES)
        except OSError:
            return None
        source = raw.decode("utf-8", errors="replace")
        rendered = highlight_source(source, path, no_color=self.no_color)
        lines = tuple(rendered.splitlines()[: max(1, context.height)])
        return PreviewContent(lines=lines, path=str(path), title=str(path))
