"""Reference terminal front end for the list engine."""

from __future__ import annotations

from .host import TerminalHost
from .preview import PreviewResolver
from .session import TerminalSession
from .source import LineSource, parse_lines

__all__ = [
    "LineSource",
    "PreviewResolver",
    "TerminalHost",
    "TerminalSession",
    "parse_lines",
]
