"""ANSI palettes used by the terminal host renderer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by :class:`TerminalHost`."""

    name: str
    reverse: str
    reset: str
    selected: str
    matched: str
    status: str
    prompt: str
    error: str
    preview_title: str


DEFAULT_THEME = UITheme(
    name="default",
    reverse="\033[7m",
    reset="\033[0m",
    selected="\033[38;5;81m",
    matched="\033[1;38;5;214m",
    status="\033[2m",
    prompt="\033[1;38;5;81m",
    error="\033[1;31m",
    preview_title="\033[1;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reverse="\033[7m",
    reset="\033[0m",
    selected="",
    matched="",
    status="",
    prompt="",
    error="",
    preview_title="",
)
