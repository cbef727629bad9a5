"""Command-line front door for ffpicker.

Reads candidate lines from a file or stdin, opens the interactive list on
the controlling terminal, and prints the chosen items on exit.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import PREVIEW_SPLIT_MODES, SPLIT_MODES, load_ui_params
from .terminal import LineSource, TerminalHost, TerminalSession
from .terminal.controller import TerminalController
from .terminal.keys import read_key
from .terminal.theme import DEFAULT_THEME, PLAIN_THEME

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pick lines from a file or stdin in an interactive filterable list."
    )
    parser.add_argument("path", nargs="?", default=None, help="File with one candidate per line. Defaults to stdin.")
    parser.add_argument("--split", choices=SPLIT_MODES, default=None, help="List window placement.")
    parser.add_argument("--preview-split", choices=PREVIEW_SPLIT_MODES, default=None, help="Preview placement.")
    parser.add_argument("--reversed", action="store_true", help="Show the first item at the bottom.")
    parser.add_argument("--tree", action="store_true", help="Show indentation-based tree markers.")
    parser.add_argument("--prompt", default=None, help="Filter prompt text.")
    parser.add_argument(
        "--filter-update-time",
        type=_non_negative_int,
        default=None,
        help="Debounce live filter updates by this many milliseconds.",
    )
    parser.add_argument(
        "--max-display-items",
        type=_positive_int,
        default=None,
        help="Cap the number of items kept in the list.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    return parser


def _configure_logging(log_file: str | None) -> None:
    if not log_file:
        logging.getLogger("ffpicker").addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("ffpicker")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def _param_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.split is not None:
        overrides["split"] = args.split
    if args.preview_split is not None:
        overrides["preview_split"] = args.preview_split
    if args.reversed:
        overrides["reversed"] = True
    if args.tree:
        overrides["display_tree"] = True
    if args.prompt is not None:
        overrides["prompt"] = args.prompt
    if args.filter_update_time is not None:
        overrides["filter_update_time"] = args.filter_update_time
    if args.max_display_items is not None:
        overrides["max_display_items"] = args.max_display_items
    return overrides


def read_candidates(path: str | None) -> list[str]:
    """Return candidate lines from ``path`` or stdin."""
    if path is None:
        if sys.stdin.isatty():
            raise SystemExit("No input: pass a file path or pipe lines on stdin.")
        return sys.stdin.read().splitlines()
    target = Path(path)
    if not target.is_file():
        raise SystemExit(f"File not found: {target}")
    return target.read_text(encoding="utf-8", errors="replace").splitlines()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, run the picker, and print chosen items."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_file)

    lines = read_candidates(args.path)
    params = load_ui_params(_param_overrides(args))
    source = LineSource.from_lines(lines)
    logger.debug("loaded %d candidates", len(source))

    tty_fd = os.open(TTY_PATH, os.O_RDWR)
    try:
        terminal = TerminalController(tty_fd, tty_fd)
        host = TerminalHost(
            size=lambda: tuple(os.get_terminal_size(tty_fd)),
            theme=PLAIN_THEME if args.no_color else DEFAULT_THEME,
            read_key=lambda: read_key(tty_fd),
        )
        session = TerminalSession(source, params, host, no_color=args.no_color)
        with terminal.raw_mode():
            chosen = session.run(terminal.write, lambda timeout_ms: read_key(tty_fd, timeout_ms))
    finally:
        os.close(tty_fd)

    for item in chosen:
        sys.stdout.write(item.word + "\n")


if __name__ == "__main__":
    main()
