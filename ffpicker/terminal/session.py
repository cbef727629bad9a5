"""Interactive terminal session driving one ``ListUi``.

The session plays the fuzzy-finder core for the list engine: it gathers
items from a :class:`LineSource`, answers redraw and tree requests, runs
item actions, and owns the key loop. Timers are polled between key reads
using the earliest engine deadline as read timeout.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..actions import ActionFlags, UnknownActionError
from ..config import UiParams
from ..host import Context, Dispatcher, Options
from ..item_model import Item, expanded_copy
from ..ui import ListUi
from .host import TerminalHost
from .preview import PreviewResolver
from .source import LineSource

logger = logging.getLogger(__name__)

# Resize and message checks still happen while no timer is pending.
IDLE_POLL_MS = 250
ITEM_ACTIONS = ("default", "echo")

NORMAL_KEY_ACTIONS: dict[str, tuple[str, dict[str, Any]]] = {
    "j": ("cursorNext", {}),
    "DOWN": ("cursorNext", {}),
    "k": ("cursorPrevious", {}),
    "UP": ("cursorPrevious", {}),
    "J": ("cursorNext", {"loop": True}),
    "K": ("cursorPrevious", {"loop": True}),
    " ": ("toggleSelectItem", {}),
    "*": ("toggleAllItems", {}),
    "c": ("clearSelectAllItems", {}),
    "l": ("expandItem", {}),
    "RIGHT": ("expandItem", {}),
    "L": ("expandItem", {"maxLevel": -1}),
    "h": ("collapseItem", {}),
    "LEFT": ("collapseItem", {}),
    "TAB": ("expandItem", {"mode": "toggle"}),
    "p": ("togglePreview", {}),
    "P": ("previewPath", {}),
    "d": ("previewExecute", {"command": "down"}),
    "u": ("previewExecute", {"command": "up"}),
    "a": ("toggleAutoAction", {}),
    "i": ("openFilterWindow", {}),
    "/": ("openFilterWindow", {}),
    "ENTER": ("itemAction", {}),
    "e": ("itemAction", {"name": "echo"}),
    "A": ("inputAction", {}),
    "r": ("redraw", {"method": "refreshItems"}),
    "q": ("quit", {}),
    "ESC": ("quit", {}),
    "CTRL_C": ("quit", {}),
}


class TerminalSession:
    """Wire a line source, a terminal host, and the list engine together."""

    def __init__(
        self,
        source: LineSource,
        params: UiParams,
        host: TerminalHost,
        *,
        name: str = "ffpicker",
        no_color: bool = False,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.source = source
        self.params = params
        self.host = host
        self.options = Options(name=name, sources=(source.source_name,))
        self.context = Context(done=True, max_items=len(source))
        self.chosen: list[Item] = []
        self.running = False
        dispatcher = Dispatcher(
            redraw=self._redraw,
            redraw_tree=self._redraw_tree,
            item_action=self._item_action,
            action_names=lambda _name, _items: list(ITEM_ACTIONS),
            pop=self._stop,
            update_options=self._update_options,
            event=self._event,
        )
        ui_kwargs: dict[str, Any] = {"resolve_preview": PreviewResolver(no_color=no_color)}
        if clock is not None:
            ui_kwargs["clock"] = clock
        self.ui = ListUi(host, dispatcher, **ui_kwargs)
        # Closing the host window from outside the engine routes back to quit.
        host.on_window_closed = lambda _cancel: self.ui.quit()

    # Dispatcher callbacks ----------------------------------------------

    def _redraw(
        self,
        _name: str,
        *,
        input: str | None = None,
        method: str = "uiRefresh",
        search_item: Item | None = None,
        check: bool = False,
    ) -> None:
        if input is not None:
            self.context.input = input
        if method == "refreshItems" or check:
            self.refresh()
        else:
            self.ui.redraw(self.context, self.options, self.params)
        if search_item is not None:
            self.ui.search_item(search_item)

    def _redraw_tree(self, _name: str, mode: str, entries: list[dict[str, Any]]) -> None:
        target: Item | None = None
        for entry in entries:
            item = entry["item"]
            if mode == "expand":
                max_level = int(entry.get("maxLevel", 0))
                if max_level < 0:
                    max_level = len(self.source)
                children = self.source.children(item, max_level)
                self.ui.expand_item(expanded_copy(item), children, bool(entry.get("isGrouped", False)))
            elif mode == "collapse":
                self.ui.collapse_item(expanded_copy(item, expanded=False))
            else:
                logger.debug("ignoring tree request %s", mode)
                continue
            target = item
        self.ui.redraw(self.context, self.options, self.params)
        if target is not None:
            self.ui.search_item(target)

    def _item_action(self, _name: str, action: str, items: list[Item], _params: dict[str, Any]) -> None:
        if action == "default":
            self.chosen = list(items)
            self.ui.quit()
            self.running = False
        elif action == "echo":
            self.host.echo(", ".join(item.text for item in items))
        else:
            self.host.report_error(f"unknown item action: {action}")

    def _update_options(self, _name: str, options: dict[str, Any]) -> None:
        ui_params = options.get("uiParams")
        if isinstance(ui_params, dict):
            self.params = self.params.merged(ui_params)

    def _event(self, name: str, event: str) -> None:
        logger.debug("ui %s event %s", name, event)
        if event == "close":
            self.running = False

    def _stop(self, _name: str) -> None:
        self.running = False

    # Lifecycle ---------------------------------------------------------

    def start(self) -> None:
        """Initialize the engine and draw the first batch."""
        self.running = True
        self.ui.on_init(self.params)
        self.refresh()
        if not self.ui.visible():
            self.running = False

    def refresh(self) -> None:
        items = self.source.gather(self.context.input)
        self.context.max_items = len(items)
        self.ui.refresh_items(items, self.context, self.params)
        self.ui.redraw(self.context, self.options, self.params)

    def timeout_ms(self, now: float | None = None) -> int:
        """Return the key-read timeout until the next engine timer."""
        deadline = self.ui.next_timer_deadline(now)
        if deadline is None:
            return IDLE_POLL_MS
        return max(0, min(IDLE_POLL_MS, int(deadline * 1000)))

    # Keys --------------------------------------------------------------

    def handle_key(self, key: str) -> None:
        if not key:
            return
        if self.host.filter_open:
            self._handle_filter_key(key)
            return

        self.host.clear_message()
        if key == "CTRL_L":
            self.host.dirty = True
            return
        binding = NORMAL_KEY_ACTIONS.get(key)
        if binding is None:
            return
        name, params = binding
        self.run_action(name, dict(params))

    def run_action(self, name: str, params: dict[str, Any] | None = None) -> ActionFlags:
        try:
            flags = self.ui.do_action(name, params)
        except UnknownActionError as exc:
            self.host.report_error(str(exc))
            return ActionFlags.NONE
        if flags & ActionFlags.REDRAW and self.running:
            self.ui.redraw(self.context, self.options, self.params)
        return flags

    def _handle_filter_key(self, key: str) -> None:
        text = self.host.filter_text or ""
        if key in ("ENTER", "ESC", "CTRL_C"):
            self.ui.filter_closed(self.host.close_filter())
            return
        if key == "BACKSPACE":
            text = text[:-1]
        elif key == "CTRL_U":
            text = ""
        elif len(key) == 1 and key.isprintable():
            text += key
        else:
            return
        self.host.filter_text = text
        self.host.dirty = True
        self.ui.filter_changed(text)

    def run(self, write: Callable[[str], None], read_key: Callable[[int], str]) -> list[Item]:
        """Drive the key loop until the list closes; returns chosen items.

        ``read_key`` takes a timeout in milliseconds and returns ``""`` on
        timeout.
        """
        self.start()
        last_size = self.host.size()
        while self.running:
            size = self.host.size()
            if size != last_size:
                last_size = size
                self.ui.redraw(self.context, self.options, self.params)
                self.host.dirty = True
            if self.host.dirty:
                write(self.host.render())
            key = read_key(self.timeout_ms())
            self.handle_key(key)
            if self.running:
                self.ui.poll_timers()
        return self.chosen
