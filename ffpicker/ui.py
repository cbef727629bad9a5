"""List UI orchestrator.

``ListUi`` owns the item store, selection, view projection, preview
coordinator, filter debouncer, and auto-action scheduler for one list. Host
calls happen around the pure state transitions of those components; every
handler re-reads shared state after a host call because the host may
re-enter the UI (for example a window-close callback that quits).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from .actions import ActionBinding, ActionFlags, ActionRegistry, UnknownActionError
from .auto_action import AutoActionScheduler
from .config import SPLIT_MODES, UiParams, default_param
from .filter import RedrawDebouncer
from .host import Context, Dispatcher, HostSurface, Options, PreviewResolver, StatusState, WindowSpec
from .item_model import Item, ItemStore, SelectionSet
from .preview import PreviewCoordinator
from .scheduling import TimerSlot, next_deadline_seconds
from .view import ViewProjector

logger = logging.getLogger(__name__)

# A horizontal list window never takes more than this share of host lines.
HORIZONTAL_MAX_HEIGHT_RATIO = 0.4


def _as_int(value: object, fallback: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


class ListUi:
    """Interactive filterable, selectable, optionally tree-shaped list."""

    def __init__(
        self,
        host: HostSurface,
        dispatcher: Dispatcher | None = None,
        *,
        resolve_preview: PreviewResolver | None = None,
        auto_action: AutoActionScheduler | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.host = host
        self.dispatcher = dispatcher if dispatcher is not None else Dispatcher()
        self.resolve_preview = resolve_preview
        self.selection = SelectionSet()
        self.store = ItemStore(self.selection)
        self.view = ViewProjector(self.store)
        self.preview = PreviewCoordinator(host)
        self.auto_action = (
            auto_action if auto_action is not None else AutoActionScheduler(slot=TimerSlot("auto-action", clock))
        )
        self.debouncer = RedrawDebouncer(
            refresh=self._refresh_with_input,
            is_filter_active=lambda: self.filter_active,
            item_count=lambda: len(self.store),
            slot=TimerSlot("filter-debounce", clock),
        )
        self.params = UiParams()
        self.options = Options()
        self.context = Context()
        self.saved_cursor_item: Item | None = None
        self.filter_active = False
        self.exports: dict[str, object] = {}
        self._buffer_ready = False
        self._closing = False
        self._actions = ActionRegistry().register_bindings(
            ActionBinding("checkItems", self._action_check_items),
            ActionBinding("chooseAction", self._action_choose_action),
            ActionBinding("clearSelectAllItems", self._action_clear_select_all_items),
            ActionBinding("collapseItem", lambda _params: self._collapse_item_action()),
            ActionBinding("closePreviewWindow", self._action_close_preview_window),
            ActionBinding("cursorNext", lambda params: self._move_cursor(params, forward=True)),
            ActionBinding("cursorPrevious", lambda params: self._move_cursor(params, forward=False)),
            ActionBinding("expandItem", self._action_expand_item),
            ActionBinding("getItem", self._action_get_item),
            ActionBinding("getItems", self._action_get_items),
            ActionBinding("getSelectedItems", self._action_get_selected_items),
            ActionBinding("inputAction", self._action_input_action),
            ActionBinding("itemAction", self._action_item_action),
            ActionBinding("openFilterWindow", self._action_open_filter_window),
            ActionBinding("preview", self._action_preview),
            ActionBinding("previewExecute", self._action_preview_execute),
            ActionBinding("previewPath", self._action_preview_path),
            ActionBinding("quit", self._action_quit),
            ActionBinding("redraw", self._action_redraw),
            ActionBinding("toggleAllItems", self._action_toggle_all_items),
            ActionBinding("toggleAutoAction", self._action_toggle_auto_action),
            ActionBinding("togglePreview", self._action_toggle_preview),
            ActionBinding("toggleSelectItem", self._action_toggle_select_item),
            ActionBinding("updateOptions", self._action_update_options),
        )

    # Lifecycle ---------------------------------------------------------

    def on_init(self, params: UiParams) -> None:
        """Start a new session: empty store, configured auto-action state."""
        self.params = params
        self.view.reversed = params.reversed
        self.store.clear()
        self.saved_cursor_item = None
        self._buffer_ready = False
        self.auto_action.enabled = params.start_auto_action
        self.auto_action.run_action = self._run_auto_action
        self.auto_action.on_disabled = self.preview.close

    def refresh_items(self, items: Sequence[Item], context: Context, params: UiParams) -> None:
        """Install a new item batch from the provider."""
        self.context = context
        self.store.replace(items, params.max_display_items, context.input)

    def redraw(self, context: Context, options: Options, params: UiParams) -> None:
        """Push the current store to the host view."""
        if options.sync and not context.done:
            return
        self.context = context
        self.options = options

        if context.done and len(self.store) == 0:
            self.preview.close()

        exists = self.visible()
        if not exists:
            if params.ignore_empty and len(self.store) == 0:
                return
            if params.immediate_action and len(self.store) == 1:
                self.dispatcher.item_action(options.name, params.immediate_action, self.store.items, {})
                return

        params = self.resolve_params(params)
        if params.split not in SPLIT_MODES:
            self._report(f"Invalid split param: {params.split}")
            return
        self.params = params
        self.view.reversed = params.reversed
        self.debouncer.configure(params.filter_update_time, params.filter_update_max)

        cursor_pos = 0
        if params.cursor_pos > 0 and self.store.refreshed and self.store.prev_length == 0:
            cursor_pos = params.cursor_pos
        force = params.cursor_pos > 0 or (self.store.refreshed and self.view.needs_forced_redraw(context.input))

        # Host geometry, window and buffer calls share one error boundary.
        try:
            self.host.open_window(self._window_spec(params))
            self._configure_auto_action(params)
            self._publish_status()
            lines = self.view.display_lines(params)
            requests, selected_lines = self.view.highlight_requests(params, self.selection)
            self.host.update_buffer(lines, force, cursor_pos)
            self.host.highlight_items(requests, selected_lines)
        except Exception as exc:
            self._report(f"[ffpicker] update buffer failed: {exc}")
            return

        initialized = self._buffer_ready
        self._buffer_ready = True
        saved_item = self.saved_cursor_item
        if not initialized or cursor_pos > 0:
            self._save_cursor(cursor_pos if cursor_pos > 0 else self.host.cursor_line())
        if cursor_pos <= 0 and saved_item is not None:
            self.search_item(saved_item)

        if self.auto_action.enabled:
            self.auto_action.arm()
        self.store.mark_drawn()

    def search_item(self, item: Item) -> bool:
        """Move the host cursor onto ``item`` by identity; stale items are ignored."""
        index = self.store.find_index(item)
        if index < 0:
            return False
        line = self.view.line_for_index(index)
        self.host.set_cursor_line(line)
        self._save_cursor(line)
        return True

    def expand_item(self, parent: Item, children: Sequence[Item], grouped: bool = False) -> int:
        """Apply a tree expansion and return the children added count."""
        return self.store.expand(parent, children, grouped)

    def collapse_item(self, item: Item) -> int:
        """Apply a tree collapse and return the removed count."""
        return self.store.collapse(item)

    def quit(self) -> None:
        self._close(cancel=False)

    def visible(self) -> bool:
        return self.host.window_id() > 0

    def win_ids(self) -> list[int]:
        ids: list[int] = []
        main_id = self.host.window_id()
        if main_id > 0:
            ids.append(main_id)
        if self.preview.visible:
            ids.append(self.preview.handle)
        return ids

    # Host events -------------------------------------------------------

    def on_cursor_moved(self) -> None:
        """Record the item under the host cursor and re-arm the auto action."""
        self._save_cursor(self.host.cursor_line())
        if self.auto_action.enabled:
            self.auto_action.arm()

    def filter_changed(self, text: str) -> None:
        self.debouncer.on_input_changed(text)

    def filter_closed(self, text: str) -> None:
        self.filter_active = False
        self.debouncer.flush(text)

    def poll_timers(self, now: float | None = None) -> bool:
        """Fire due timers; returns whether any callback ran."""
        fired = self.debouncer.slot.fire_if_due(now)
        return self.auto_action.slot.fire_if_due(now) or fired

    def next_timer_deadline(self, now: float | None = None) -> float | None:
        return next_deadline_seconds((self.debouncer.slot, self.auto_action.slot), now)

    # Items -------------------------------------------------------------

    def current_index(self) -> int:
        return self.view.index_for_line(self.host.cursor_line())

    def current_item(self) -> Item | None:
        index = self.current_index()
        return self.store.item_at(index) if index >= 0 else None

    def current_items(self) -> list[Item]:
        """Return selected items, or the item under the cursor when none are selected."""
        if not self.selection:
            item = self.current_item()
            return [item] if item is not None else []
        items = [self.store.item_at(index) for index in self.selection.indices()]
        return [item for item in items if item is not None]

    # Actions -----------------------------------------------------------

    def action_names(self) -> list[str]:
        return self._actions.names()

    def do_action(self, name: str, params: dict[str, Any] | None = None) -> ActionFlags:
        """Run UI action ``name``; raises :class:`UnknownActionError` for unknown names."""
        return self._actions.dispatch(name, params)

    def _action_check_items(self, _params: dict[str, Any]) -> ActionFlags:
        self.dispatcher.redraw(self.options.name, check=True, method="refreshItems")
        return ActionFlags.NONE

    def _action_choose_action(self, _params: dict[str, Any]) -> ActionFlags:
        items = self.current_items()
        actions = self.dispatcher.action_names(self.options.name, items)
        self.preview.close()
        self.dispatcher.start(
            name=self.options.name,
            push=True,
            sources=[
                {
                    "name": "action",
                    "options": {},
                    "params": {"actions": actions, "name": self.options.name, "items": items},
                }
            ],
        )
        return ActionFlags.NONE

    def _action_clear_select_all_items(self, _params: dict[str, Any]) -> ActionFlags:
        self.selection.clear()
        return ActionFlags.REDRAW

    def _action_close_preview_window(self, _params: dict[str, Any]) -> ActionFlags:
        self.preview.close()
        return ActionFlags.NONE

    def _action_expand_item(self, params: dict[str, Any]) -> ActionFlags:
        item = self.current_item()
        if item is None:
            return ActionFlags.NONE
        if item.expanded:
            if params.get("mode") == "toggle":
                return self._collapse_item_action()
            return ActionFlags.NONE
        self.dispatcher.redraw_tree(
            self.options.name,
            "expand",
            [{"item": item, "maxLevel": params.get("maxLevel", 0), "isGrouped": params.get("isGrouped", False)}],
        )
        return ActionFlags.NONE

    def _collapse_item_action(self) -> ActionFlags:
        item = self.current_item()
        if item is None or not item.is_tree or item.level < 0:
            return ActionFlags.NONE
        self.dispatcher.redraw_tree(self.options.name, "collapse", [{"item": item}])
        return ActionFlags.NONE

    def _action_get_item(self, _params: dict[str, Any]) -> ActionFlags:
        self.exports["item"] = self.current_item()
        return ActionFlags.NONE

    def _action_get_items(self, _params: dict[str, Any]) -> ActionFlags:
        self.exports["items"] = self.store.items
        return ActionFlags.NONE

    def _action_get_selected_items(self, _params: dict[str, Any]) -> ActionFlags:
        self.exports["selected_items"] = self.current_items()
        return ActionFlags.NONE

    def _action_input_action(self, _params: dict[str, Any]) -> ActionFlags:
        items = self.current_items()
        actions = self.dispatcher.action_names(self.options.name, items)
        action_name = self.host.input_list("Input action name: ", actions)
        if action_name:
            self.dispatcher.item_action(self.options.name, action_name, items, {})
        return ActionFlags.NONE

    def _action_item_action(self, params: dict[str, Any]) -> ActionFlags:
        items = params.get("items") or self.current_items()
        if not items:
            return ActionFlags.PERSIST
        self.dispatcher.item_action(
            self.options.name,
            params.get("name", "default"),
            list(items),
            params.get("params") or {},
        )
        return ActionFlags.NONE

    def _action_open_filter_window(self, params: dict[str, Any]) -> ActionFlags:
        ui_params = self.resolve_params(self.params)
        reopen_preview = self.preview.needs_reopen_for_filter(ui_params)
        if reopen_preview:
            self.preview.close()

        text = str(params.get("input", self.context.input))
        self.filter_active = True
        self.debouncer.configure(ui_params.filter_update_time, ui_params.filter_update_max)
        self.debouncer.reset(self.context.input)
        self.host.open_filter(ui_params, text, len(self.store))
        if text != self.context.input:
            self.debouncer.flush(text)

        if reopen_preview:
            item = self.current_item()
            if item is None or self.resolve_preview is None:
                return ActionFlags.NONE
            return self.preview.preview(item, ui_params, params, self.resolve_preview)
        return ActionFlags.NONE

    def _action_preview(self, params: dict[str, Any]) -> ActionFlags:
        item = self.current_item()
        if item is None or self.resolve_preview is None:
            return ActionFlags.NONE
        return self.preview.preview(item, self.resolve_params(self.params), params, self.resolve_preview)

    def _action_preview_execute(self, params: dict[str, Any]) -> ActionFlags:
        self.preview.execute(str(params.get("command", "")))
        return ActionFlags.PERSIST

    def _action_preview_path(self, _params: dict[str, Any]) -> ActionFlags:
        item = self.current_item()
        if item is None:
            return ActionFlags.NONE
        self.host.echo(item.text)
        return ActionFlags.PERSIST

    def _action_quit(self, _params: dict[str, Any]) -> ActionFlags:
        self._close(cancel=True)
        self.dispatcher.pop(self.options.name)
        return ActionFlags.NONE

    def _action_redraw(self, params: dict[str, Any]) -> ActionFlags:
        if self.preview.visible and self.preview.is_changed_params(self.params):
            self.preview.close()
        self.dispatcher.redraw(
            self.options.name,
            method=params.get("method", "uiRefresh"),
            search_item=self.current_item(),
        )
        return ActionFlags.NONE

    def _action_toggle_all_items(self, _params: dict[str, Any]) -> ActionFlags:
        if len(self.store) == 0:
            return ActionFlags.NONE
        self.selection.toggle_all(len(self.store))
        return ActionFlags.REDRAW

    def _action_toggle_auto_action(self, _params: dict[str, Any]) -> ActionFlags:
        self._configure_auto_action(self.params)
        self.auto_action.toggle()
        return ActionFlags.NONE

    def _action_toggle_preview(self, params: dict[str, Any]) -> ActionFlags:
        item = self.current_item()
        if item is None or self.resolve_preview is None:
            return ActionFlags.NONE
        return self.preview.toggle(item, self.resolve_params(self.params), params, self.resolve_preview)

    def _action_toggle_select_item(self, _params: dict[str, Any]) -> ActionFlags:
        index = self.current_index()
        if index < 0:
            return ActionFlags.NONE
        self.selection.toggle(index)
        return ActionFlags.REDRAW

    def _action_update_options(self, params: dict[str, Any]) -> ActionFlags:
        ui_params = params.get("uiParams")
        if isinstance(ui_params, dict):
            self.params = self.params.merged(ui_params)
        self.dispatcher.update_options(self.options.name, params)
        return ActionFlags.NONE

    def _move_cursor(self, params: dict[str, Any], *, forward: bool) -> ActionFlags:
        line = self.host.cursor_line()
        if line <= 0 or len(self.store) == 0:
            return ActionFlags.PERSIST
        count = _as_int(params.get("count", 1), 1)
        if count == 0:
            return ActionFlags.PERSIST
        target = self.view.move_cursor(line, count, bool(params.get("loop", False)), forward=forward)
        self._save_cursor(target)
        self.host.set_cursor_line(target)
        self._publish_status()
        if self.auto_action.enabled:
            self.auto_action.arm()
        return ActionFlags.PERSIST

    # Params ------------------------------------------------------------

    def resolve_params(self, params: UiParams) -> UiParams:
        """Return ``params`` with expression options evaluated by the host."""
        resolved = replace(params)
        context: dict[str, object] = {
            "sources": list(self.options.sources),
            "item_count": len(self.store),
            "input": self.context.input,
            "max_items": self.context.max_items,
        }
        for name in params.expr_params:
            value = getattr(params, name, None)
            if not isinstance(value, str):
                context[name] = value

        for name in params.expr_params:
            if not hasattr(params, name) or name in ("expr_params", "on_preview"):
                self._report(f"Invalid expr param: {name}")
                continue
            value = self._eval_expr_param(name, getattr(params, name), default_param(name), context)
            setattr(resolved, name, value)
            context[name] = value
        return resolved

    def _eval_expr_param(self, name: str, expr: object, default: object, context: dict[str, object]) -> object:
        if not isinstance(expr, str):
            return expr
        try:
            return self.host.evaluate(expr, context)
        except Exception as exc:
            self._report(f"[ffpicker] invalid expression in option: {name}: {exc}")
        if not isinstance(default, str):
            return default
        try:
            return self.host.evaluate(default, context)
        except Exception as exc:
            self._report(f"[ffpicker] invalid default expression in option: {name}: {exc}")
            return 0

    # Internals ---------------------------------------------------------

    def _window_spec(self, params: UiParams) -> WindowSpec:
        win_width = _as_int(params.win_width, 80)
        win_height = _as_int(params.win_height, 20)
        if params.auto_resize and len(self.store) < win_height:
            win_height = max(len(self.store), 1)
        if params.split == "horizontal":
            max_height = int(self.host.layout().lines * HORIZONTAL_MAX_HEIGHT_RATIO)
            win_height = min(win_height, max(1, max_height))
        return WindowSpec(
            split=params.split,
            split_direction=params.split_direction,
            width=max(1, win_width),
            height=max(1, win_height),
            row=_as_int(params.win_row),
            col=_as_int(params.win_col),
            border=params.floating_border,
            title=params.floating_title,
            title_pos=params.floating_title_pos,
            reversed=params.reversed,
        )

    def _configure_auto_action(self, params: UiParams) -> None:
        self.auto_action.run_action = self._run_auto_action
        self.auto_action.on_disabled = self.preview.close
        self.auto_action.configure(params.auto_action_settings())

    def _run_auto_action(self, name: str, params: dict[str, Any]) -> None:
        try:
            self.do_action(name, params)
        except UnknownActionError as exc:
            self._report(f"[ffpicker] auto action failed: {exc}")

    def _publish_status(self) -> None:
        if not self.params.statusline:
            return
        self.host.set_status(
            StatusState(
                name=self.options.name,
                input=self.context.input,
                done=self.context.done,
                item_count=len(self.store),
                max_items=self.context.max_items,
            )
        )

    def _save_cursor(self, line: int) -> None:
        item = self.view.item_for_line(line)
        if item is not None:
            self.saved_cursor_item = item

    def _refresh_with_input(self, text: str) -> None:
        self.context.input = text
        self.dispatcher.redraw(self.options.name, input=text, method="refreshItems")

    def _report(self, message: str) -> None:
        logger.warning(message)
        self.host.report_error(message)

    def _close(self, *, cancel: bool) -> None:
        # Host close callbacks may call back into quit while windows close.
        if self._closing:
            return
        self._closing = True
        try:
            self._close_windows(cancel)
        finally:
            self._closing = False

    def _close_windows(self, cancel: bool) -> None:
        self.preview.close()
        self.debouncer.cancel()
        self.auto_action.cancel()
        self.filter_active = False
        self._buffer_ready = False
        if self.visible():
            self.host.close_window(cancel)
        self.dispatcher.event(self.options.name, "close")
