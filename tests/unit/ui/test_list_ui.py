"""Tests for the list UI orchestrator against a recording host."""

from __future__ import annotations

import unittest

from fakes import FakeClock, RecordingHost, make_items, recording_dispatcher, text_preview, tree_item

from ffpicker.actions import ActionFlags, UnknownActionError
from ffpicker.auto_action import AutoActionScheduler
from ffpicker.config import UiParams
from ffpicker.host import Context, Options
from ffpicker.item_model import expanded_copy
from ffpicker.scheduling import TimerSlot
from ffpicker.ui import ListUi


class _UiHarness:
    def __init__(self, params: UiParams | None = None, *, action_names: tuple[str, ...] = ()) -> None:
        self.clock = FakeClock()
        self.host = RecordingHost()
        self.calls: list[tuple[str, tuple, dict]] = []
        self.ui = ListUi(
            self.host,
            recording_dispatcher(self.calls, action_names),
            resolve_preview=text_preview,
            clock=self.clock,
        )
        self.params = params if params is not None else UiParams()
        self.context = Context()
        self.options = Options(name="files")
        self.ui.on_init(self.params)

    def show(self, *words: str) -> None:
        self.ui.refresh_items(make_items(*words), self.context, self.params)
        self.ui.redraw(self.context, self.options, self.params)

    def calls_of(self, kind: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == kind]


class RedrawTests(unittest.TestCase):
    def test_redraw_pushes_lines_and_records_cursor_item(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b", "c")

        self.assertEqual(harness.host.buffer, ["a", "b", "c"])
        self.assertEqual(harness.host.cursor, 1)
        self.assertEqual(harness.ui.saved_cursor_item.word, "a")
        self.assertFalse(harness.ui.store.refreshed)
        self.assertEqual(harness.host.statuses[-1].item_count, 3)

    def test_window_spec_uses_resolved_expression_params(self) -> None:
        harness = _UiHarness(UiParams(split="floating"))
        harness.show("a")
        spec = harness.host.window_specs[-1]
        self.assertEqual((spec.width, spec.height, spec.col, spec.row), (50, 20, 25, 10))

    def test_horizontal_window_height_is_capped(self) -> None:
        harness = _UiHarness(UiParams(win_height=30))
        harness.show("a")
        self.assertEqual(harness.host.window_specs[-1].height, 16)

    def test_auto_resize_shrinks_window_to_item_count(self) -> None:
        harness = _UiHarness(UiParams(auto_resize=True))
        harness.show("a", "b")
        self.assertEqual(harness.host.window_specs[-1].height, 2)

    def test_sync_session_waits_for_done(self) -> None:
        harness = _UiHarness()
        harness.context.done = False
        harness.ui.refresh_items(make_items("a"), harness.context, harness.params)
        harness.ui.redraw(harness.context, Options(name="files", sync=True), harness.params)
        self.assertEqual(harness.host.window_specs, [])

    def test_invalid_split_is_reported_and_nothing_opens(self) -> None:
        harness = _UiHarness(UiParams(split="tab"))
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.show("a")
        self.assertEqual(harness.host.errors, ["Invalid split param: tab"])
        self.assertEqual(harness.host.window_specs, [])

    def test_buffer_update_failure_is_reported(self) -> None:
        harness = _UiHarness()
        harness.host.fail_update = True
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.show("a")
        self.assertEqual(harness.host.errors, ["[ffpicker] update buffer failed: buffer is locked"])
        self.assertIsNone(harness.ui.saved_cursor_item)

    def test_layout_failure_is_reported_and_redraw_dropped(self) -> None:
        harness = _UiHarness()
        harness.host.fail_layout = True
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.show("a", "b")
        self.assertEqual(harness.host.errors, ["[ffpicker] update buffer failed: geometry query failed"])
        self.assertEqual(harness.host.window_specs, [])
        self.assertEqual(harness.host.updates, [])
        self.assertEqual(len(harness.ui.store), 2)

    def test_open_window_failure_is_reported_and_redraw_dropped(self) -> None:
        harness = _UiHarness()
        harness.host.fail_open = True
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.show("a")
        self.assertEqual(harness.host.errors, ["[ffpicker] update buffer failed: window call failed"])
        self.assertEqual(harness.host.updates, [])
        self.assertFalse(harness.ui.visible())

        harness.host.fail_open = False
        harness.show("a")
        self.assertEqual(harness.host.buffer, ["a"])

    def test_statusline_off_publishes_no_status(self) -> None:
        harness = _UiHarness(UiParams(statusline=False))
        harness.show("a", "b")
        harness.ui.do_action("cursorNext")
        self.assertEqual(harness.host.statuses, [])
        self.assertEqual(harness.host.buffer, ["a", "b"])

    def test_reused_list_records_cursor_item_on_first_draw(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b")
        harness.ui.quit()

        harness.ui.on_init(harness.params)
        harness.show("x", "y")

        self.assertEqual(harness.ui.saved_cursor_item.word, "x")

    def test_ignore_empty_skips_window(self) -> None:
        harness = _UiHarness(UiParams(ignore_empty=True))
        harness.show()
        self.assertFalse(harness.ui.visible())

    def test_immediate_action_runs_for_single_item(self) -> None:
        harness = _UiHarness(UiParams(immediate_action="open"))
        harness.show("only")
        self.assertEqual(harness.host.window_specs, [])
        args, _kwargs = harness.calls_of("item_action")[0]
        self.assertEqual(args[:2], ("files", "open"))
        self.assertEqual([item.word for item in args[2]], ["only"])

    def test_cursor_returns_to_saved_item_after_refresh(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b", "c")
        harness.ui.do_action("cursorNext", {"count": 2})
        self.assertEqual(harness.ui.saved_cursor_item.word, "c")

        harness.show("x", "c", "a")

        self.assertEqual(harness.host.cursor, 2)

    def test_cursor_pos_applies_on_first_batch(self) -> None:
        harness = _UiHarness(UiParams(cursor_pos=2))
        harness.show("a", "b", "c")
        self.assertEqual(harness.host.updates[-1][1:], (True, 2))
        self.assertEqual(harness.ui.saved_cursor_item.word, "b")

    def test_done_with_no_items_closes_preview(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        harness.ui.do_action("preview")
        self.assertTrue(harness.ui.preview.visible)
        harness.show()
        self.assertFalse(harness.ui.preview.visible)


class ParamResolutionTests(unittest.TestCase):
    def test_invalid_expression_falls_back_to_default(self) -> None:
        harness = _UiHarness(UiParams(win_width="columns // nope"))
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            resolved = harness.ui.resolve_params(harness.params)
        self.assertEqual(resolved.win_width, 50)
        self.assertEqual(resolved.win_col, 25)
        self.assertTrue(harness.host.errors[0].startswith("[ffpicker] invalid expression in option: win_width"))

    def test_unknown_expression_param_is_reported(self) -> None:
        harness = _UiHarness(UiParams(expr_params=["bogus"]))
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.ui.resolve_params(harness.params)
        self.assertEqual(harness.host.errors, ["Invalid expr param: bogus"])

    def test_numeric_params_pass_through(self) -> None:
        harness = _UiHarness(UiParams(win_width=30, win_col=2))
        resolved = harness.ui.resolve_params(harness.params)
        self.assertEqual((resolved.win_width, resolved.win_col), (30, 2))
        self.assertEqual(harness.params.win_row, "lines // 2 - 10")


class CursorAndSelectionActionTests(unittest.TestCase):
    def test_cursor_actions_move_and_clamp(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b", "c")

        self.assertEqual(harness.ui.do_action("cursorNext"), ActionFlags.PERSIST)
        self.assertEqual(harness.host.cursor, 2)
        harness.ui.do_action("cursorNext", {"count": 5})
        self.assertEqual(harness.host.cursor, 3)
        harness.ui.do_action("cursorNext", {"loop": True})
        self.assertEqual(harness.host.cursor, 1)
        harness.ui.do_action("cursorPrevious", {"loop": True})
        self.assertEqual(harness.host.cursor, 3)
        self.assertEqual(harness.ui.saved_cursor_item.word, "c")

    def test_reversed_cursor_next_moves_towards_later_items(self) -> None:
        harness = _UiHarness(UiParams(reversed=True))
        harness.show("a", "b", "c")
        self.assertEqual(harness.host.buffer, ["c", "b", "a"])
        harness.host.set_cursor_line(3)

        harness.ui.do_action("cursorNext")

        self.assertEqual(harness.host.cursor, 2)
        self.assertEqual(harness.ui.current_item().word, "b")

    def test_toggle_select_and_current_items(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b", "c")
        self.assertEqual([item.word for item in harness.ui.current_items()], ["a"])

        self.assertEqual(harness.ui.do_action("toggleSelectItem"), ActionFlags.REDRAW)
        harness.ui.do_action("cursorNext", {"count": 2})
        harness.ui.do_action("toggleSelectItem")

        self.assertEqual([item.word for item in harness.ui.current_items()], ["a", "c"])
        harness.ui.redraw(harness.context, harness.options, harness.params)
        self.assertEqual(harness.host.highlight_calls[-1][1], [1, 3])

    def test_action_flags_are_only_those_callers_act_on(self) -> None:
        self.assertEqual(list(ActionFlags.__members__), ["NONE", "REDRAW", "PERSIST"])

    def test_toggle_all_and_clear(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b", "c")
        harness.ui.do_action("toggleSelectItem")
        harness.ui.do_action("toggleAllItems")
        self.assertEqual(harness.ui.selection.indices(), [1, 2])
        harness.ui.do_action("clearSelectAllItems")
        self.assertFalse(harness.ui.selection)

    def test_toggle_all_on_empty_list_is_noop(self) -> None:
        harness = _UiHarness()
        harness.show()
        self.assertEqual(harness.ui.do_action("toggleAllItems"), ActionFlags.NONE)

    def test_unknown_action_raises(self) -> None:
        harness = _UiHarness()
        with self.assertRaises(UnknownActionError) as ctx:
            harness.ui.do_action("explode")
        self.assertEqual(str(ctx.exception), "unknown UI action: explode")


class TreeActionTests(unittest.TestCase):
    def _tree_harness(self) -> _UiHarness:
        harness = _UiHarness()
        items = [tree_item("src", ["0"], 0, is_tree=True), tree_item("README", ["1"], 0)]
        harness.ui.refresh_items(items, harness.context, harness.params)
        harness.ui.redraw(harness.context, harness.options, harness.params)
        return harness

    def test_expand_item_requests_tree_redraw(self) -> None:
        harness = self._tree_harness()
        harness.ui.do_action("expandItem", {"maxLevel": 1})
        args, _kwargs = harness.calls_of("redraw_tree")[0]
        self.assertEqual(args[:2], ("files", "expand"))
        self.assertEqual(args[2][0]["maxLevel"], 1)
        self.assertEqual(args[2][0]["item"].word, "src")

    def test_toggle_mode_collapses_expanded_item(self) -> None:
        harness = self._tree_harness()
        parent = harness.ui.current_item()
        harness.ui.expand_item(expanded_copy(parent), [tree_item("a.py", ["0", "0"], 1)])
        harness.ui.do_action("expandItem", {"mode": "toggle"})
        args, _kwargs = harness.calls_of("redraw_tree")[0]
        self.assertEqual(args[1], "collapse")

    def test_collapse_on_leaf_is_ignored(self) -> None:
        harness = self._tree_harness()
        harness.ui.do_action("cursorNext")
        harness.ui.do_action("collapseItem")
        self.assertEqual(harness.calls_of("redraw_tree"), [])

    def test_expand_and_collapse_return_counts(self) -> None:
        harness = self._tree_harness()
        parent = harness.ui.current_item()
        added = harness.ui.expand_item(parent, [tree_item("a.py", ["0", "0"], 1), tree_item("b.py", ["0", "1"], 1)])
        self.assertEqual(added, 2)
        self.assertEqual(harness.ui.collapse_item(parent), 2)

    def test_search_item_ignores_stale_items(self) -> None:
        harness = self._tree_harness()
        self.assertTrue(harness.ui.search_item(tree_item("README", ["1"], 0)))
        self.assertEqual(harness.host.cursor, 2)
        self.assertFalse(harness.ui.search_item(tree_item("gone", ["7"], 0)))
        self.assertEqual(harness.host.cursor, 2)


class ItemActionTests(unittest.TestCase):
    def test_item_action_sends_current_items(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b")
        harness.ui.do_action("itemAction", {"name": "open", "params": {"split": True}})
        args, _kwargs = harness.calls_of("item_action")[0]
        self.assertEqual(args[1], "open")
        self.assertEqual([item.word for item in args[2]], ["a"])
        self.assertEqual(args[3], {"split": True})

    def test_item_action_without_items_persists(self) -> None:
        harness = _UiHarness()
        harness.show()
        self.assertEqual(harness.ui.do_action("itemAction"), ActionFlags.PERSIST)
        self.assertEqual(harness.calls_of("item_action"), [])

    def test_input_action_asks_host_for_name(self) -> None:
        harness = _UiHarness(action_names=("open", "delete"))
        harness.host.input_answer = "delete"
        harness.show("a")
        harness.ui.do_action("inputAction")
        self.assertEqual(harness.host.prompts, [("Input action name: ", ["open", "delete"])])
        self.assertEqual(harness.calls_of("item_action")[0][0][1], "delete")

    def test_choose_action_starts_action_source(self) -> None:
        harness = _UiHarness(action_names=("open",))
        harness.show("a")
        harness.ui.do_action("chooseAction")
        _args, kwargs = harness.calls_of("start")[0]
        self.assertTrue(kwargs["push"])
        self.assertEqual(kwargs["sources"][0]["params"]["actions"], ["open"])

    def test_get_actions_export_items(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b")
        harness.ui.do_action("getItem")
        harness.ui.do_action("getItems")
        harness.ui.do_action("getSelectedItems")
        self.assertEqual(harness.ui.exports["item"].word, "a")
        self.assertEqual(len(harness.ui.exports["items"]), 2)
        self.assertEqual([item.word for item in harness.ui.exports["selected_items"]], ["a"])

    def test_preview_path_echoes_item_text(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        self.assertEqual(harness.ui.do_action("previewPath"), ActionFlags.PERSIST)
        self.assertEqual(harness.host.echoes, ["a"])

    def test_update_options_merges_ui_params(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        harness.ui.do_action("updateOptions", {"uiParams": {"previewSplit": "vertical"}})
        self.assertEqual(harness.ui.params.preview_split, "vertical")
        self.assertEqual(len(harness.calls_of("update_options")), 1)

    def test_redraw_action_keeps_cursor_item(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b")
        harness.ui.do_action("cursorNext")
        harness.ui.do_action("redraw")
        _args, kwargs = harness.calls_of("redraw")[0]
        self.assertEqual(kwargs["method"], "uiRefresh")
        self.assertEqual(kwargs["search_item"].word, "b")


class PreviewActionTests(unittest.TestCase):
    def test_toggle_preview_opens_and_closes(self) -> None:
        harness = _UiHarness()
        harness.show("a", "b")
        harness.ui.do_action("togglePreview")
        self.assertEqual(harness.ui.win_ids(), [1, harness.ui.preview.handle])
        harness.ui.do_action("togglePreview")
        self.assertFalse(harness.ui.preview.visible)

    def test_preview_execute_reaches_host(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        harness.ui.do_action("preview")
        harness.ui.do_action("previewExecute", {"command": "down"})
        self.assertEqual(harness.host.preview_commands, [(harness.ui.preview.handle, "down")])

    def test_close_preview_window(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        harness.ui.do_action("preview")
        harness.ui.do_action("closePreviewWindow")
        self.assertEqual(harness.ui.win_ids(), [1])


class AutoActionTests(unittest.TestCase):
    def test_cursor_move_schedules_auto_preview(self) -> None:
        harness = _UiHarness(UiParams(start_auto_action=True, auto_action={"name": "preview"}))
        harness.show("a", "b")
        harness.ui.do_action("cursorNext")
        self.assertFalse(harness.ui.preview.visible)

        harness.clock.advance(0.2)
        self.assertTrue(harness.ui.poll_timers())

        self.assertEqual(harness.ui.preview.previewed_item.word, "b")

    def test_toggle_auto_action_off_closes_preview(self) -> None:
        harness = _UiHarness(UiParams(start_auto_action=True, auto_action={"name": "preview", "delay": 0}))
        harness.show("a")
        self.assertTrue(harness.ui.preview.visible)
        harness.ui.do_action("toggleAutoAction")
        self.assertFalse(harness.ui.auto_action.enabled)
        self.assertFalse(harness.ui.preview.visible)

    def test_unknown_auto_action_is_reported(self) -> None:
        harness = _UiHarness(UiParams(start_auto_action=True, auto_action={"name": "nope", "delay": 0}))
        with self.assertLogs("ffpicker.ui", level="WARNING"):
            harness.show("a")
        self.assertEqual(harness.host.errors, ["[ffpicker] auto action failed: unknown UI action: nope"])

    def test_shared_scheduler_keeps_enabled_flag_between_lists(self) -> None:
        clock = FakeClock()
        shared = AutoActionScheduler(enabled=False, slot=TimerSlot("auto-action", clock))
        first = ListUi(RecordingHost(), auto_action=shared, clock=clock)
        first.on_init(UiParams(start_auto_action=True))
        second = ListUi(RecordingHost(), auto_action=shared, clock=clock)
        self.assertIs(second.auto_action, shared)
        self.assertTrue(second.auto_action.enabled)


class FilterWindowTests(unittest.TestCase):
    def test_open_filter_with_new_input_refreshes_at_once(self) -> None:
        harness = _UiHarness()
        harness.show("alpha", "beta")
        harness.ui.do_action("openFilterWindow", {"input": "al"})

        self.assertTrue(harness.ui.filter_active)
        self.assertEqual(harness.host.filters, [("al", 2)])
        _args, kwargs = harness.calls_of("redraw")[0]
        self.assertEqual(kwargs, {"input": "al", "method": "refreshItems"})
        self.assertEqual(harness.ui.context.input, "al")

    def test_debounced_edits_refresh_once(self) -> None:
        harness = _UiHarness(UiParams(filter_update_time=50))
        harness.show("alpha", "beta")
        harness.ui.do_action("openFilterWindow")
        self.assertEqual(harness.calls_of("redraw"), [])

        for text in ("a", "al", "alp"):
            harness.ui.filter_changed(text)
        self.assertAlmostEqual(harness.ui.next_timer_deadline(), 0.05)
        harness.clock.advance(0.1)
        harness.ui.poll_timers()

        inputs = [kwargs["input"] for _args, kwargs in harness.calls_of("redraw")]
        self.assertEqual(inputs, ["alp"])

    def test_filter_close_flushes_pending_text(self) -> None:
        harness = _UiHarness(UiParams(filter_update_time=50))
        harness.show("alpha")
        harness.ui.do_action("openFilterWindow")
        harness.ui.filter_changed("x")
        harness.ui.filter_closed("xy")

        self.assertFalse(harness.ui.filter_active)
        self.assertIsNone(harness.ui.next_timer_deadline())
        inputs = [kwargs["input"] for _args, kwargs in harness.calls_of("redraw")]
        self.assertEqual(inputs, ["xy"])

    def test_vertical_preview_reopens_around_horizontal_filter(self) -> None:
        harness = _UiHarness(UiParams(preview_split="vertical"))
        harness.show("a")
        harness.ui.do_action("preview")
        first_handle = harness.ui.preview.handle

        harness.ui.do_action("openFilterWindow")

        self.assertIn(("close", first_handle), harness.host.preview_calls)
        self.assertTrue(harness.ui.preview.visible)
        self.assertNotEqual(harness.ui.preview.handle, first_handle)


class QuitTests(unittest.TestCase):
    def test_quit_action_closes_once_even_when_host_reenters(self) -> None:
        harness = _UiHarness()
        harness.show("a")
        harness.host.on_close = harness.ui.quit
        harness.ui.do_action("preview")

        harness.ui.do_action("quit")

        self.assertEqual(harness.host.closed, [True])
        self.assertFalse(harness.ui.preview.visible)
        self.assertEqual(harness.calls_of("event"), [(("files", "close"), {})])
        self.assertEqual(harness.calls_of("pop"), [(("files",), {})])
        self.assertFalse(harness.ui.visible())

    def test_quit_cancels_pending_timers(self) -> None:
        harness = _UiHarness(UiParams(filter_update_time=50))
        harness.show("a")
        harness.ui.do_action("openFilterWindow")
        harness.ui.filter_changed("a")
        harness.ui.quit()
        self.assertIsNone(harness.ui.next_timer_deadline())
        self.assertEqual(harness.host.closed, [False])


if __name__ == "__main__":
    unittest.main()
