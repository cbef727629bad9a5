"""Debounced live-filter refresh dispatch."""

from __future__ import annotations

from collections.abc import Callable

from ..scheduling import TimerSlot


class RedrawDebouncer:
    """Coalesce filter-input edits into at most one refresh per settled burst.

    ``refresh`` receives the new input text. ``is_filter_active`` reports
    whether the filter surface still owns input; timers that fire after the
    filter closed are dropped. ``item_count`` feeds the ``update_max`` cutoff
    above which live updates are suppressed until :meth:`flush`.
    """

    def __init__(
        self,
        refresh: Callable[[str], None],
        is_filter_active: Callable[[], bool],
        item_count: Callable[[], int],
        slot: TimerSlot | None = None,
    ) -> None:
        self._refresh = refresh
        self._is_filter_active = is_filter_active
        self._item_count = item_count
        self.slot = slot if slot is not None else TimerSlot("filter-debounce")
        self.interval_ms = 0
        self.update_max = 0
        self.last_dispatched: str | None = None
        self._pending_text: str | None = None

    @property
    def pending(self) -> bool:
        return self.slot.pending

    def configure(self, interval_ms: int, update_max: int = 0) -> None:
        self.interval_ms = max(0, int(interval_ms))
        self.update_max = max(0, int(update_max))

    def reset(self, text: str) -> None:
        """Start a filter session whose current input is already displayed."""
        self.cancel()
        self.last_dispatched = text

    def live_updates_enabled(self) -> bool:
        return self.update_max <= 0 or self._item_count() <= self.update_max

    def on_input_changed(self, text: str) -> None:
        """Handle one edit; the most recent edit replaces any pending one."""
        if not self.live_updates_enabled():
            return
        if self.interval_ms <= 0:
            self._pending_text = text
            self._fire()
            return
        self._pending_text = text
        self.slot.schedule(self.interval_ms / 1000.0, self._fire)

    def flush(self, text: str) -> bool:
        """Dispatch ``text`` immediately, bypassing the timer and live cutoff."""
        self.slot.cancel()
        self._pending_text = None
        return self._dispatch(text, require_filter=False)

    def cancel(self) -> None:
        self.slot.cancel()
        self._pending_text = None

    def _fire(self) -> None:
        text = self._pending_text
        self._pending_text = None
        if text is None:
            return
        self._dispatch(text, require_filter=True)

    def _dispatch(self, text: str, *, require_filter: bool) -> bool:
        if text == self.last_dispatched:
            return False
        if require_filter and not self._is_filter_active():
            return False
        self.last_dispatched = text
        self._refresh(text)
        return True
