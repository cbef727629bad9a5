"""Delayed auto-action (for example auto-preview) after the cursor settles."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .scheduling import TimerSlot


class AutoActionScheduler:
    """Own the auto-action enablement flag and its single timer slot.

    One scheduler may be shared by several list UIs; the enabled flag then
    survives any single list. ``run_action`` receives the action name and
    params when a scheduled action fires. ``on_disabled`` runs when the user
    toggles auto actions off (the list UI closes its preview there).
    """

    def __init__(
        self,
        enabled: bool = False,
        slot: TimerSlot | None = None,
    ) -> None:
        self.enabled = enabled
        self.slot = slot if slot is not None else TimerSlot("auto-action")
        self.settings: dict[str, Any] | None = None
        self.run_action: Callable[[str, dict[str, Any]], None] | None = None
        self.on_disabled: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self.enabled and self.settings is not None

    def configure(self, settings: dict[str, Any] | None) -> None:
        """Install auto-action settings and drop any pending schedule."""
        self.slot.cancel()
        self.settings = dict(settings) if settings else None

    def toggle(self) -> bool:
        """Flip enablement and return the new value."""
        self.enabled = not self.enabled
        if self.enabled:
            self.arm()
        else:
            self.slot.cancel()
            if self.on_disabled is not None:
                self.on_disabled()
        return self.enabled

    def arm(self) -> None:
        """Schedule the configured action, replacing any pending one."""
        self.slot.cancel()
        if not self.active or self.run_action is None:
            return
        settings = self.settings or {}
        delay_ms = settings.get("delay", 0)
        try:
            delay_ms = float(delay_ms)
        except (TypeError, ValueError):
            delay_ms = 0.0
        # sync=False always goes through the slot, even with no delay.
        if delay_ms <= 0 and settings.get("sync", True):
            self._fire()
            return
        self.slot.schedule(max(0.0, delay_ms) / 1000.0, self._fire)

    def cancel(self) -> None:
        self.slot.cancel()

    def _fire(self) -> None:
        if not self.active or self.run_action is None:
            return
        settings = self.settings or {}
        params = settings.get("params") or {}
        self.run_action(str(settings["name"]), dict(params))
