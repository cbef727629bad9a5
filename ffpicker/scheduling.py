"""Single-slot timers polled from the host event loop.

Each slot holds at most one pending callback; scheduling again replaces it,
so only the latest request ever fires. Slots never spawn threads: the loop
asks for the next deadline, sleeps on input until then, and calls
``fire_if_due``. All callbacks therefore run on the loop thread.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable


class TimerSlot:
    """Latest-request-wins delayed callback."""

    def __init__(self, name: str, clock: Callable[[], float] = time.monotonic) -> None:
        self.name = name
        self._clock = clock
        self._deadline: float | None = None
        self._callback: Callable[[], None] | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._callback is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> int:
        """Replace any pending callback and return the new generation id."""
        self._generation += 1
        self._deadline = self._clock() + max(0.0, delay_seconds)
        self._callback = callback
        return self._generation

    def cancel(self) -> bool:
        """Drop the pending callback, returning whether one was pending."""
        was_pending = self._callback is not None
        self._deadline = None
        self._callback = None
        return was_pending

    def seconds_until_due(self, now: float | None = None) -> float | None:
        """Return seconds until the pending callback is due, ``None`` when idle."""
        if self._deadline is None:
            return None
        current = self._clock() if now is None else now
        return max(0.0, self._deadline - current)

    def fire_if_due(self, now: float | None = None) -> bool:
        """Run the pending callback when its deadline passed."""
        if self._callback is None or self._deadline is None:
            return False
        current = self._clock() if now is None else now
        if current < self._deadline:
            return False
        callback = self._callback
        self._deadline = None
        self._callback = None
        callback()
        return True


def next_deadline_seconds(slots: Iterable[TimerSlot], now: float | None = None) -> float | None:
    """Return the shortest wait across ``slots``, ``None`` when all are idle."""
    waits = [wait for wait in (slot.seconds_until_due(now) for slot in slots) if wait is not None]
    return min(waits) if waits else None
