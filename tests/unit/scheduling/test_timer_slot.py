"""Tests for polled single-slot timers."""

from __future__ import annotations

import unittest

from fakes import FakeClock

from ffpicker.scheduling import TimerSlot, next_deadline_seconds


class TimerSlotTests(unittest.TestCase):
    def test_callback_fires_only_after_deadline(self) -> None:
        clock = FakeClock()
        fired: list[str] = []
        slot = TimerSlot("test", clock)
        slot.schedule(0.5, lambda: fired.append("x"))

        self.assertFalse(slot.fire_if_due())
        clock.advance(0.5)
        self.assertTrue(slot.fire_if_due())
        self.assertEqual(fired, ["x"])
        self.assertFalse(slot.pending)
        self.assertFalse(slot.fire_if_due())

    def test_schedule_replaces_pending_callback(self) -> None:
        clock = FakeClock()
        fired: list[str] = []
        slot = TimerSlot("test", clock)
        first = slot.schedule(0.1, lambda: fired.append("first"))
        second = slot.schedule(0.3, lambda: fired.append("second"))

        self.assertGreater(second, first)
        clock.advance(0.2)
        self.assertFalse(slot.fire_if_due())
        clock.advance(0.2)
        slot.fire_if_due()
        self.assertEqual(fired, ["second"])

    def test_cancel_reports_whether_callback_was_pending(self) -> None:
        slot = TimerSlot("test", FakeClock())
        self.assertFalse(slot.cancel())
        slot.schedule(1.0, lambda: None)
        self.assertTrue(slot.cancel())
        self.assertIsNone(slot.deadline)

    def test_next_deadline_is_shortest_wait(self) -> None:
        clock = FakeClock()
        first = TimerSlot("a", clock)
        second = TimerSlot("b", clock)
        self.assertIsNone(next_deadline_seconds((first, second)))
        first.schedule(2.0, lambda: None)
        second.schedule(0.25, lambda: None)
        self.assertAlmostEqual(next_deadline_seconds((first, second)), 0.25)
        clock.advance(1.0)
        self.assertEqual(next_deadline_seconds((second,)), 0.0)


if __name__ == "__main__":
    unittest.main()
