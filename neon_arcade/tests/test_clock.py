"""
Tests for schedulers and timer groups.
"""

import asyncio

import pytest

from ..engine_core import AsyncioScheduler, ManualScheduler, TimerGroup


class TestManualScheduler:
    """Tests for virtual time."""

    def test_one_shot_fires_at_due_time(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(1.0, lambda: fired.append(scheduler.now()))

        scheduler.advance(0.999)
        assert fired == []
        scheduler.advance(0.001)
        assert fired == [pytest.approx(1.0)]

    def test_fires_in_due_order_then_schedule_order(self):
        scheduler = ManualScheduler()
        order = []
        scheduler.call_later(0.5, lambda: order.append("b"))
        scheduler.call_later(0.2, lambda: order.append("a"))
        scheduler.call_later(0.5, lambda: order.append("c"))

        scheduler.advance(1.0)

        assert order == ["a", "b", "c"]

    def test_periodic_does_not_drift(self):
        scheduler = ManualScheduler()
        ticks = []
        scheduler.call_every(0.1, lambda: ticks.append(scheduler.now()))

        scheduler.advance(30.0)

        assert len(ticks) == 300
        assert ticks[-1] == 30.0

    def test_cancelled_task_never_fires(self):
        scheduler = ManualScheduler()
        fired = []
        task = scheduler.call_later(1.0, lambda: fired.append(1))
        task.cancel()
        task.cancel()

        scheduler.advance(2.0)

        assert fired == []
        assert task.cancelled
        assert scheduler.pending_count == 0

    def test_callback_can_cancel_a_later_task(self):
        scheduler = ManualScheduler()
        fired = []
        later = scheduler.call_later(1.0, lambda: fired.append("later"))
        scheduler.call_later(0.5, later.cancel)

        scheduler.advance(2.0)

        assert fired == []

    def test_callback_scheduled_inside_window_fires(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(0.5, lambda: scheduler.call_later(0.5, lambda: fired.append(scheduler.now())))

        scheduler.advance(1.0)

        assert fired == [pytest.approx(1.0)]

    def test_time_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            ManualScheduler().advance(-1.0)

    def test_run_all_drains_one_shots(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(3.0, lambda: fired.append(1))
        scheduler.call_later(7.0, lambda: fired.append(2))

        scheduler.run_all()

        assert fired == [1, 2]
        assert scheduler.now() == pytest.approx(7.0)


class TestTimerGroup:
    """Tests for session-owned timer sets."""

    def test_cancel_all_cancels_every_task(self):
        scheduler = ManualScheduler()
        timers = TimerGroup(scheduler)
        fired = []
        timers.every(0.1, lambda: fired.append("tick"))
        timers.later(1.0, lambda: fired.append("once"))

        assert timers.active_count == 2
        timers.cancel_all()
        scheduler.advance(5.0)

        assert fired == []
        assert timers.active_count == 0
        assert scheduler.pending_count == 0

    def test_fired_one_shots_are_not_active(self):
        scheduler = ManualScheduler()
        timers = TimerGroup(scheduler)
        timers.later(0.1, lambda: None)

        scheduler.advance(0.2)

        assert timers.active_count == 0


class TestAsyncioScheduler:
    """Tests for the event-loop scheduler."""

    def test_fires_and_cancels(self):
        fired = []

        async def main():
            scheduler = AsyncioScheduler()
            scheduler.call_later(0.01, lambda: fired.append("a"))
            cancelled = scheduler.call_later(0.01, lambda: fired.append("b"))
            cancelled.cancel()
            ticks = scheduler.call_every(0.005, lambda: fired.append("t"))
            await asyncio.sleep(0.06)
            ticks.cancel()
            count = fired.count("t")
            await asyncio.sleep(0.02)
            return count

        count = asyncio.run(main())

        assert "a" in fired
        assert "b" not in fired
        assert count >= 2
        assert fired.count("t") == count
