"""
Clock - Cancellable scheduled callbacks.

A running game never touches platform timers directly. It asks a
Scheduler for:
- One-shot callbacks (tile expiry, sequence replay steps, round settle)
- Periodic callbacks (the reaction countdown tick)

Every task a game schedules goes through a TimerGroup owned by that game,
so finishing or aborting the game cancels all of them as a unit.

Two schedulers are provided:
- ManualScheduler: virtual time, advanced explicitly (tests, simulation)
- AsyncioScheduler: wall-clock time on an asyncio event loop
"""

from __future__ import annotations
import asyncio
import heapq
import itertools
from typing import Callable, Protocol

Callback = Callable[[], None]

# Float tolerance when comparing virtual due times
_EPSILON = 1e-9


class ScheduledTask:
    """
    Handle to a scheduled callback.

    Cancelling is idempotent; a cancelled task never fires.
    """

    def __init__(self, callback: Callback, interval: float | None = None):
        self.callback = callback
        self.interval = interval
        self._cancelled = False
        self._done = False
        self._on_cancel: Callback | None = None
        self._origin = 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """True until the task is cancelled or, for a one-shot, has fired."""
        return not (self._cancelled or self._done)

    @property
    def periodic(self) -> bool:
        return self.interval is not None

    def cancel(self):
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None

    def _fire(self):
        if self._cancelled or self._done:
            return
        if not self.periodic:
            self._done = True
        self.callback()


class Scheduler(Protocol):
    """Source of time and deferred callbacks."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask: ...

    def call_every(self, interval: float, callback: Callback) -> ScheduledTask: ...


class TimerGroup:
    """
    The set of tasks owned by one game session.

    Usage:
        timers = TimerGroup(scheduler)
        timers.every(0.1, self._tick)
        expiry = timers.later(2.0, self._expire)
        ...
        timers.cancel_all()  # on every exit path
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._tasks: list[ScheduledTask] = []

    def later(self, delay: float, callback: Callback) -> ScheduledTask:
        task = self.scheduler.call_later(delay, callback)
        self._track(task)
        return task

    def every(self, interval: float, callback: Callback) -> ScheduledTask:
        task = self.scheduler.call_every(interval, callback)
        self._track(task)
        return task

    def cancel_all(self):
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks if task.active)

    def _track(self, task: ScheduledTask):
        # Drop finished one-shots so long sessions don't grow the list
        self._tasks = [t for t in self._tasks if t.active]
        self._tasks.append(task)


class ManualScheduler:
    """
    Virtual-time scheduler.

    Time only moves when advance() is called. Due callbacks fire in
    due-time order, ties in the order they were scheduled, with now()
    set to each callback's due time while it runs. Callbacks may schedule
    or cancel other tasks; anything that comes due inside the advanced
    window fires in the same call.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ScheduledTask, int]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        task = ScheduledTask(callback)
        self._push(self._now + max(0.0, delay), task, 0)
        return task

    def call_every(self, interval: float, callback: Callback) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = ScheduledTask(callback, interval=interval)
        # Re-arming is origin + n * interval, so float drift never accumulates
        task._origin = self._now
        self._push(self._now + interval, task, 1)
        return task

    def advance(self, delta: float):
        """Move virtual time forward by delta, firing everything that comes due."""
        if delta < 0:
            raise ValueError("cannot move time backwards")
        target = self._now + delta

        while self._queue and self._queue[0][0] <= target + _EPSILON:
            due, _, task, occurrence = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = max(self._now, due)
            if task.periodic:
                self._push(task._origin + (occurrence + 1) * task.interval, task, occurrence + 1)
            task._fire()

        self._now = max(self._now, target)

    def run_all(self, limit: float = 3600.0):
        """Advance until no one-shot or periodic task remains, or limit elapses."""
        deadline = self._now + limit
        while self.pending_count and self._now < deadline:
            next_due = min(due for due, _, task, _ in self._queue if not task.cancelled)
            self.advance(max(0.0, min(next_due, deadline) - self._now))

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task, _ in self._queue if not task.cancelled)

    def _push(self, due: float, task: ScheduledTask, occurrence: int):
        heapq.heappush(self._queue, (round(due, 9), next(self._counter), task, occurrence))


class AsyncioScheduler:
    """
    Wall-clock scheduler backed by an asyncio event loop.

    Callbacks run on the loop's thread, which keeps the single logical
    thread of control a game expects. Without an explicit loop it must be
    created from inside a running coroutine.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        task = ScheduledTask(callback)
        handle = self.loop.call_later(max(0.0, delay), task._fire)
        task._on_cancel = handle.cancel
        return task

    def call_every(self, interval: float, callback: Callback) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = ScheduledTask(callback, interval=interval)
        origin = self.loop.time()
        occurrence = 0

        def _run():
            nonlocal occurrence
            if task.cancelled:
                return
            occurrence += 1
            # Re-arm before firing so a callback that cancels wins
            _arm(origin + (occurrence + 1) * interval)
            task._fire()

        def _arm(when: float):
            handle = self.loop.call_at(when, _run)
            task._on_cancel = handle.cancel

        _arm(origin + interval)
        return task
