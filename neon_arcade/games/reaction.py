"""
Reaction Game - Neon Tap Rush.

One tile on a grid lights up at a time. The player must tap it before
the reaction window closes:
- Hit: +1 score, +2 reward, next tile lights up
- Every 10th point: reaction window shrinks by 0.1 (floor 0.8)
- Wrong tile, window expiry, or empty time budget: run over

Phases: READY -> PLAYING -> FINISHED (one-way).
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass

from ..config import ReactionConfig
from ..engine_core.clock import ScheduledTask, Scheduler, TimerGroup
from ..engine_core.result import (
    GameKind,
    GamePhase,
    InputEvent,
    InputType,
    ResultCallback,
    ResultLatch,
    SessionResult,
    WallClock,
)
from ..engine_core.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReactionSnapshot:
    """Read-only view of a reaction round for rendering."""
    phase: GamePhase
    score: int
    reward: int
    time_remaining: float
    active_tile: int | None
    reaction_window: float
    activated_at: float | None
    tile_count: int


class ReactionGame:
    """
    Reaction-tap state machine.

    Usage:
        game = ReactionGame(scheduler, rng, on_result=store_result)
        game.start()
        game.tap(game.active_tile)   # hit
        ...
    """

    kind = GameKind.REACTION

    def __init__(
        self,
        scheduler: Scheduler,
        rng: RandomSource,
        config: ReactionConfig | None = None,
        on_result: ResultCallback | None = None,
        clock: WallClock | None = None,
    ):
        self.scheduler = scheduler
        self.rng = rng
        self.config = config or ReactionConfig()
        self.clock = clock or time.time
        self.timers = TimerGroup(scheduler)
        self._latch = ResultLatch(on_result)

        self._phase = GamePhase.READY
        self.score = 0
        self.reward = 0
        self.time_remaining = self.config.time_budget
        self.reaction_window = self.config.initial_window
        self.active_tile: int | None = None
        self.activated_at: float | None = None
        self._expiry: ScheduledTask | None = None
        self._aborted = False

    # -- GameSession ---------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_finished(self) -> bool:
        return self._phase == GamePhase.FINISHED

    @property
    def result(self) -> SessionResult | None:
        return self._latch.value

    def start(self):
        """Reset the run and begin playing. Ignored unless READY."""
        if self._phase != GamePhase.READY:
            logger.debug("reaction start ignored in phase %s", self._phase.value)
            return

        self.score = 0
        self.reward = 0
        self.time_remaining = self.config.time_budget
        self.reaction_window = self.config.initial_window
        self._phase = GamePhase.PLAYING

        self.timers.every(self.config.tick_interval, self._tick)
        self.activate_tile()
        logger.info("reaction session started (budget=%.1f)", self.time_remaining)

    def handle_input(self, event: InputEvent):
        if event.input_type == InputType.TAP and event.index is not None:
            self.tap(event.index)
        else:
            logger.debug("reaction ignores %s input", event.input_type.value)

    def snapshot(self) -> ReactionSnapshot:
        return ReactionSnapshot(
            phase=self._phase,
            score=self.score,
            reward=self.reward,
            time_remaining=max(0.0, self.time_remaining),
            active_tile=self.active_tile,
            reaction_window=self.reaction_window,
            activated_at=self.activated_at,
            tile_count=self.config.tile_count,
        )

    def abort(self):
        """Stop without producing a result (e.g. the screen was closed)."""
        if self.is_finished:
            return
        self._aborted = True
        self._phase = GamePhase.FINISHED
        self.timers.cancel_all()
        self.active_tile = None
        logger.info("reaction session aborted at score %d", self.score)

    @property
    def aborted(self) -> bool:
        return self._aborted

    # -- Gameplay ------------------------------------------------------------

    def activate_tile(self):
        """Light a uniformly random tile and re-arm its expiry."""
        if self._phase != GamePhase.PLAYING:
            return

        self.active_tile = self.rng.randrange(self.config.tile_count)
        self.activated_at = self.scheduler.now()

        if self._expiry is not None:
            self._expiry.cancel()
        self._expiry = self.timers.later(self.reaction_window, self._expire)

    def tap(self, index: int):
        """Tap a tile. A miss ends the run; a hit scores and lights the next tile."""
        if self._phase != GamePhase.PLAYING:
            logger.debug("reaction tap %d ignored in phase %s", index, self._phase.value)
            return
        # Only a real tile can be a miss; an index off the grid is not a tap on any tile
        if not 0 <= index < self.config.tile_count:
            logger.debug("reaction tap %d outside the grid", index)
            return

        if index != self.active_tile:
            logger.debug("reaction miss: tapped %d, active %s", index, self.active_tile)
            self.end()
            return

        self.score += 1
        self.reward += self.config.reward_per_hit
        if self.score % self.config.points_per_step == 0:
            self._tighten_window()

        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None
        self.activate_tile()

    def end(self):
        """Finish the run and emit its result. No-op once finished."""
        if self._phase != GamePhase.PLAYING:
            return

        self._phase = GamePhase.FINISHED
        self.timers.cancel_all()
        self._expiry = None
        self.active_tile = None

        logger.info("reaction session finished: score=%d reward=%d", self.score, self.reward)
        self._latch.set(SessionResult.now(self.kind, self.score, self.reward, self.clock))

    # -- Timers --------------------------------------------------------------

    def _tick(self):
        if self._phase != GamePhase.PLAYING:
            return
        self.time_remaining = round(self.time_remaining - self.config.tick_interval, 6)
        if self.time_remaining <= 0:
            self.time_remaining = 0.0
            self.end()

    def _expire(self):
        if self._phase == GamePhase.PLAYING:
            logger.debug("reaction tile %s expired", self.active_tile)
            self.end()

    def _tighten_window(self):
        # Ratchet: only ever moves down, never below the floor
        tightened = round(self.reaction_window - self.config.window_step, 6)
        self.reaction_window = min(self.reaction_window, max(self.config.window_floor, tightened))
