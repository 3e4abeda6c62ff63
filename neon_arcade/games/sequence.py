"""
Sequence Game - Pulse Pattern Trail.

Classic "Simon" escalation:
1. Each round appends one random pad to the sequence
2. The engine replays the whole sequence (SHOWING): for every element
   it waits a gap, highlights the pad, then clears the highlight
3. The player repeats it (USER_TURN)
4. A full correct repeat pays round * 3 and, after a short settle,
   starts the next round
5. The first wrong pad ends the game

The engine does no animation. It only exposes which pad is currently
highlighted and gates input until the replay is over.

Score is the number of rounds fully completed, so failing round r
scores r - 1.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass

from ..config import SequenceConfig
from ..engine_core.clock import Scheduler, TimerGroup
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
class SequenceSnapshot:
    """Read-only view of a sequence round for rendering."""
    phase: GamePhase
    round: int
    sequence: tuple[int, ...]
    user_progress: tuple[int, ...]
    highlighted_pad: int | None
    completed_rounds: int
    reward: int
    pad_count: int

    @property
    def accepting_input(self) -> bool:
        return (
            self.phase == GamePhase.USER_TURN
            and len(self.user_progress) < len(self.sequence)
        )


class SequenceGame:
    """
    Sequence-repeat state machine.

    Phases: READY -> SHOWING <-> USER_TURN -> FINISHED.
    """

    kind = GameKind.SEQUENCE

    def __init__(
        self,
        scheduler: Scheduler,
        rng: RandomSource,
        config: SequenceConfig | None = None,
        on_result: ResultCallback | None = None,
        clock: WallClock | None = None,
    ):
        self.scheduler = scheduler
        self.rng = rng
        self.config = config or SequenceConfig()
        self.clock = clock or time.time
        self.timers = TimerGroup(scheduler)
        self._latch = ResultLatch(on_result)

        self._phase = GamePhase.READY
        self.round = 0
        self.sequence: list[int] = []
        self.user_progress: list[int] = []
        self.highlighted_pad: int | None = None
        self.completed_rounds = 0
        self.reward = 0
        self._show_index = 0
        self._aborted = False

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_finished(self) -> bool:
        return self._phase == GamePhase.FINISHED

    @property
    def result(self) -> SessionResult | None:
        return self._latch.value

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def score(self) -> int:
        return self.completed_rounds

    def start(self):
        """Clear everything and begin round 1. Ignored unless READY."""
        if self._phase != GamePhase.READY:
            logger.debug("sequence start ignored in phase %s", self._phase.value)
            return

        self.round = 0
        self.sequence = []
        self.user_progress = []
        self.completed_rounds = 0
        self.reward = 0
        logger.info("sequence session started")
        self.advance_round()

    def handle_input(self, event: InputEvent):
        if event.input_type == InputType.TAP and event.index is not None:
            self.tap_pad(event.index)
        else:
            logger.debug("sequence ignores %s input", event.input_type.value)

    def snapshot(self) -> SequenceSnapshot:
        return SequenceSnapshot(
            phase=self._phase,
            round=self.round,
            sequence=tuple(self.sequence),
            user_progress=tuple(self.user_progress),
            highlighted_pad=self.highlighted_pad,
            completed_rounds=self.completed_rounds,
            reward=self.reward,
            pad_count=self.config.pad_count,
        )

    def abort(self):
        """Stop without producing a result."""
        if self.is_finished:
            return
        self._aborted = True
        self._phase = GamePhase.FINISHED
        self.timers.cancel_all()
        self.highlighted_pad = None
        logger.info("sequence session aborted in round %d", self.round)

    # -- Rounds --------------------------------------------------------------

    def advance_round(self):
        """Grow the sequence by one pad and replay it."""
        if self.is_finished:
            return

        self.round += 1
        self.sequence.append(self.rng.randrange(self.config.pad_count))
        self.user_progress = []
        self.highlighted_pad = None
        self._phase = GamePhase.SHOWING
        self._show_index = 0

        logger.debug("sequence round %d: %s", self.round, self.sequence)
        self.timers.later(self.config.gap_duration, self._highlight_next)

    def tap_pad(self, index: int):
        """Repeat one element. Only accepted during the player's turn."""
        if self._phase != GamePhase.USER_TURN:
            logger.debug("sequence tap %d ignored in phase %s", index, self._phase.value)
            return
        if not 0 <= index < self.config.pad_count:
            logger.debug("sequence tap %d outside the pads", index)
            return
        if len(self.user_progress) >= len(self.sequence):
            # Round already cleared, waiting on the settle delay
            return

        self.user_progress.append(index)
        expected = self.sequence[len(self.user_progress) - 1]

        if index != expected:
            logger.debug(
                "sequence mismatch in round %d: expected %d, got %d",
                self.round, expected, index,
            )
            self.end()
            return

        if len(self.user_progress) == len(self.sequence):
            self.completed_rounds = self.round
            self.reward += self.round * self.config.reward_multiplier
            self.timers.later(self.config.settle_delay, self.advance_round)

    def end(self):
        """Finish the game and emit its result. No-op once finished."""
        if self._phase in (GamePhase.READY, GamePhase.FINISHED):
            return

        self._phase = GamePhase.FINISHED
        self.timers.cancel_all()
        self.highlighted_pad = None

        logger.info(
            "sequence session finished: rounds=%d reward=%d",
            self.completed_rounds, self.reward,
        )
        self._latch.set(SessionResult.now(self.kind, self.completed_rounds, self.reward, self.clock))

    # -- Replay timing -------------------------------------------------------

    def _highlight_next(self):
        if self._phase != GamePhase.SHOWING:
            return
        self.highlighted_pad = self.sequence[self._show_index]
        self.timers.later(self.config.highlight_duration, self._clear_highlight)

    def _clear_highlight(self):
        if self._phase != GamePhase.SHOWING:
            return
        self.highlighted_pad = None
        self._show_index += 1

        if self._show_index >= len(self.sequence):
            self._phase = GamePhase.USER_TURN
        else:
            self.timers.later(self.config.gap_duration, self._highlight_next)
