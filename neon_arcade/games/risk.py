"""
Risk Game - Risk Line Path.

Press-your-luck along a path of fixed length:
- advance(): step forward, grow the potential payout (+2 x position),
  then risk a burst with probability min(0.95, 0.08 x position)
- secure(): bank the full potential and stop
- Burst: the run ends and pays max(1, potential // 3)
- Reaching the end of the path banks the full potential

No timers are involved; every transition happens inside the call that
caused it.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass

from ..config import RiskConfig
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


def burst_payout(potential: int, divisor: int = 3, floor: int = 1) -> int:
    """Payout after a burst: two thirds forfeited, rounded down, at least `floor`."""
    return max(floor, potential // divisor)


def burst_probability(position: int, step: float = 0.08, cap: float = 0.95) -> float:
    """Linear burst ramp, capped."""
    return min(cap, step * position)


@dataclass(frozen=True)
class RiskSnapshot:
    """Read-only view of the path for rendering."""
    phase: GamePhase
    position: int
    max_position: int
    accumulated_potential: int
    burst_probability: float
    burst: bool
    reward: int
    next_step_gain: int  # Potential the next step would add
    next_burst_probability: float  # Burst chance the next step would carry

    @property
    def can_advance(self) -> bool:
        return self.phase == GamePhase.PLAYING and self.position < self.max_position

    @property
    def can_secure(self) -> bool:
        return self.phase == GamePhase.PLAYING and self.position > 0


class RiskGame:
    """
    Press-your-luck state machine.

    Phases: READY -> PLAYING -> FINISHED (via burst, secure or end of path).
    """

    kind = GameKind.RISK

    def __init__(
        self,
        rng: RandomSource,
        config: RiskConfig | None = None,
        on_result: ResultCallback | None = None,
        clock: WallClock | None = None,
    ):
        self.rng = rng
        self.config = config or RiskConfig()
        self.clock = clock or time.time
        self._latch = ResultLatch(on_result)

        self._phase = GamePhase.READY
        self.position = 0
        self.accumulated_potential = 0
        self.burst_probability = self.config.base_burst_probability
        self.burst = False
        self.reward = 0
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
        return self.position

    def start(self):
        if self._phase != GamePhase.READY:
            logger.debug("risk start ignored in phase %s", self._phase.value)
            return

        self.position = 0
        self.accumulated_potential = 0
        self.burst_probability = self.config.base_burst_probability
        self.burst = False
        self.reward = 0
        self._phase = GamePhase.PLAYING
        logger.info("risk session started (max_position=%d)", self.config.max_position)

    def handle_input(self, event: InputEvent):
        if event.input_type == InputType.ADVANCE:
            self.advance()
        elif event.input_type == InputType.SECURE:
            self.secure()
        else:
            logger.debug("risk ignores %s input", event.input_type.value)

    def snapshot(self) -> RiskSnapshot:
        return RiskSnapshot(
            phase=self._phase,
            position=self.position,
            max_position=self.config.max_position,
            accumulated_potential=self.accumulated_potential,
            burst_probability=self.burst_probability,
            burst=self.burst,
            reward=self.reward,
            next_step_gain=self.config.potential_per_step * (self.position + 1),
            next_burst_probability=burst_probability(
                self.position + 1, self.config.burst_step, self.config.burst_cap,
            ),
        )

    def abort(self):
        if self.is_finished:
            return
        self._aborted = True
        self._phase = GamePhase.FINISHED
        logger.info("risk session aborted at position %d", self.position)

    # -- Gameplay ------------------------------------------------------------

    def advance(self):
        """Take one step and risk a burst."""
        if self._phase != GamePhase.PLAYING:
            logger.debug("risk advance ignored in phase %s", self._phase.value)
            return
        if self.position >= self.config.max_position:
            return

        self.position += 1
        self.accumulated_potential += self.config.potential_per_step * self.position
        self.burst_probability = burst_probability(
            self.position, self.config.burst_step, self.config.burst_cap,
        )

        draw = self.rng.random()
        if draw < self.burst_probability:
            self.burst = True
            payout = burst_payout(
                self.accumulated_potential,
                self.config.burst_divisor,
                self.config.burst_floor,
            )
            logger.debug(
                "risk burst at position %d (draw=%.3f < p=%.2f)",
                self.position, draw, self.burst_probability,
            )
            self._finish(payout)
        elif self.position >= self.config.max_position:
            logger.debug("risk path completed, banking %d", self.accumulated_potential)
            self._finish(self.accumulated_potential)

    def secure(self):
        """Bank the full potential. Requires at least one step."""
        if self._phase != GamePhase.PLAYING or self.position <= 0:
            logger.debug("risk secure ignored at position %d", self.position)
            return
        self._finish(self.accumulated_potential)

    def _finish(self, payout: int):
        if self._phase != GamePhase.PLAYING:
            return
        self._phase = GamePhase.FINISHED
        self.reward = payout

        logger.info(
            "risk session finished: position=%d reward=%d burst=%s",
            self.position, self.reward, self.burst,
        )
        self._latch.set(SessionResult.now(self.kind, self.position, self.reward, self.clock))
