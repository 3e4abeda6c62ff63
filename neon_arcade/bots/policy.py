"""
Autoplay Policy - Interface for automated players.

An AutoplayPolicy looks at a game snapshot and returns a decision:
- How long to wait (virtual time) before acting
- Which input to send, if any

Policies never touch the game directly; the runner applies decisions
through a SessionHandle, exactly like the presentation layer would.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
import random

from ..engine_core.result import GamePhase, InputEvent
from ..games.reaction import ReactionSnapshot
from ..games.risk import RiskSnapshot
from ..games.sequence import SequenceSnapshot


@dataclass(frozen=True)
class BotDecision:
    """
    A decision made by a policy.

    wait is virtual time to let pass before the event is sent. An event
    of None means "just let time pass" (e.g. while a sequence replays).
    """
    event: InputEvent | None
    wait: float = 0.0
    explanation: str = ""


class AutoplayPolicy(ABC):
    """
    Abstract base class for autoplay policies.

    Implementations range from near-perfect players to pure noise; they
    are used for simulation, balance checks and tests.
    """

    @abstractmethod
    def decide(self, snapshot: Any) -> BotDecision:
        """
        Choose the next input for the given snapshot.

        Args:
            snapshot: The game's current snapshot

        Returns:
            BotDecision with the input to send (or None to wait)
        """
        pass

    def get_name(self) -> str:
        return self.__class__.__name__


class ReactionAutoplay(AutoplayPolicy):
    """
    Taps the lit tile after a fixed reaction time.

    With probability miss_rate it taps a different tile instead.
    """

    def __init__(self, reaction_time: float = 0.4, miss_rate: float = 0.05, seed: int | None = None):
        self.reaction_time = reaction_time
        self.miss_rate = miss_rate
        self.rng = random.Random(seed)

    def decide(self, snapshot: ReactionSnapshot) -> BotDecision:
        if snapshot.phase != GamePhase.PLAYING or snapshot.active_tile is None:
            return BotDecision(event=None, wait=0.1, explanation="No tile lit")

        target = snapshot.active_tile
        if snapshot.tile_count > 1 and self.rng.random() < self.miss_rate:
            target = (target + self.rng.randrange(1, snapshot.tile_count)) % snapshot.tile_count
            return BotDecision(InputEvent.tap(target), self.reaction_time, "Fumbled the tap")

        return BotDecision(InputEvent.tap(target), self.reaction_time, "Tapped the lit tile")


class SequenceAutoplay(AutoplayPolicy):
    """
    Repeats the sequence, slipping on each element with probability error_rate.
    """

    def __init__(self, tap_interval: float = 0.3, error_rate: float = 0.03, seed: int | None = None):
        self.tap_interval = tap_interval
        self.error_rate = error_rate
        self.rng = random.Random(seed)

    def decide(self, snapshot: SequenceSnapshot) -> BotDecision:
        if not snapshot.accepting_input:
            return BotDecision(event=None, wait=0.1, explanation="Watching")

        expected = snapshot.sequence[len(snapshot.user_progress)]
        if snapshot.pad_count > 1 and self.rng.random() < self.error_rate:
            wrong = (expected + self.rng.randrange(1, snapshot.pad_count)) % snapshot.pad_count
            return BotDecision(InputEvent.tap(wrong), self.tap_interval, "Lost the thread")

        return BotDecision(InputEvent.tap(expected), self.tap_interval, "Repeated the next pad")


class RiskAutoplay(AutoplayPolicy):
    """
    Advances until target_position, then secures.

    Stops early once the burst probability of the next step would exceed
    max_risk, if given.
    """

    def __init__(self, target_position: int = 4, max_risk: float | None = None):
        self.target_position = target_position
        self.max_risk = max_risk

    def decide(self, snapshot: RiskSnapshot) -> BotDecision:
        if snapshot.phase != GamePhase.PLAYING:
            return BotDecision(event=None, wait=0.1, explanation="Not playing")

        if snapshot.can_secure and snapshot.position >= self.target_position:
            return BotDecision(InputEvent.secure(), explanation="Reached target, securing")

        if self.max_risk is not None and snapshot.can_secure:
            if snapshot.next_burst_probability > self.max_risk:
                return BotDecision(InputEvent.secure(), explanation="Too risky, securing")

        return BotDecision(InputEvent.advance(), explanation="Pressing on")


class RandomPolicy(AutoplayPolicy):
    """
    Random policy - sends a uniformly random legal-looking input.

    Used for:
    - Fuzzing the state machines
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def decide(self, snapshot: Any) -> BotDecision:
        wait = self.rng.uniform(0.05, 0.5)

        if isinstance(snapshot, RiskSnapshot):
            event = InputEvent.secure() if self.rng.random() < 0.3 else InputEvent.advance()
            return BotDecision(event, 0.0, "Selected randomly")

        if isinstance(snapshot, ReactionSnapshot):
            return BotDecision(InputEvent.tap(self.rng.randrange(snapshot.tile_count)), wait, "Selected randomly")

        if isinstance(snapshot, SequenceSnapshot):
            if not snapshot.accepting_input:
                return BotDecision(event=None, wait=0.1, explanation="Watching")
            return BotDecision(InputEvent.tap(self.rng.randrange(snapshot.pad_count)), wait, "Selected randomly")

        raise ValueError(f"Unsupported snapshot: {type(snapshot).__name__}")
