"""
Session types shared by every mini-game.

The three games have nothing in common except the shape of their
contract: start, take input, finish once, report one SessionResult.
That contract is the GameSession protocol below; each game implements it
on its own rather than inheriting from a base class.
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from ..errors import InvariantViolation


class GameKind(str, Enum):
    """The closed set of mini-games."""
    REACTION = "reaction"
    SEQUENCE = "sequence"
    RISK = "risk"

    @property
    def currency(self) -> str:
        return _CURRENCIES[self]

    @property
    def currency_name(self) -> str:
        return _CURRENCY_NAMES[self]

    @property
    def title(self) -> str:
        return _TITLES[self]


_CURRENCIES = {
    GameKind.REACTION: "shards",
    GameKind.SEQUENCE: "fragments",
    GameKind.RISK: "orbs",
}

_CURRENCY_NAMES = {
    GameKind.REACTION: "Focus Shards",
    GameKind.SEQUENCE: "Pattern Fragments",
    GameKind.RISK: "Energy Orbs",
}

_TITLES = {
    GameKind.REACTION: "Neon Tap Rush",
    GameKind.SEQUENCE: "Pulse Pattern Trail",
    GameKind.RISK: "Risk Line Path",
}


class GamePhase(str, Enum):
    """Lifecycle phases. Not every game uses SHOWING/USER_TURN."""
    READY = "ready"
    PLAYING = "playing"
    SHOWING = "showing"
    USER_TURN = "user_turn"
    FINISHED = "finished"


# Source of ended_at timestamps; time.time unless a caller pins it
WallClock = Callable[[], float]


@dataclass(frozen=True)
class SessionResult:
    """
    Outcome of one completed session.

    Produced exactly once per game instance; never mutated afterwards.
    """
    kind: GameKind
    score: int
    reward: int
    ended_at: float

    def __post_init__(self):
        if self.score < 0:
            raise ValueError(f"score must be non-negative, got {self.score}")
        if self.reward < 0:
            raise ValueError(f"reward must be non-negative, got {self.reward}")

    @classmethod
    def now(cls, kind: GameKind, score: int, reward: int, clock: WallClock = time.time) -> SessionResult:
        """Stamp ended_at from a wall clock (epoch seconds), not the game scheduler."""
        return cls(kind=kind, score=score, reward=reward, ended_at=clock())


class InputType(str, Enum):
    """Player inputs the presentation layer can forward."""
    TAP = "tap"
    ADVANCE = "advance"
    SECURE = "secure"


@dataclass(frozen=True)
class InputEvent:
    """A single player input."""
    input_type: InputType
    index: int | None = None

    @classmethod
    def tap(cls, index: int) -> InputEvent:
        return cls(input_type=InputType.TAP, index=index)

    @classmethod
    def advance(cls) -> InputEvent:
        return cls(input_type=InputType.ADVANCE)

    @classmethod
    def secure(cls) -> InputEvent:
        return cls(input_type=InputType.SECURE)


ResultCallback = Callable[[SessionResult], None]


class GameSession(Protocol):
    """Capability every mini-game offers to the dispatcher."""

    kind: GameKind

    @property
    def phase(self) -> GamePhase: ...

    @property
    def is_finished(self) -> bool: ...

    @property
    def result(self) -> SessionResult | None: ...

    def start(self) -> None: ...

    def handle_input(self, event: InputEvent) -> None: ...

    def snapshot(self) -> Any: ...

    def abort(self) -> None: ...


class ResultLatch:
    """
    Holds the single result of a game and notifies its listener.

    A second set() is a programming error: the games guard their finish
    paths, so reaching it means a guard is missing.
    """

    def __init__(self, on_result: ResultCallback | None = None):
        self.on_result = on_result
        self._result: SessionResult | None = None

    @property
    def value(self) -> SessionResult | None:
        return self._result

    def set(self, result: SessionResult):
        if self._result is not None:
            raise InvariantViolation(
                f"{result.kind.value} session emitted a second result"
            )
        self._result = result
        if self.on_result is not None:
            self.on_result(result)
