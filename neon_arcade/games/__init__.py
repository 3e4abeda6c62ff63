"""
Games - The closed set of mini-games.

- ReactionGame: tap the lit tile before it expires
- SequenceGame: repeat a growing pad sequence
- RiskGame: step along a path, secure before a burst

create_game() is the single place that maps a GameKind to its machine.
"""

from __future__ import annotations

from ..config import DEFAULT_CONFIGS, GameConfigs
from ..engine_core.clock import Scheduler
from ..engine_core.result import GameKind, GameSession, ResultCallback, WallClock
from ..engine_core.rng import RandomSource
from .reaction import ReactionGame, ReactionSnapshot
from .sequence import SequenceGame, SequenceSnapshot
from .risk import RiskGame, RiskSnapshot, burst_payout, burst_probability


def create_game(
    kind: GameKind | str,
    scheduler: Scheduler,
    rng: RandomSource,
    configs: GameConfigs = DEFAULT_CONFIGS,
    on_result: ResultCallback | None = None,
    clock: WallClock | None = None,
) -> GameSession:
    """Build a READY game of the given kind."""
    kind = GameKind(kind)

    if kind == GameKind.REACTION:
        return ReactionGame(scheduler, rng, configs.reaction, on_result=on_result, clock=clock)
    if kind == GameKind.SEQUENCE:
        return SequenceGame(scheduler, rng, configs.sequence, on_result=on_result, clock=clock)
    return RiskGame(rng, configs.risk, on_result=on_result, clock=clock)


__all__ = [
    "create_game",
    "ReactionGame",
    "ReactionSnapshot",
    "SequenceGame",
    "SequenceSnapshot",
    "RiskGame",
    "RiskSnapshot",
    "burst_payout",
    "burst_probability",
]
