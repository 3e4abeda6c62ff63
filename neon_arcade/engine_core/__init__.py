"""
Engine Core - Timing, randomness and the shared session contract.

The games consume:
1. A Scheduler for ticks and delayed callbacks
2. A RandomSource for content generation
3. The GameSession contract and SessionResult they report
"""

from .clock import ScheduledTask, Scheduler, TimerGroup, ManualScheduler, AsyncioScheduler
from .rng import RandomSource, SeededRandom, ScriptedRandom
from .result import (
    GameKind,
    GamePhase,
    GameSession,
    InputEvent,
    InputType,
    ResultLatch,
    SessionResult,
    WallClock,
)

__all__ = [
    "ScheduledTask",
    "Scheduler",
    "TimerGroup",
    "ManualScheduler",
    "AsyncioScheduler",
    "RandomSource",
    "SeededRandom",
    "ScriptedRandom",
    "GameKind",
    "GamePhase",
    "GameSession",
    "InputEvent",
    "InputType",
    "ResultLatch",
    "SessionResult",
    "WallClock",
]
