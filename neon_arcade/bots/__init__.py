"""
Bots module - Autoplay for simulation and balance checks.

Provides:
- AutoplayPolicy: Interface for automated players
- ReactionAutoplay, SequenceAutoplay, RiskAutoplay: per-game players
- RandomPolicy: noise for fuzzing
- play_session: drive a session to completion on virtual time
"""

from .policy import (
    AutoplayPolicy,
    BotDecision,
    ReactionAutoplay,
    SequenceAutoplay,
    RiskAutoplay,
    RandomPolicy,
)
from .runner import play_session, default_policy

__all__ = [
    "AutoplayPolicy",
    "BotDecision",
    "ReactionAutoplay",
    "SequenceAutoplay",
    "RiskAutoplay",
    "RandomPolicy",
    "play_session",
    "default_policy",
]
