"""
Autoplay runner - Plays a session to completion on virtual time.

Loop:
1. Ask the policy for a decision on the current snapshot
2. Let decision.wait pass on the ManualScheduler (timers may end the game)
3. Send the decision's input through the handle
4. Repeat until the handle is no longer active
"""

from __future__ import annotations
import logging

from ..engine_core.clock import ManualScheduler
from ..engine_core.result import GameKind
from ..session.dispatcher import SessionDispatcher, SessionSummary
from .policy import AutoplayPolicy

logger = logging.getLogger(__name__)


def play_session(
    dispatcher: SessionDispatcher,
    scheduler: ManualScheduler,
    kind: GameKind | str,
    policy: AutoplayPolicy,
    max_steps: int = 10_000,
) -> SessionSummary:
    """
    Run one session with an autoplay policy.

    The dispatcher must be driven by the given ManualScheduler.
    Raises RuntimeError if the session has not ended after max_steps
    decisions (a policy that only ever waits on a game with no timers).
    A StorageError from saving the result propagates; the handle is
    already completed by then.
    """
    handle = dispatcher.run(kind)

    steps = 0
    while handle.is_active:
        if steps >= max_steps:
            handle.abort()
            raise RuntimeError(f"{policy.get_name()} did not finish a {handle.kind.value} session")
        steps += 1

        decision = policy.decide(handle.snapshot())
        if decision.wait > 0:
            scheduler.advance(decision.wait)
        if decision.event is not None and handle.is_active:
            handle.send(decision.event)

    logger.debug("%s finished %s in %d decisions", policy.get_name(), handle.kind.value, steps)
    return handle.summary


def default_policy(kind: GameKind | str, seed: int | None = None) -> AutoplayPolicy:
    """A reasonable autoplay policy for each game kind."""
    from .policy import ReactionAutoplay, RiskAutoplay, SequenceAutoplay

    kind = GameKind(kind)
    if kind == GameKind.REACTION:
        return ReactionAutoplay(seed=seed)
    if kind == GameKind.SEQUENCE:
        return SequenceAutoplay(seed=seed)
    return RiskAutoplay(target_position=4)
