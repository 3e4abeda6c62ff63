"""
Session Dispatcher - Runs one mini-game at a time.

LIFECYCLE:
1. Presentation layer calls run(kind) -> SessionHandle
2. Dispatcher builds the game, aborting any game still running
3. Input events (tap / advance / secure) are relayed through the handle;
   timer callbacks reach the game through the shared scheduler
4. The game reaches its terminal state and emits one SessionResult
5. The handle applies it to the ProgressStore exactly once, builds a
   SessionSummary and notifies listeners
6. The handle is COMPLETED; further input is ignored

Aborting (screen closed, another game started) cancels the game's timers
and records nothing.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import logging
import uuid

from ..config import DEFAULT_CONFIGS, GameConfigs
from ..engine_core.clock import Scheduler
from ..engine_core.result import GameKind, GameSession, InputEvent, SessionResult, WallClock
from ..engine_core.rng import RandomSource, SeededRandom
from ..errors import StorageError
from ..games import create_game
from ..progress.store import ProgressStore

logger = logging.getLogger(__name__)


class HandleStatus(Enum):
    """State of a session handle."""
    ACTIVE = "active"  # Game running
    COMPLETED = "completed"  # Result produced and applied
    ABORTED = "aborted"  # Stopped without a result


@dataclass(frozen=True)
class SessionSummary:
    """
    What the summary screen shows after a session.

    previous_best is read before the result is applied, so is_new_best
    is only true when the run strictly beat the stored best. saved is
    False when the progress store could not persist the result.
    """
    result: SessionResult
    previous_best: int
    best_score: int
    is_new_best: bool
    currency_name: str
    burst: bool = False
    saved: bool = True

    @property
    def title(self) -> str:
        kind = self.result.kind
        if kind == GameKind.RISK:
            return "Risk Taken!" if self.burst else "Secured!"
        best, other = _SUMMARY_TITLES[kind]
        return best if self.is_new_best else other


# (title on a new best, title otherwise)
_SUMMARY_TITLES = {
    GameKind.REACTION: ("New Best!", "Good Run!"),
    GameKind.SEQUENCE: ("New Record!", "Great Focus!"),
}


SummaryListener = Callable[[SessionSummary], None]


class SessionHandle:
    """
    The presentation layer's grip on one running game.

    Exposes:
    - input relays (tap, advance, secure, send)
    - a read-only snapshot of the round state
    - the SessionResult and SessionSummary once completed
    """

    def __init__(self, kind: GameKind, store: ProgressStore):
        self.session_id = str(uuid.uuid4())
        self.kind = kind
        self.store = store
        self.status = HandleStatus.ACTIVE
        self.game: GameSession | None = None
        self.summary: SessionSummary | None = None
        self._listeners: list[SummaryListener] = []

    @property
    def result(self) -> SessionResult | None:
        return self.summary.result if self.summary else None

    @property
    def is_active(self) -> bool:
        return self.status == HandleStatus.ACTIVE

    def add_listener(self, listener: SummaryListener):
        """Call listener with the summary on completion (immediately if already done)."""
        if self.summary is not None:
            listener(self.summary)
            return
        self._listeners.append(listener)

    # -- Input relays --------------------------------------------------------

    def send(self, event: InputEvent):
        if not self.is_active or self.game is None:
            logger.debug("session %s ignores %s: %s", self.session_id, event.input_type.value, self.status.value)
            return
        self.game.handle_input(event)

    def tap(self, index: int):
        self.send(InputEvent.tap(index))

    def advance(self):
        self.send(InputEvent.advance())

    def secure(self):
        self.send(InputEvent.secure())

    def snapshot(self) -> Any:
        return self.game.snapshot() if self.game else None

    def abort(self):
        """Stop the game without recording anything."""
        if not self.is_active:
            return
        self.status = HandleStatus.ABORTED
        self._listeners.clear()
        if self.game is not None:
            self.game.abort()
        logger.info("session %s (%s) aborted", self.session_id, self.kind.value)

    # -- Completion ----------------------------------------------------------

    def complete(self, result: SessionResult):
        """
        Apply the terminal result to progress, once.

        Called by the game's result callback. A second call, or a call
        after abort, is ignored.

        If the store cannot save, the handle still completes with a
        summary (saved=False) and listeners are notified; the
        StorageError is then re-raised to the caller.
        """
        if self.status != HandleStatus.ACTIVE:
            logger.debug("session %s ignores repeated completion", self.session_id)
            return
        if result.kind != self.kind:
            raise ValueError(f"{result.kind.value} result for a {self.kind.value} session")

        self.status = HandleStatus.COMPLETED
        previous_best = self.store.best_score(result.kind)
        error: StorageError | None = None
        try:
            self.store.apply_result(result)
        except StorageError as e:
            logger.error("session %s (%s) result not saved: %s", self.session_id, self.kind.value, e)
            error = e

        self.summary = SessionSummary(
            result=result,
            previous_best=previous_best,
            best_score=max(previous_best, result.score),
            is_new_best=result.score > previous_best,
            currency_name=result.kind.currency_name,
            # Only the risk path can burst
            burst=bool(getattr(self.game, "burst", False)),
            saved=error is None,
        )
        logger.info(
            "session %s (%s) completed: score=%d reward=%d",
            self.session_id, self.kind.value, result.score, result.reward,
        )

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self.summary)
        if error is not None:
            raise error


class SessionDispatcher:
    """
    Starts games and forwards their results to the ProgressStore.

    Only one game is active at a time; starting another aborts the
    current one. The dispatcher is the single authority that a result
    reaches the store at most once.
    """

    def __init__(
        self,
        store: ProgressStore,
        scheduler: Scheduler,
        rng: RandomSource | None = None,
        configs: GameConfigs = DEFAULT_CONFIGS,
        clock: WallClock | None = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.rng = rng or SeededRandom()
        self.configs = configs
        self.clock = clock
        self._active: SessionHandle | None = None

    @property
    def active(self) -> SessionHandle | None:
        """The running handle, if any."""
        if self._active is not None and not self._active.is_active:
            self._active = None
        return self._active

    @property
    def progress(self) -> ProgressStore:
        return self.store

    def run(self, kind: GameKind | str) -> SessionHandle:
        """Create and start a game of the given kind."""
        kind = GameKind(kind)

        current = self.active
        if current is not None:
            logger.info("starting %s while %s is running, aborting it", kind.value, current.kind.value)
            current.abort()

        handle = SessionHandle(kind, self.store)
        handle.game = create_game(
            kind,
            self.scheduler,
            self.rng,
            self.configs,
            on_result=handle.complete,
            clock=self.clock,
        )
        self._active = handle

        logger.info("session %s (%s) starting", handle.session_id, kind.value)
        handle.game.start()
        return handle

    def abort_active(self):
        current = self.active
        if current is not None:
            current.abort()

    def reset_all(self):
        """Settings surface: wipe progress. A running game is aborted first."""
        self.abort_active()
        self.store.reset_all()
