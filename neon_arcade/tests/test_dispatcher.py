"""
Tests for the session dispatcher.

Tests:
- A completed run reaches the progress store exactly once
- New-best detection in the summary
- One active game at a time; abort records nothing
- Listeners and input after completion
"""

import pytest

from ..engine_core import GameKind, GamePhase, ScriptedRandom
from ..progress import StreakLevel
from ..session import HandleStatus, SessionDispatcher
from ..errors import StorageError
from ..progress import ProgressStore
from ..progress.store import PROGRESS_KEY
from .conftest import FailingKeyValueStore, make_result


def miss(handle):
    """Tap a tile that is not lit."""
    snap = handle.snapshot()
    handle.tap((snap.active_tile + 1) % snap.tile_count)


class TestDispatcherRun:
    """Tests for running sessions end to end."""

    def test_reaction_run_is_recorded(self, dispatcher, store):
        """Three hits then a miss: +6 shards, best 3, new best."""
        handle = dispatcher.run(GameKind.REACTION)
        assert handle.is_active
        assert dispatcher.active is handle

        for _ in range(3):
            handle.tap(handle.snapshot().active_tile)
        miss(handle)

        assert handle.status == HandleStatus.COMPLETED
        assert handle.result.score == 3
        assert handle.result.reward == 6
        assert store.currencies[GameKind.REACTION] == 6
        assert store.best_score(GameKind.REACTION) == 3
        assert store.sessions_played == 1

        summary = handle.summary
        assert summary.is_new_best
        assert summary.previous_best == 0
        assert summary.best_score == 3
        assert summary.title == "New Best!"
        assert summary.currency_name == "Focus Shards"
        assert dispatcher.active is None

    def test_lower_score_is_not_a_new_best(self, dispatcher, store):
        first = dispatcher.run(GameKind.REACTION)
        for _ in range(3):
            first.tap(first.snapshot().active_tile)
        miss(first)

        second = dispatcher.run(GameKind.REACTION)
        second.tap(second.snapshot().active_tile)
        miss(second)

        assert not second.summary.is_new_best
        assert second.summary.previous_best == 3
        assert second.summary.title == "Good Run!"
        assert store.best_score(GameKind.REACTION) == 3
        assert store.currencies[GameKind.REACTION] == 8
        assert store.sessions_played == 2

    def test_equal_score_is_not_a_new_best(self, dispatcher, store):
        store.apply_result(make_result(GameKind.RISK, score=0, reward=0))
        handle = dispatcher.run("risk")
        handle.advance()
        handle.secure()  # could also burst; either way score is 1

        assert handle.result.score == 1
        assert handle.summary.is_new_best

        again = dispatcher.run("risk")
        again.advance()
        again.secure()
        assert again.result.score == 1
        assert not again.summary.is_new_best

    def test_risk_run_with_scripted_draws(self, store, scheduler):
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(floats=[0.9] * 5))
        handle = dispatcher.run(GameKind.RISK)
        for _ in range(5):
            handle.advance()
        handle.secure()

        assert handle.result.reward == 30
        assert store.currencies[GameKind.RISK] == 30
        assert handle.summary.currency_name == "Energy Orbs"
        assert not handle.summary.burst
        assert handle.summary.title == "Secured!"

    def test_sequence_run_uses_shared_scheduler(self, store, scheduler):
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(ints=[3, 1]))
        handle = dispatcher.run(GameKind.SEQUENCE)

        handle.tap(3)  # still replaying
        assert handle.snapshot().user_progress == ()

        scheduler.advance(0.8)
        handle.tap(3)
        scheduler.advance(0.5 + 1.6)
        assert handle.snapshot().phase == GamePhase.USER_TURN
        handle.tap(3)
        handle.tap(0)  # expected 1

        assert handle.result.score == 1
        assert handle.result.reward == 3
        assert store.currencies[GameKind.SEQUENCE] == 3
        assert handle.summary.title == "New Record!"

    def test_timer_expiry_completes_the_handle(self, dispatcher, scheduler, store):
        handle = dispatcher.run(GameKind.REACTION)

        scheduler.advance(2.0)

        assert handle.status == HandleStatus.COMPLETED
        assert store.sessions_played == 1


class TestDispatcherSingleResult:
    """Tests for at-most-once recording."""

    def test_second_completion_is_ignored(self, dispatcher, store):
        handle = dispatcher.run(GameKind.REACTION)
        miss(handle)
        before = store.snapshot()

        handle.complete(make_result(GameKind.REACTION, score=50, reward=100))

        assert store.snapshot() == before
        assert handle.result.score == 0

    def test_input_after_completion_is_ignored(self, dispatcher, store):
        handle = dispatcher.run(GameKind.REACTION)
        miss(handle)

        handle.tap(0)
        handle.advance()
        handle.secure()

        assert store.sessions_played == 1

    def test_mismatched_kind_raises(self, store):
        from ..session import SessionHandle

        handle = SessionHandle(GameKind.SEQUENCE, store)

        with pytest.raises(ValueError):
            handle.complete(make_result(GameKind.RISK, score=1, reward=2))
        assert store.sessions_played == 0

    def test_listener_called_once(self, dispatcher):
        seen = []
        handle = dispatcher.run(GameKind.REACTION)
        handle.add_listener(seen.append)

        miss(handle)
        handle.complete(make_result(GameKind.REACTION, score=1, reward=2))

        assert seen == [handle.summary]

    def test_late_listener_called_immediately(self, dispatcher):
        handle = dispatcher.run(GameKind.REACTION)
        miss(handle)

        seen = []
        handle.add_listener(seen.append)

        assert seen == [handle.summary]


class TestDispatcherAbort:
    """Tests for abandoning a running game."""

    def test_run_aborts_previous_session(self, dispatcher, scheduler, store):
        first = dispatcher.run(GameKind.REACTION)
        first.tap(first.snapshot().active_tile)

        second = dispatcher.run(GameKind.RISK)

        assert first.status == HandleStatus.ABORTED
        assert first.result is None
        assert dispatcher.active is second
        # reaction timers are gone; risk has none
        assert scheduler.pending_count == 0
        scheduler.advance(60.0)
        assert store.sessions_played == 0

    def test_abort_active_records_nothing(self, dispatcher, scheduler, store):
        seen = []
        handle = dispatcher.run(GameKind.SEQUENCE)
        handle.add_listener(seen.append)

        dispatcher.abort_active()
        scheduler.advance(60.0)

        assert handle.status == HandleStatus.ABORTED
        assert dispatcher.active is None
        assert seen == []
        assert store.sessions_played == 0

    def test_reset_all_aborts_and_wipes(self, dispatcher, store):
        store.apply_result(make_result(GameKind.SEQUENCE, score=9, reward=120))
        handle = dispatcher.run(GameKind.RISK)

        dispatcher.reset_all()

        assert handle.status == HandleStatus.ABORTED
        assert dispatcher.progress.total_currency() == 0
        assert dispatcher.progress.streak_level() == StreakLevel.BEGINNER
        assert dispatcher.progress.progress_fraction() == 0.0

    def test_handles_have_distinct_ids(self, dispatcher):
        a = dispatcher.run(GameKind.RISK)
        b = dispatcher.run(GameKind.RISK)

        assert a.session_id != b.session_id


class TestSummaryTitles:
    """Tests for per-game summary titles."""

    def test_risk_burst_is_risk_taken(self, store, scheduler):
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(floats=[0.0]))
        handle = dispatcher.run(GameKind.RISK)

        handle.advance()

        assert handle.summary.burst
        assert handle.summary.is_new_best
        assert handle.summary.title == "Risk Taken!"

    def test_sequence_without_record(self, store, scheduler):
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(ints=[3]))
        handle = dispatcher.run(GameKind.SEQUENCE)
        scheduler.advance(0.8)

        handle.tap(0)

        assert handle.result.score == 0
        assert not handle.summary.burst
        assert handle.summary.title == "Great Focus!"


class TestDispatcherClock:
    """Tests for result timestamps."""

    def test_injected_clock_stamps_results(self, store, scheduler):
        dispatcher = SessionDispatcher(
            store, scheduler,
            rng=ScriptedRandom(floats=[0.9]),
            clock=lambda: 1_700_000_123.0,
        )
        handle = dispatcher.run(GameKind.RISK)
        handle.advance()
        handle.secure()

        assert handle.result.ended_at == 1_700_000_123.0
        assert store.last_result.ended_at == 1_700_000_123.0


class TestDispatcherSaveFailure:
    """Tests for a result that cannot be persisted."""

    def test_handle_completes_when_save_fails(self, scheduler):
        storage = FailingKeyValueStore()
        store = ProgressStore.load(storage)
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(floats=[0.9]))
        handle = dispatcher.run(GameKind.RISK)
        seen = []
        handle.add_listener(seen.append)
        handle.advance()

        storage.failing = True
        with pytest.raises(StorageError):
            handle.secure()

        assert handle.status == HandleStatus.COMPLETED
        assert handle.summary is not None
        assert handle.result is handle.game.result
        assert handle.result.score == 1
        assert handle.result.reward == 2
        assert not handle.summary.saved
        assert handle.summary.best_score == 1
        assert seen == [handle.summary]
        assert dispatcher.active is None

        # nothing recorded, in memory or on disk
        assert store.sessions_played == 0
        assert store.currencies[GameKind.RISK] == 0
        assert storage.get(PROGRESS_KEY) is None

    def test_later_sessions_save_once_storage_recovers(self, scheduler):
        storage = FailingKeyValueStore()
        store = ProgressStore.load(storage)
        dispatcher = SessionDispatcher(store, scheduler, rng=ScriptedRandom(floats=[0.9, 0.9]))

        storage.failing = True
        first = dispatcher.run(GameKind.RISK)
        first.advance()
        with pytest.raises(StorageError):
            first.secure()

        storage.failing = False
        second = dispatcher.run(GameKind.RISK)
        second.advance()
        second.secure()

        assert second.summary.saved
        assert ProgressStore.load(storage).sessions_played == 1
