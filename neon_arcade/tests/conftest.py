"""
Pytest fixtures for Neon Arcade tests.
"""

import pytest

from ..errors import StorageError
from ..engine_core import ManualScheduler, ScriptedRandom, SeededRandom, SessionResult, GameKind
from ..progress import InMemoryKeyValueStore, ProgressStore
from ..session import SessionDispatcher


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(storage: InMemoryKeyValueStore) -> ProgressStore:
    """Fresh progress store (first launch)."""
    return ProgressStore.load(storage)


@pytest.fixture
def results() -> list:
    """Collects results emitted through a game's on_result callback."""
    return []


@pytest.fixture
def tile_script() -> ScriptedRandom:
    """Tiles 4, 7, 1, 3, 0, 5, ... for the reaction game."""
    return ScriptedRandom(ints=[4, 7, 1, 3, 0, 5, 2, 8, 6] * 20)


@pytest.fixture
def dispatcher(store: ProgressStore, scheduler: ManualScheduler) -> SessionDispatcher:
    return SessionDispatcher(store, scheduler, rng=SeededRandom(1234))


def make_result(kind: GameKind, score: int, reward: int) -> SessionResult:
    return SessionResult(kind=kind, score=score, reward=reward, ended_at=1_700_000_000.0)


class FailingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose writes raise StorageError while `failing` is set."""

    def __init__(self, initial=None):
        self.failing = False
        super().__init__(initial)

    def set(self, key, value):
        if self.failing:
            raise StorageError("disk full")
        super().set(key, value)
