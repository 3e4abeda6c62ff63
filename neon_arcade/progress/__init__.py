"""
Progress Module - Durable player progress.

Progress survives restarts through an injected KeyValueStore; the store
defines the field set and zero defaults, the collaborator picks the medium.
"""

from .store import (
    ProgressRecord,
    ProgressStore,
    StreakLevel,
    STREAK_BANDS,
    streak_level_for,
    progress_fraction_for,
)
from .storage import KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore
from .schemas import ProgressDocument, SessionResultModel

__all__ = [
    "ProgressRecord",
    "ProgressStore",
    "StreakLevel",
    "STREAK_BANDS",
    "streak_level_for",
    "progress_fraction_for",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "ProgressDocument",
    "SessionResultModel",
]
