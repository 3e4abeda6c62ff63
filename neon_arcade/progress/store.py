"""
Progress Store - Durable player progress and the streak curve.

The store owns one ProgressRecord:
- sessions played
- one currency per game (shards, fragments, orbs)
- one best score per game
- the last SessionResult
- whether onboarding was completed

The record only changes through apply_result(), reset_all() and
complete_onboarding(); each of those saves immediately. Streak level and
progress fraction are derived from the currency total on every read.

Streak bands (total currency):
    [0, 10)    Beginner
    [10, 50)   Focused
    [50, 150)  Sharp
    [150, 300) Elite
    [300, inf) Master
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from ..engine_core.result import GameKind, SessionResult
from .schemas import ProgressDocument, SessionResultModel
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

PROGRESS_KEY = "progress_record"


class StreakLevel(str, Enum):
    """Named tier derived from total currency earned."""
    BEGINNER = "Beginner"
    FOCUSED = "Focused"
    SHARP = "Sharp"
    ELITE = "Elite"
    MASTER = "Master"


# (level, floor, ceiling); Master has no ceiling
STREAK_BANDS: tuple[tuple[StreakLevel, int, int | None], ...] = (
    (StreakLevel.BEGINNER, 0, 10),
    (StreakLevel.FOCUSED, 10, 50),
    (StreakLevel.SHARP, 50, 150),
    (StreakLevel.ELITE, 150, 300),
    (StreakLevel.MASTER, 300, None),
)


def _band_for(total: int) -> tuple[StreakLevel, int, int | None]:
    for level, floor, ceiling in STREAK_BANDS:
        if ceiling is None or total < ceiling:
            return level, floor, ceiling
    raise AssertionError("unreachable: last band is open-ended")


def streak_level_for(total: int) -> StreakLevel:
    return _band_for(max(0, total))[0]


def progress_fraction_for(total: int) -> float:
    """Position inside the current band, clamped to [0, 1]. Master is always 1.0."""
    _, floor, ceiling = _band_for(max(0, total))
    if ceiling is None:
        return 1.0
    fraction = (total - floor) / (ceiling - floor)
    return min(1.0, max(0.0, fraction))


@dataclass
class ProgressRecord:
    """In-memory progress record. Zero defaults are the first-launch state."""
    sessions_played: int = 0
    currencies: dict[GameKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in GameKind}
    )
    best_scores: dict[GameKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in GameKind}
    )
    last_result: SessionResult | None = None
    has_completed_onboarding: bool = False

    def to_document(self) -> ProgressDocument:
        return ProgressDocument(
            sessions_played=self.sessions_played,
            currencies=dict(self.currencies),
            best_scores=dict(self.best_scores),
            last_result=(
                SessionResultModel.model_validate(self.last_result)
                if self.last_result else None
            ),
            has_completed_onboarding=self.has_completed_onboarding,
        )

    @classmethod
    def from_document(cls, doc: ProgressDocument) -> ProgressRecord:
        last = None
        if doc.last_result is not None:
            last = SessionResult(
                kind=doc.last_result.kind,
                score=doc.last_result.score,
                reward=doc.last_result.reward,
                ended_at=doc.last_result.ended_at,
            )
        return cls(
            sessions_played=doc.sessions_played,
            currencies=dict(doc.currencies),
            best_scores=dict(doc.best_scores),
            last_result=last,
            has_completed_onboarding=doc.has_completed_onboarding,
        )

    def copy(self) -> ProgressRecord:
        return ProgressRecord(
            sessions_played=self.sessions_played,
            currencies=dict(self.currencies),
            best_scores=dict(self.best_scores),
            last_result=self.last_result,
            has_completed_onboarding=self.has_completed_onboarding,
        )


class ProgressStore:
    """
    Explicitly owned progress state with an explicit save/load boundary.

    Usage:
        store = ProgressStore.load(JsonFileKeyValueStore(path))
        store.apply_result(result)      # saves
        store.streak_level()            # derived on demand
    """

    def __init__(self, storage: KeyValueStore, record: ProgressRecord | None = None):
        self.storage = storage
        self._record = record or ProgressRecord()

    @classmethod
    def load(cls, storage: KeyValueStore) -> ProgressStore:
        """
        Load the record from storage.

        A missing document means first launch. An invalid one is
        discarded with a warning; the zero-default record replaces it on
        the next save.
        """
        raw = storage.get(PROGRESS_KEY)
        if raw is None:
            return cls(storage)

        try:
            doc = ProgressDocument.model_validate(raw)
        except ValidationError as e:
            logger.warning("discarding invalid progress document: %s", e)
            return cls(storage)

        return cls(storage, ProgressRecord.from_document(doc))

    def save(self):
        self._commit(self._record)

    def _commit(self, record: ProgressRecord):
        """Persist record, then make it current. A failed write leaves the store as it was."""
        self.storage.set(PROGRESS_KEY, record.to_document().model_dump(mode="json"))
        self._record = record

    # -- Mutations -----------------------------------------------------------

    def apply_result(self, result: SessionResult):
        """
        Accumulate one finished session. Never rejects a result.

        Raises StorageError if the record cannot be saved; nothing changes then.
        """
        record = self._record.copy()
        record.sessions_played += 1
        record.last_result = result
        record.currencies[result.kind] += result.reward
        record.best_scores[result.kind] = max(record.best_scores[result.kind], result.score)
        self._commit(record)

        logger.info(
            "recorded %s session: score=%d reward=%d total=%d",
            result.kind.value, result.score, result.reward, self.total_currency(),
        )

    def reset_all(self):
        """Zero every counter and best score and forget the last result."""
        onboarded = self._record.has_completed_onboarding
        self._commit(ProgressRecord(has_completed_onboarding=onboarded))
        logger.info("progress reset")

    def complete_onboarding(self):
        if self._record.has_completed_onboarding:
            return
        record = self._record.copy()
        record.has_completed_onboarding = True
        self._commit(record)

    # -- Reads ---------------------------------------------------------------

    @property
    def sessions_played(self) -> int:
        return self._record.sessions_played

    @property
    def currencies(self) -> dict[GameKind, int]:
        return dict(self._record.currencies)

    @property
    def best_scores(self) -> dict[GameKind, int]:
        return dict(self._record.best_scores)

    @property
    def last_result(self) -> SessionResult | None:
        return self._record.last_result

    @property
    def has_completed_onboarding(self) -> bool:
        return self._record.has_completed_onboarding

    def best_score(self, kind: GameKind) -> int:
        return self._record.best_scores[kind]

    def total_currency(self) -> int:
        return sum(self._record.currencies.values())

    def streak_level(self) -> StreakLevel:
        return streak_level_for(self.total_currency())

    def progress_fraction(self) -> float:
        return progress_fraction_for(self.total_currency())

    def currency_to_next_level(self) -> int | None:
        """Currency still needed for the next band, or None at Master."""
        total = self.total_currency()
        _, _, ceiling = _band_for(total)
        return None if ceiling is None else ceiling - total

    def snapshot(self) -> ProgressRecord:
        """Detached copy for rendering."""
        return self._record.copy()
