"""
Pydantic Schemas for the progress save/load boundary.

These models define the exact document the engine writes to, and
accepts from, the key-value store. Loading validates every counter as a
non-negative integer; anything else is rejected and the caller falls
back to the zero-default record.

Document shape (version 1):
    {
      "version": 1,
      "sessions_played": 12,
      "currencies": {"reaction": 40, "sequence": 18, "risk": 9},
      "best_scores": {"reaction": 20, "sequence": 4, "risk": 6},
      "last_result": {"kind": "risk", "score": 6, "reward": 42, "ended_at": 1.7e9},
      "has_completed_onboarding": true
    }
"""

from typing import Annotated, Optional
from pydantic import BaseModel, Field, field_validator

from ..engine_core.result import GameKind


DOCUMENT_VERSION = 1


# =============================================================================
# Shared Models
# =============================================================================

class SessionResultModel(BaseModel):
    """Serialized SessionResult."""
    kind: GameKind
    score: int = Field(ge=0)
    reward: int = Field(ge=0)
    ended_at: float

    model_config = {"from_attributes": True}


Counter = Annotated[int, Field(ge=0)]


def _zero_counters() -> dict[GameKind, int]:
    return {kind: 0 for kind in GameKind}


# =============================================================================
# Progress Document
# =============================================================================

class ProgressDocument(BaseModel):
    """The persisted progress record."""
    version: int = DOCUMENT_VERSION
    sessions_played: int = Field(0, ge=0)
    currencies: dict[GameKind, Counter] = Field(default_factory=_zero_counters)
    best_scores: dict[GameKind, Counter] = Field(default_factory=_zero_counters)
    last_result: Optional[SessionResultModel] = None
    has_completed_onboarding: bool = False

    @field_validator("currencies", "best_scores")
    @classmethod
    def _fill_missing_kinds(cls, counters: dict[GameKind, int]) -> dict[GameKind, int]:
        # Kinds missing from an older document start at zero
        return {kind: counters.get(kind, 0) for kind in GameKind}
