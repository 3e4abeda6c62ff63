"""
Configuration - Game balance constants and runtime settings.

Balance constants are frozen dataclasses so a rebalance is a matter of
passing a different config to the game. Runtime settings (where progress
is stored, how loud logging is) come from the environment.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ReactionConfig:
    """Balance for the reaction-tap game."""
    tile_count: int = 9
    time_budget: float = 30.0
    tick_interval: float = 0.1
    initial_window: float = 2.0
    window_step: float = 0.1
    window_floor: float = 0.8
    points_per_step: int = 10  # Window shrinks every N points
    reward_per_hit: int = 2


@dataclass(frozen=True)
class SequenceConfig:
    """Balance and pacing for the sequence-repeat game."""
    pad_count: int = 6
    highlight_duration: float = 0.5
    gap_duration: float = 0.3
    settle_delay: float = 0.5
    reward_multiplier: int = 3  # reward += round * multiplier


@dataclass(frozen=True)
class RiskConfig:
    """Balance for the press-your-luck path."""
    max_position: int = 10
    base_burst_probability: float = 0.08
    burst_step: float = 0.08
    burst_cap: float = 0.95
    potential_per_step: int = 2  # potential += step * position
    burst_divisor: int = 3
    burst_floor: int = 1


@dataclass(frozen=True)
class GameConfigs:
    """Bundle of per-game balance configs handed to the dispatcher."""
    reaction: ReactionConfig = ReactionConfig()
    sequence: SequenceConfig = SequenceConfig()
    risk: RiskConfig = RiskConfig()


DEFAULT_CONFIGS = GameConfigs()


@dataclass(frozen=True)
class ArcadeSettings:
    """
    Runtime settings.

    Environment variables:
    - NEON_ARCADE_DATA_DIR: directory holding progress.json
    - NEON_ARCADE_LOG_LEVEL: logging level name (default WARNING)
    """
    data_dir: Path
    log_level: str = "WARNING"

    @property
    def progress_path(self) -> Path:
        return self.data_dir / "progress.json"

    @classmethod
    def from_env(cls, data_dir: str | Path | None = None) -> ArcadeSettings:
        if data_dir is None:
            data_dir = os.environ.get("NEON_ARCADE_DATA_DIR") or Path.home() / ".neon_arcade"
        return cls(
            data_dir=Path(data_dir).expanduser(),
            log_level=os.environ.get("NEON_ARCADE_LOG_LEVEL", "WARNING").upper(),
        )
