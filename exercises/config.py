"""Configuration for code stacking exercises.

These configuration models allow users to tune exercise behavior, such as
the time limit, the combo curve, penalties and bonuses.
"""

from enum import Enum

from pydantic import BaseModel, Field


class SplitMode(str, Enum):
    """How source code is cut into fragments."""

    LINE = "line"
    STATEMENT = "statement"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ScoringConfig(BaseModel):
    """Configuration for the scoring engine.

    The combo multiplier grows linearly by ``combo_increment`` for every
    consecutive correct placement after the first, capped at ``max_combo``.
    """

    base_points: int = Field(default=100, ge=1)
    penalty_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    combo_increment: float = Field(default=0.1, gt=0.0)
    max_combo: float = Field(default=3.0, ge=1.0)
    time_bonus_per_second: int = Field(default=10, ge=0)
    streak_bonus_interval: int = Field(default=5, ge=0)  # 0 disables streak bonuses
    streak_bonus_points: int = Field(default=50, ge=0)


class DifficultyPreset(BaseModel):
    """Per-difficulty defaults."""

    time_limit: int = Field(gt=0)
    base_points: int = Field(ge=1)
    penalty_rate: float = Field(ge=0.0, le=1.0)


DIFFICULTY_PRESETS: dict[Difficulty, DifficultyPreset] = {
    Difficulty.EASY: DifficultyPreset(time_limit=180, base_points=50, penalty_rate=0.05),
    Difficulty.MEDIUM: DifficultyPreset(time_limit=120, base_points=100, penalty_rate=0.1),
    Difficulty.HARD: DifficultyPreset(time_limit=90, base_points=150, penalty_rate=0.15),
}


class ExerciseConfig(BaseModel):
    """Master configuration for a single exercise.

    ``time_limit`` and ``scoring`` override what the difficulty preset
    provides when set.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    time_limit: int | None = Field(default=None, gt=0)
    split_mode: SplitMode = SplitMode.LINE
    scoring: ScoringConfig | None = None
    shuffle_attempts: int = Field(default=10, ge=1)

    @property
    def preset(self) -> DifficultyPreset:
        return DIFFICULTY_PRESETS[self.difficulty]

    def resolve_time_limit(self) -> int:
        if self.time_limit is not None:
            return self.time_limit
        return self.preset.time_limit

    def resolve_scoring(self) -> ScoringConfig:
        if self.scoring is not None:
            return self.scoring
        return ScoringConfig(
            base_points=self.preset.base_points,
            penalty_rate=self.preset.penalty_rate,
        )
