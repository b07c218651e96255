from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExerciseStatus(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


class FeedbackKind(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    TIME_BONUS = "time_bonus"
    STREAK_BONUS = "streak_bonus"


# ============================================================================
# Fragments and Geometry
# ============================================================================


class Fragment(BaseModel):
    """One draggable piece of source code."""

    model_config = ConfigDict(frozen=True)

    id: str  # "block-<original_index>", stable for the exercise lifetime
    content: str
    indentation_level: int = Field(default=0, ge=0)
    original_index: int = Field(ge=0)
    line_number: int = Field(default=1, ge=1)  # 1-based source line


class BlockPosition(BaseModel):
    """Vertical center of a placed fragment, as laid out by the presentation layer."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    center_y: float


class PointerContext(BaseModel):
    """Everything the presentation layer knows about a drop gesture."""

    model_config = ConfigDict(frozen=True)

    positions: list[BlockPosition] = Field(default_factory=list)
    pointer_y: float


# ============================================================================
# Scoring Models
# ============================================================================


class FeedbackEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FeedbackKind
    points: int
    fragment_id: str | None = None
    timestamp: datetime


class PlacementOutcome(BaseModel):
    """Result of committing one fragment to the arrangement."""

    model_config = ConfigDict(frozen=True)

    fragment_id: str
    target_index: int = Field(ge=0)
    correct: bool
    timestamp: datetime


class ScoreState(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(default=0, ge=0)
    streak_count: int = Field(default=0, ge=0)
    combo_multiplier: float = Field(default=1.0, ge=1.0)
    max_combo_reached: float = Field(default=1.0, ge=1.0)
    correct_placements: int = Field(default=0, ge=0)
    incorrect_placements: int = Field(default=0, ge=0)
    feedback_log: tuple[FeedbackEntry, ...] = ()

    @property
    def last_feedback(self) -> FeedbackEntry | None:
        return self.feedback_log[-1] if self.feedback_log else None


# ============================================================================
# Exercise Snapshot
# ============================================================================


class ExerciseState(BaseModel):
    """Immutable snapshot of an exercise.

    Produced exclusively by ExerciseStateMachine. Callers receive a new
    snapshot after every operation and never mutate one directly.
    """

    model_config = ConfigDict(frozen=True)

    exercise_id: str
    difficulty: str
    status: ExerciseStatus = ExerciseStatus.WAITING
    arrangement: tuple[Fragment, ...] = ()
    available: tuple[Fragment, ...] = ()
    score: ScoreState = Field(default_factory=ScoreState)
    time_remaining: int = Field(ge=0)
    time_limit: int = Field(gt=0)
    total_fragments: int = Field(ge=1)

    @property
    def arrangement_ids(self) -> list[str]:
        return [fragment.id for fragment in self.arrangement]

    @property
    def available_ids(self) -> list[str]:
        return [fragment.id for fragment in self.available]

    @property
    def progress(self) -> float:
        """Fraction of fragments placed (0.0 - 1.0)."""
        return len(self.arrangement) / self.total_fragments

    @property
    def is_finished(self) -> bool:
        return self.status in (
            ExerciseStatus.COMPLETED,
            ExerciseStatus.FAILED,
            ExerciseStatus.ABORTED,
        )
