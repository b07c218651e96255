"""Data models for the learner simulator."""

from datetime import datetime
from pydantic import BaseModel, Field

from models import ExerciseStatus


class SimulatedLearnerConfig(BaseModel):
    """Configuration for a simulated learner's behavior."""

    # Probability that a move is the right fragment at the right position
    # (0.5 = guessing a lot, 0.8 = average, 0.95 = expert)
    accuracy: float = Field(default=0.8, ge=0.0, le=1.0)

    # Seconds spent on every move before dropping a block
    seconds_per_move: int = Field(default=3, ge=0)

    # Up to this many extra seconds are added to a move at random
    hesitation: int = Field(default=2, ge=0)


class RunResult(BaseModel):
    """Outcome of one simulated exercise."""

    run: int  # 1-indexed
    status: ExerciseStatus
    score: int
    max_combo: float
    correct_placements: int
    incorrect_placements: int
    moves: int
    time_remaining: int
    time_limit: int


class SimulationResults(BaseModel):
    """Complete results of a simulation run."""

    # Configuration
    config: SimulatedLearnerConfig
    difficulty: str
    fragment_count: int
    runs: int
    random_seed: int | None
    start_time: datetime
    end_time: datetime

    # Per-run detail
    run_results: list[RunResult] = Field(default_factory=list)

    # Summary statistics
    completion_rate: float
    average_score: float
    average_max_combo: float
    best_score: int
