"""Shared pytest fixtures for the Code Stacker test suite."""

import random
from datetime import datetime, timedelta, timezone

import pytest

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exercises import ExerciseConfig, ExerciseStateMachine, ScoringConfig, build_fragments
from models import Fragment


class FakeClock:
    """Deterministic timestamp source for feedback entries."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def abc_source() -> str:
    """Three-line source whose solution is [a, b, c]."""
    return "a\nb\nc"


@pytest.fixture
def python_source() -> str:
    """Small indented Python snippet with a blank line."""
    return (
        "def greet(name):\n"
        "    if name:\n"
        "        print(name)\n"
        "\n"
        "    return None\n"
    )


@pytest.fixture
def abc_fragments(abc_source) -> list[Fragment]:
    return build_fragments(abc_source)


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Medium-difficulty scoring with the default combo curve."""
    return ScoringConfig(
        base_points=100,
        penalty_rate=0.1,
        combo_increment=0.1,
        max_combo=3.0,
        time_bonus_per_second=10,
        streak_bonus_interval=5,
        streak_bonus_points=50,
    )


@pytest.fixture
def abc_machine(abc_fragments, rng, clock) -> ExerciseStateMachine:
    """Waiting exercise over [a, b, c] with a 60 second limit."""
    return ExerciseStateMachine(
        abc_fragments,
        ExerciseConfig(time_limit=60),
        rng=rng,
        clock=clock,
        exercise_id="abc",
    )


@pytest.fixture
def active_machine(abc_machine) -> ExerciseStateMachine:
    abc_machine.start()
    return abc_machine

