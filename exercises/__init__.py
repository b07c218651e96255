"""Code stacking exercise engine.

A learner is shown shuffled fragments of a code snippet and rebuilds the
original order before time runs out.

Architecture:
- Blocks split source code into fragments and shuffle them
- The insertion resolver turns a pointer position into an insertion index
- Scoring folds each placement into an immutable score state
- The engine owns the exercise state and mediates every transition

Configuration:
- ExerciseConfig: difficulty, time limit, split mode and scoring overrides
- ScoringConfig: base points, penalty, combo curve and bonuses
"""

from exercises.blocks import build_fragments, get_indentation, shuffle, shuffle_unsolved
from exercises.config import (
    DIFFICULTY_PRESETS,
    Difficulty,
    DifficultyPreset,
    ExerciseConfig,
    ScoringConfig,
    SplitMode,
)
from exercises.engine import ExerciseStateMachine, create_exercise
from exercises.errors import (
    EmptySourceError,
    ExerciseError,
    InvalidTransitionError,
    UnknownFragmentError,
)
from exercises.insertion import resolve_insertion_index
from exercises.samples import DEFAULT_SNIPPET, SAMPLE_SNIPPETS, get_snippet
from exercises.scoring import (
    apply_placement,
    apply_time_bonus,
    combo_multiplier,
    is_correct_placement,
)

__all__ = [
    # Blocks
    "build_fragments",
    "get_indentation",
    "shuffle",
    "shuffle_unsolved",
    # Insertion
    "resolve_insertion_index",
    # Scoring
    "apply_placement",
    "apply_time_bonus",
    "combo_multiplier",
    "is_correct_placement",
    # Engine
    "ExerciseStateMachine",
    "create_exercise",
    # Errors
    "ExerciseError",
    "EmptySourceError",
    "InvalidTransitionError",
    "UnknownFragmentError",
    # Configuration
    "Difficulty",
    "DifficultyPreset",
    "DIFFICULTY_PRESETS",
    "ExerciseConfig",
    "ScoringConfig",
    "SplitMode",
    # Samples
    "DEFAULT_SNIPPET",
    "SAMPLE_SNIPPETS",
    "get_snippet",
]
