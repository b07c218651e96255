"""Code Stacker UI Module - terminal front-end driven by exercise snapshots."""

from ui.app import HostClock, StackingUI
from ui.components import (
    BlocksPanel,
    EffectBanner,
    ExerciseHeader,
    ExercisePanel,
    ResultSummary,
    SolutionPanel,
    format_time,
)
from ui.effects import EffectCue, EffectKind, derive_effects
from ui.styles import (
    TERMINAL_GREEN,
    SCORE_GOLD,
    COMBO_TEAL,
    ERROR_RED,
    MUTED_GRAY,
)

__all__ = [
    "HostClock",
    "StackingUI",
    "BlocksPanel",
    "EffectBanner",
    "ExerciseHeader",
    "ExercisePanel",
    "ResultSummary",
    "SolutionPanel",
    "format_time",
    "EffectCue",
    "EffectKind",
    "derive_effects",
    "TERMINAL_GREEN",
    "SCORE_GOLD",
    "COMBO_TEAL",
    "ERROR_RED",
    "MUTED_GRAY",
]
