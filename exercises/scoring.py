"""Scoring and combo rules.

Every function here is a pure transformation of a frozen ScoreState, so a
sequence of placements can be replayed deterministically.

Combo curve:
    multiplier = min(1.0 + combo_increment * (streak - 1), max_combo)

so the first correct placement of a streak scores at 1.0x, each further
one adds ``combo_increment`` until the cap.
"""

from datetime import datetime

from exercises.config import ScoringConfig
from models import FeedbackEntry, FeedbackKind, PlacementOutcome, ScoreState


def is_correct_placement(
    arrangement_ids: list[str],
    solution_ids: list[str],
    index: int,
) -> bool:
    """Check the fragment at ``index`` of the committed arrangement.

    Only the placed fragment is judged; fragments shifted by the insertion
    are not re-scored.
    """
    if index < 0 or index >= len(solution_ids) or index >= len(arrangement_ids):
        return False
    return arrangement_ids[index] == solution_ids[index]


def combo_multiplier(streak_count: int, config: ScoringConfig) -> float:
    """Multiplier for a streak of ``streak_count`` correct placements."""
    steps = max(streak_count - 1, 0)
    return round(min(1.0 + config.combo_increment * steps, config.max_combo), 2)


def placement_points(multiplier: float, config: ScoringConfig) -> int:
    return round(config.base_points * multiplier)


def penalty_points(config: ScoringConfig) -> int:
    return round(config.base_points * config.penalty_rate)


def apply_placement(
    state: ScoreState,
    outcome: PlacementOutcome,
    config: ScoringConfig,
) -> ScoreState:
    """Fold one placement into the score.

    Correct placements extend the streak and earn ``base_points`` times the
    combo multiplier, plus a streak bonus every ``streak_bonus_interval``
    placements. Incorrect placements reset streak and combo and deduct the
    configured penalty, never taking the score below zero.
    """
    if not outcome.correct:
        deducted = min(penalty_points(config), state.score)
        entry = FeedbackEntry(
            kind=FeedbackKind.INCORRECT,
            points=-deducted,
            fragment_id=outcome.fragment_id,
            timestamp=outcome.timestamp,
        )
        return state.model_copy(
            update={
                "score": state.score - deducted,
                "streak_count": 0,
                "combo_multiplier": 1.0,
                "incorrect_placements": state.incorrect_placements + 1,
                "feedback_log": state.feedback_log + (entry,),
            }
        )

    streak = state.streak_count + 1
    multiplier = combo_multiplier(streak, config)
    points = placement_points(multiplier, config)
    entries = [
        FeedbackEntry(
            kind=FeedbackKind.CORRECT,
            points=points,
            fragment_id=outcome.fragment_id,
            timestamp=outcome.timestamp,
        )
    ]

    interval = config.streak_bonus_interval
    if interval and streak % interval == 0 and config.streak_bonus_points:
        entries.append(
            FeedbackEntry(
                kind=FeedbackKind.STREAK_BONUS,
                points=config.streak_bonus_points,
                fragment_id=outcome.fragment_id,
                timestamp=outcome.timestamp,
            )
        )

    return state.model_copy(
        update={
            "score": state.score + sum(entry.points for entry in entries),
            "streak_count": streak,
            "combo_multiplier": multiplier,
            "max_combo_reached": max(state.max_combo_reached, multiplier),
            "correct_placements": state.correct_placements + 1,
            "feedback_log": state.feedback_log + tuple(entries),
        }
    )


def time_bonus_points(time_remaining: int, time_limit: int, config: ScoringConfig) -> int:
    """Bonus proportional to the fraction of time left."""
    if time_remaining <= 0 or time_limit <= 0:
        return 0
    fraction = min(time_remaining / time_limit, 1.0)
    return round(config.time_bonus_per_second * time_limit * fraction)


def apply_time_bonus(
    state: ScoreState,
    time_remaining: int,
    time_limit: int,
    config: ScoringConfig,
    timestamp: datetime,
) -> ScoreState:
    """Award the one-time completion bonus. No entry when nothing is left."""
    bonus = time_bonus_points(time_remaining, time_limit, config)
    if bonus <= 0:
        return state

    entry = FeedbackEntry(
        kind=FeedbackKind.TIME_BONUS,
        points=bonus,
        timestamp=timestamp,
    )
    return state.model_copy(
        update={
            "score": state.score + bonus,
            "feedback_log": state.feedback_log + (entry,),
        }
    )
