"""Derive presentation cues from consecutive exercise snapshots.

The engine publishes only numeric and status facts. Anything visual (screen
flashes, combo and streak banners, floating score text) is decided here by
comparing the previous snapshot with the current one.
"""

from enum import Enum

from pydantic import BaseModel

from models import ExerciseState, ExerciseStatus, FeedbackKind

COMBO_THRESHOLD = 1.2
HIGH_COMBO_THRESHOLD = 2.0
STREAK_THRESHOLD = 3


class EffectKind(str, Enum):
    FLASH_SUCCESS = "flash_success"
    FLASH_ERROR = "flash_error"
    COMBO = "combo"
    HIGH_COMBO = "high_combo"
    STREAK = "streak"
    FLOATING_SCORE = "floating_score"
    TIME_BONUS = "time_bonus"
    COMPLETED = "completed"
    TIME_UP = "time_up"


class EffectCue(BaseModel):
    kind: EffectKind
    text: str = ""
    value: float = 0.0


def combo_text(combo: float, streak: int) -> str:
    if combo >= 2.5:
        return "INCREDIBLE!"
    if combo >= 2.0:
        return "AWESOME!"
    if combo >= 1.5:
        return "GREAT!"
    if streak >= STREAK_THRESHOLD:
        return "STREAK!"
    return ""


def derive_effects(previous: ExerciseState | None, current: ExerciseState) -> list[EffectCue]:
    """Return the cues triggered by the change from ``previous`` to ``current``."""
    if previous is None:
        return []

    cues: list[EffectCue] = []
    before, after = previous.score, current.score

    # Empty after a reset, since the log only grows within one attempt.
    new_entries = after.feedback_log[len(before.feedback_log):]

    for entry in new_entries:
        if entry.kind == FeedbackKind.CORRECT:
            cues.append(EffectCue(kind=EffectKind.FLASH_SUCCESS))
        elif entry.kind == FeedbackKind.INCORRECT:
            cues.append(EffectCue(kind=EffectKind.FLASH_ERROR, text="OOPS!"))
        elif entry.kind == FeedbackKind.TIME_BONUS:
            cues.append(
                EffectCue(
                    kind=EffectKind.TIME_BONUS,
                    text=f"Time bonus: +{entry.points} points",
                    value=entry.points,
                )
            )

    delta = after.score - before.score
    if new_entries and delta != 0:
        sign = "+" if delta > 0 else ""
        cues.append(
            EffectCue(kind=EffectKind.FLOATING_SCORE, text=f"{sign}{delta}", value=delta)
        )

    if after.correct_placements > before.correct_placements:
        if after.combo_multiplier > COMBO_THRESHOLD:
            kind = (
                EffectKind.HIGH_COMBO
                if after.combo_multiplier >= HIGH_COMBO_THRESHOLD
                else EffectKind.COMBO
            )
            cues.append(
                EffectCue(
                    kind=kind,
                    text=f"x{after.combo_multiplier:.1f} COMBO",
                    value=after.combo_multiplier,
                )
            )
        if after.streak_count >= STREAK_THRESHOLD:
            cues.append(
                EffectCue(
                    kind=EffectKind.STREAK,
                    text=combo_text(after.combo_multiplier, after.streak_count),
                    value=after.streak_count,
                )
            )

    if previous.status != current.status:
        if current.status == ExerciseStatus.COMPLETED:
            cues.append(EffectCue(kind=EffectKind.COMPLETED, text="Challenge completed!"))
        elif current.status == ExerciseStatus.FAILED:
            cues.append(EffectCue(kind=EffectKind.TIME_UP, text="Time's up!"))

    return cues
