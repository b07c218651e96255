"""The code stacking exercise state machine.

ExerciseStateMachine is the single owner of an exercise's state. Every
operation validates the current status, builds the complete next snapshot
and only then swaps it in, so a rejected call never leaves a half-applied
change behind. Observers are notified with each new snapshot; an observer
that raises is logged and does not affect the operation or other observers.

Lifecycle:
    waiting -> active <-> paused
    active -> completed | failed
    active | paused -> aborted (terminal)
    any state but aborted -> waiting (reset)
"""

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Callable

from exercises.blocks import build_fragments, shuffle_unsolved
from exercises.config import Difficulty, ExerciseConfig, ScoringConfig, SplitMode
from exercises.errors import EmptySourceError, InvalidTransitionError, UnknownFragmentError
from exercises.insertion import resolve_insertion_index
from exercises.scoring import apply_placement, apply_time_bonus, is_correct_placement
from models import (
    ExerciseState,
    ExerciseStatus,
    Fragment,
    PlacementOutcome,
    PointerContext,
    ScoreState,
)

logger = logging.getLogger(__name__)

Observer = Callable[[ExerciseState], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExerciseStateMachine:
    """Owns one exercise and mediates all of its transitions.

    Not thread-safe: a single caller drives the machine, including the
    host clock that calls ``tick``.
    """

    def __init__(
        self,
        fragments: list[Fragment],
        config: ExerciseConfig | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        exercise_id: str | None = None,
    ):
        if not fragments:
            raise EmptySourceError()
        ids = [fragment.id for fragment in fragments]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate fragment ids: {', '.join(duplicates)}")

        self.config = config or ExerciseConfig()
        self.scoring: ScoringConfig = self.config.resolve_scoring()
        self.exercise_id = exercise_id or str(uuid.uuid4())

        self._fragments = tuple(sorted(fragments, key=lambda f: f.original_index))
        self._solution = tuple(fragment.id for fragment in self._fragments)
        self._rng = rng or random.Random()
        self._clock = clock or _utcnow
        self._observers: list[Observer] = []
        self._busy = False

        self._state = self._fresh_state()

    @classmethod
    def from_source(
        cls,
        source_code: str,
        config: ExerciseConfig | None = None,
        **kwargs,
    ) -> "ExerciseStateMachine":
        config = config or ExerciseConfig()
        fragments = build_fragments(source_code, config.split_mode)
        return cls(fragments, config, **kwargs)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> ExerciseState:
        return self._state

    @property
    def solution(self) -> tuple[str, ...]:
        """Fragment ids in source order."""
        return self._solution

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        return self._fragments

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> ExerciseState:
        self._require("start", ExerciseStatus.WAITING)
        return self._commit(
            self._state.model_copy(
                update={
                    "status": ExerciseStatus.ACTIVE,
                    "time_remaining": self._state.time_limit,
                }
            )
        )

    def pause(self) -> ExerciseState:
        self._require("pause", ExerciseStatus.ACTIVE)
        return self._commit(
            self._state.model_copy(update={"status": ExerciseStatus.PAUSED})
        )

    def resume(self) -> ExerciseState:
        self._require("resume", ExerciseStatus.PAUSED)
        return self._commit(
            self._state.model_copy(update={"status": ExerciseStatus.ACTIVE})
        )

    def drop(
        self,
        fragment_id: str,
        pointer: PointerContext | None = None,
        *,
        index: int | None = None,
    ) -> ExerciseState:
        """Place an available fragment into the arrangement.

        The insertion index is ``index`` when given, otherwise it is resolved
        from ``pointer``; with neither the fragment is appended. Indices
        outside ``0..len(arrangement)`` append as well.

        Raises:
            InvalidTransitionError: If the exercise is not active.
            UnknownFragmentError: If ``fragment_id`` is not in the pool.
        """
        self._require("drop", ExerciseStatus.ACTIVE)
        state = self._state

        fragment = next((f for f in state.available if f.id == fragment_id), None)
        if fragment is None:
            logger.warning("Fragment %s not found in available pool", fragment_id)
            raise UnknownFragmentError(fragment_id)

        target = self._resolve_index(pointer, index, len(state.arrangement))

        arrangement = list(state.arrangement)
        arrangement.insert(target, fragment)
        available = tuple(f for f in state.available if f.id != fragment_id)
        arrangement_ids = [f.id for f in arrangement]

        now = self._clock()
        outcome = PlacementOutcome(
            fragment_id=fragment_id,
            target_index=target,
            correct=is_correct_placement(arrangement_ids, list(self._solution), target),
            timestamp=now,
        )
        score = apply_placement(state.score, outcome, self.scoring)

        status = ExerciseStatus.ACTIVE
        if tuple(arrangement_ids) == self._solution:
            status = ExerciseStatus.COMPLETED
            score = apply_time_bonus(
                score, state.time_remaining, state.time_limit, self.scoring, now
            )

        logger.debug(
            "Placed %s at %d (%s), score %d, combo %.2f",
            fragment_id,
            target,
            "correct" if outcome.correct else "incorrect",
            score.score,
            score.combo_multiplier,
        )

        return self._commit(
            state.model_copy(
                update={
                    "status": status,
                    "arrangement": tuple(arrangement),
                    "available": available,
                    "score": score,
                }
            )
        )

    def tick(self, elapsed_seconds: int = 1) -> ExerciseState:
        """Advance the timer by whole seconds; fails the exercise at zero."""
        if elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be non-negative, got {elapsed_seconds}")
        self._require("tick", ExerciseStatus.ACTIVE)

        remaining = max(0, self._state.time_remaining - elapsed_seconds)
        status = ExerciseStatus.FAILED if remaining == 0 else ExerciseStatus.ACTIVE
        return self._commit(
            self._state.model_copy(
                update={"status": status, "time_remaining": remaining}
            )
        )

    def reset(self) -> ExerciseState:
        """Start over with a freshly shuffled pool."""
        self._require(
            "reset",
            ExerciseStatus.WAITING,
            ExerciseStatus.ACTIVE,
            ExerciseStatus.PAUSED,
            ExerciseStatus.COMPLETED,
            ExerciseStatus.FAILED,
        )
        return self._commit(self._fresh_state())

    def abort(self) -> ExerciseState:
        """Discard the exercise. No further operations are accepted."""
        self._require("abort", ExerciseStatus.ACTIVE, ExerciseStatus.PAUSED)
        return self._commit(
            self._state.model_copy(update={"status": ExerciseStatus.ABORTED})
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fresh_state(self) -> ExerciseState:
        available = shuffle_unsolved(
            list(self._fragments), self._rng, self.config.shuffle_attempts
        )
        time_limit = self.config.resolve_time_limit()
        return ExerciseState(
            exercise_id=self.exercise_id,
            difficulty=self.config.difficulty.value,
            status=ExerciseStatus.WAITING,
            arrangement=(),
            available=tuple(available),
            score=ScoreState(),
            time_remaining=time_limit,
            time_limit=time_limit,
            total_fragments=len(self._fragments),
        )

    def _require(self, operation: str, *allowed: ExerciseStatus) -> None:
        status = self._state.status
        if self._busy:
            raise InvalidTransitionError(
                operation, status, "another operation is in progress"
            )
        if status not in allowed:
            logger.warning("Rejected %s: exercise is %s", operation, status.value)
            raise InvalidTransitionError(operation, status)

    def _resolve_index(
        self,
        pointer: PointerContext | None,
        index: int | None,
        placed_count: int,
    ) -> int:
        if index is not None:
            target = index
        elif pointer is not None:
            target = resolve_insertion_index(pointer.positions, pointer.pointer_y)
        else:
            return placed_count

        if target < 0 or target > placed_count:
            logger.warning(
                "Insertion index %d out of range 0..%d, appending",
                target,
                placed_count,
            )
            return placed_count
        return target

    def _commit(self, new_state: ExerciseState) -> ExerciseState:
        previous = self._state.status
        self._state = new_state
        if previous != new_state.status:
            logger.debug(
                "Exercise %s: %s -> %s",
                self.exercise_id,
                previous.value,
                new_state.status.value,
            )

        self._busy = True
        try:
            for observer in list(self._observers):
                try:
                    observer(new_state)
                except Exception:
                    # The transition stands and later observers still run.
                    logger.exception("Observer %r failed on %s", observer, new_state.status.value)
        finally:
            self._busy = False
        return new_state


def create_exercise(
    source_code: str,
    time_limit: int | None = None,
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    *,
    split_mode: SplitMode = SplitMode.LINE,
    scoring: ScoringConfig | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ExerciseStateMachine:
    """Build a waiting exercise from source code.

    Args:
        source_code: Code to split into fragments.
        time_limit: Seconds allowed; defaults to the difficulty preset.
        difficulty: "easy", "medium" or "hard".
        split_mode: Cut per line or per statement.
        scoring: Full scoring override; defaults to the difficulty preset.
        rng: Random source for shuffling.
        clock: Timestamp source for feedback entries.

    Returns:
        The state machine; ``.state`` is the initial waiting snapshot.

    Raises:
        EmptySourceError: If the source has no usable lines.
    """
    config = ExerciseConfig(
        difficulty=difficulty,
        time_limit=time_limit,
        split_mode=split_mode,
        scoring=scoring,
    )
    return ExerciseStateMachine.from_source(source_code, config, rng=rng, clock=clock)
