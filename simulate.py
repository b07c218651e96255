"""Core simulation logic for the learner simulator.

Plays exercises with a simulated learner, driving the state machine the same
way a host would: every move first advances the timer, then drops a block.
Everything is seeded, so a run can be replayed exactly.
"""

import json
import logging
import random
from datetime import datetime, timedelta
from pathlib import Path

from rich.console import Console
from rich.table import Table

from exercises import ExerciseConfig, ExerciseStateMachine, build_fragments
from models import ExerciseState, ExerciseStatus, Fragment
from simulator_models import RunResult, SimulatedLearnerConfig, SimulationResults

logger = logging.getLogger(__name__)


class SimulatedLearner:
    """Chooses moves: the right one with probability ``accuracy``, else a guess."""

    def __init__(self, config: SimulatedLearnerConfig, rng: random.Random):
        self.config = config
        self.rng = rng

    def think_time(self) -> int:
        return self.config.seconds_per_move + self.rng.randint(0, self.config.hesitation)

    def choose_move(
        self,
        state: ExerciseState,
        solution: tuple[str, ...],
    ) -> tuple[str, int]:
        """Return ``(fragment_id, index)`` for the next drop."""
        if self.rng.random() < self.config.accuracy:
            move = self._correct_move(state, solution)
            if move is not None:
                return move

        fragment = self.rng.choice(state.available)
        return fragment.id, self.rng.randint(0, len(state.arrangement))

    @staticmethod
    def _correct_move(
        state: ExerciseState,
        solution: tuple[str, ...],
    ) -> tuple[str, int] | None:
        """Earliest available fragment that can land on its own slot."""
        slots = {fragment_id: i for i, fragment_id in enumerate(solution)}
        candidates = sorted(state.available, key=lambda f: slots[f.id])
        for fragment in candidates:
            slot = slots[fragment.id]
            if slot <= len(state.arrangement):
                return fragment.id, slot
        return None


class Simulator:
    """Runs repeated simulated exercises over one fragment set."""

    def __init__(
        self,
        fragments: list[Fragment],
        learner_config: SimulatedLearnerConfig,
        exercise_config: ExerciseConfig | None = None,
        seed: int | None = None,
    ):
        self.fragments = fragments
        self.learner_config = learner_config
        self.exercise_config = exercise_config or ExerciseConfig()
        self.seed = seed
        self.rng = random.Random(seed)

    def run(self, runs: int) -> SimulationResults:
        """Run the full simulation."""
        start_time = datetime.now()
        run_results = [self._simulate_run(run) for run in range(1, runs + 1)]
        end_time = datetime.now()

        return self._compile_results(run_results, start_time, end_time)

    def _simulate_run(self, run: int) -> RunResult:
        elapsed = 0
        epoch = datetime(2024, 1, 1)

        def clock() -> datetime:
            return epoch + timedelta(seconds=elapsed)

        machine = ExerciseStateMachine(
            self.fragments,
            self.exercise_config,
            rng=random.Random(self.rng.getrandbits(32)),
            clock=clock,
            exercise_id=f"sim-{run}",
        )
        learner = SimulatedLearner(
            self.learner_config, random.Random(self.rng.getrandbits(32))
        )

        state = machine.start()
        moves = 0
        while state.status == ExerciseStatus.ACTIVE:
            if not state.available:
                # Every block placed but the order is wrong: wait out the clock.
                elapsed += state.time_remaining
                state = machine.tick(state.time_remaining)
                break

            seconds = learner.think_time()
            if seconds:
                elapsed += seconds
                state = machine.tick(seconds)
                if state.status != ExerciseStatus.ACTIVE:
                    break

            fragment_id, index = learner.choose_move(state, machine.solution)
            state = machine.drop(fragment_id, index=index)
            moves += 1

        logger.debug("Run %d finished %s with score %d", run, state.status.value, state.score.score)

        return RunResult(
            run=run,
            status=state.status,
            score=state.score.score,
            max_combo=state.score.max_combo_reached,
            correct_placements=state.score.correct_placements,
            incorrect_placements=state.score.incorrect_placements,
            moves=moves,
            time_remaining=state.time_remaining,
            time_limit=state.time_limit,
        )

    def _compile_results(
        self,
        run_results: list[RunResult],
        start_time: datetime,
        end_time: datetime,
    ) -> SimulationResults:
        count = len(run_results)
        completed = sum(1 for r in run_results if r.status == ExerciseStatus.COMPLETED)

        return SimulationResults(
            config=self.learner_config,
            difficulty=self.exercise_config.difficulty.value,
            fragment_count=len(self.fragments),
            runs=count,
            random_seed=self.seed,
            start_time=start_time,
            end_time=end_time,
            run_results=run_results,
            completion_rate=completed / count if count else 0.0,
            average_score=sum(r.score for r in run_results) / count if count else 0.0,
            average_max_combo=(
                sum(r.max_combo for r in run_results) / count if count else 0.0
            ),
            best_score=max((r.score for r in run_results), default=0),
        )


def print_console_summary(results: SimulationResults, console: Console) -> None:
    """Print a summary of the simulation results."""
    console.print()
    console.print("Learner Parameters:", style="bold")
    console.print(f"  Accuracy:           {results.config.accuracy:.2f}")
    console.print(f"  Seconds per move:   {results.config.seconds_per_move}")
    console.print(f"  Hesitation:         {results.config.hesitation}")
    console.print()
    console.print(
        f"Difficulty: {results.difficulty.upper()}   "
        f"Blocks: {results.fragment_count}   Runs: {results.runs}"
    )
    console.print(f"Completion rate:      {results.completion_rate * 100:.1f}%")
    console.print(f"Average score:        {results.average_score:.1f}")
    console.print(f"Average max combo:    x{results.average_max_combo:.2f}")
    console.print(f"Best score:           {results.best_score}")
    console.print()

    table = Table(title="Runs")
    table.add_column("Run", justify="right")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Max Combo", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Incorrect", justify="right")
    table.add_column("Time Left", justify="right")

    for r in results.run_results:
        table.add_row(
            str(r.run),
            r.status.value,
            str(r.score),
            f"x{r.max_combo:.1f}",
            str(r.correct_placements),
            str(r.incorrect_placements),
            f"{r.time_remaining}s",
        )
    console.print(table)


def save_json_results(results: SimulationResults, output_path: Path) -> None:
    """Save simulation results to JSON file."""
    data = json.loads(results.model_dump_json())

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, default=str)


def run_simulation_and_report(
    source_code: str,
    learner_config: SimulatedLearnerConfig,
    exercise_config: ExerciseConfig,
    runs: int,
    output_path: Path | None = None,
    seed: int | None = None,
    console: Console | None = None,
) -> SimulationResults:
    """Run simulation and generate all outputs."""
    console = console or Console()
    fragments = build_fragments(source_code, exercise_config.split_mode)

    simulator = Simulator(fragments, learner_config, exercise_config, seed=seed)
    results = simulator.run(runs)

    print_console_summary(results, console)

    if output_path is not None:
        save_json_results(results, output_path)
        console.print(f"Results saved to: {output_path}")

    return results
