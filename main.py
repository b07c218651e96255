import argparse
import logging
import random
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from exercises import (
    DEFAULT_SNIPPET,
    SAMPLE_SNIPPETS,
    Difficulty,
    EmptySourceError,
    ExerciseConfig,
    ExerciseStateMachine,
    SplitMode,
)
from ui import StackingUI
from ui.styles import DEFAULT_THEME

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    """Route log records through rich. Called once at startup."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _add_exercise_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--source",
        type=Path,
        default=None,
        help="Path to a code file to practice with",
    )
    source.add_argument(
        "--snippet",
        choices=sorted(SAMPLE_SNIPPETS),
        default=None,
        help=f"Bundled snippet to practice with (default: {DEFAULT_SNIPPET})",
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
        help="Difficulty preset (default: medium)",
    )
    parser.add_argument(
        "--time-limit",
        "-t",
        type=int,
        default=None,
        help="Time limit in seconds (default: from difficulty)",
    )
    parser.add_argument(
        "--split",
        choices=[m.value for m in SplitMode],
        default=SplitMode.LINE.value,
        help="Cut code per line or per statement (default: line)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(description="Code Stacker")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Play an exercise (default)")
    _add_exercise_arguments(play_parser)

    sim_parser = subparsers.add_parser("simulate", help="Run learner simulation")
    _add_exercise_arguments(sim_parser)
    sim_parser.add_argument(
        "--runs",
        "-n",
        type=int,
        default=10,
        help="Number of exercises to simulate (default: 10)",
    )
    sim_parser.add_argument(
        "--accuracy",
        "-a",
        type=float,
        default=0.8,
        help="Probability of a correct move 0.0-1.0 (default: 0.8)",
    )
    sim_parser.add_argument(
        "--seconds-per-move",
        "-s",
        type=int,
        default=3,
        help="Seconds the learner spends per move (default: 3)",
    )
    sim_parser.add_argument(
        "--hesitation",
        type=int,
        default=2,
        help="Maximum random extra seconds per move (default: 2)",
    )
    sim_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output JSON file path",
    )

    return parser


def load_source(args) -> str:
    """Read the code to practice from --source, --snippet or the default snippet."""
    source = getattr(args, "source", None)
    if source is not None:
        return Path(source).read_text(encoding="utf-8")
    return SAMPLE_SNIPPETS[getattr(args, "snippet", None) or DEFAULT_SNIPPET]


def build_exercise_config(args) -> ExerciseConfig:
    return ExerciseConfig(
        difficulty=getattr(args, "difficulty", Difficulty.MEDIUM.value),
        time_limit=getattr(args, "time_limit", None),
        split_mode=getattr(args, "split", SplitMode.LINE.value),
    )


def run_simulation(args, console: Console) -> None:
    """Run the simulation subcommand."""
    from simulate import run_simulation_and_report
    from simulator_models import SimulatedLearnerConfig

    learner_config = SimulatedLearnerConfig(
        accuracy=args.accuracy,
        seconds_per_move=args.seconds_per_move,
        hesitation=args.hesitation,
    )

    console.print("=" * 40, style="bold green")
    console.print("    Learner Simulator", style="bold green")
    console.print("=" * 40, style="bold green")

    if args.seed is not None:
        console.print(f"Random seed: {args.seed}")

    run_simulation_and_report(
        source_code=load_source(args),
        learner_config=learner_config,
        exercise_config=build_exercise_config(args),
        runs=args.runs,
        output_path=Path(args.output) if args.output else None,
        seed=args.seed,
        console=console,
    )


def run_interactive(args, console: Console) -> None:
    """Run an interactive exercise."""
    rng = random.Random(getattr(args, "seed", None))
    machine = ExerciseStateMachine.from_source(
        load_source(args), build_exercise_config(args), rng=rng
    )
    logger.info("Loaded exercise with %d blocks", machine.state.total_fragments)

    ui = StackingUI(console)
    ui.run(machine)


def main(argv: list[str] | None = None):
    """Main entry point with CLI routing."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    console = Console(theme=DEFAULT_THEME)

    try:
        if args.command == "simulate":
            run_simulation(args, console)
        else:
            # Default to interactive mode
            run_interactive(args, console)
    except EmptySourceError as e:
        console.print(f"Error: {e}", style="error")
        raise SystemExit(1)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"Error: invalid {field}: {error['msg']}", style="error")
        raise SystemExit(1)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"Error: cannot read source: {e}", style="error")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
