"""Integration tests for the interactive terminal front-end.

These tests simulate user input through stdin by mocking Console.input().
"""

import io
import random
from typing import Any

import pytest
from rich.console import Console

import main
from exercises import ExerciseStateMachine, create_exercise
from models import ExerciseState, ExerciseStatus
from ui import StackingUI
from ui.app import HostClock
from ui.styles import DEFAULT_THEME


class InputSequence:
    """Callable providing sequential inputs for mocked Console.input().

    Tracks all prompts received for debugging failed tests.
    """

    def __init__(self, inputs: list[str]):
        self.inputs = inputs
        self.index = 0
        self.call_history: list[tuple[int, Any]] = []

    def __call__(self, prompt: Any = "") -> str:
        """Return next input in sequence, tracking prompts received."""
        self.call_history.append((self.index, prompt))
        if self.index >= len(self.inputs):
            history = "\n".join(f"  {i}: {p}" for i, p in self.call_history)
            raise StopIteration(
                f"Ran out of inputs at call {self.index}.\n"
                f"Prompt: {prompt}\n"
                f"History:\n{history}"
            )
        result = self.inputs[self.index]
        self.index += 1
        return result

    @property
    def remaining(self) -> int:
        """Number of unused inputs remaining."""
        return len(self.inputs) - self.index


class FakeTime:
    """Monotonic time source that advances by ``step`` on every read."""

    def __init__(self, step: float = 0.0):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


def solving_inputs(machine: ExerciseStateMachine) -> list[str]:
    """Commands that place every block at its solution slot."""
    available = machine.state.available_ids
    inputs = []
    for position, fragment_id in enumerate(machine.solution, start=1):
        number = available.index(fragment_id) + 1
        inputs.append(f"{number} {position}")
        available.remove(fragment_id)
    return inputs


@pytest.fixture
def machine(abc_source) -> ExerciseStateMachine:
    return create_exercise(abc_source, time_limit=60, rng=random.Random(8))


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def ui_runner(monkeypatch, output):
    """Fixture providing a patched StackingUI runner.

    Patches:
    - Console.input to use provided InputSequence
    - Console.clear to no-op (avoid terminal issues)

    Returns a callable that takes an InputSequence and a machine and plays
    the exercise, returning the final snapshot.
    """
    monkeypatch.setattr(Console, "clear", lambda self: None)

    def runner(
        input_sequence: InputSequence,
        machine: ExerciseStateMachine,
        time_source: FakeTime | None = None,
    ) -> ExerciseState:
        monkeypatch.setattr(Console, "input", input_sequence)
        console = Console(file=output, width=200, theme=DEFAULT_THEME)
        ui = StackingUI(console, time_source=time_source or FakeTime())
        return ui.run(machine)

    return runner


class TestInteractiveBasicFlow:
    """Tests for basic interactive session flow."""

    def test_quit_at_start_screen(self, ui_runner, machine):
        inputs = InputSequence(["q"])

        state = ui_runner(inputs, machine)

        assert state.status == ExerciseStatus.WAITING
        assert inputs.remaining == 0

    def test_solve_exercise(self, ui_runner, machine, output):
        inputs = InputSequence([""] + solving_inputs(machine))

        state = ui_runner(inputs, machine)

        assert state.status == ExerciseStatus.COMPLETED
        assert state.score.correct_placements == 3
        assert state.score.incorrect_placements == 0
        assert "Challenge Completed!" in output.getvalue()

    def test_quit_mid_exercise_aborts(self, ui_runner, machine, output):
        inputs = InputSequence(["", "q"])

        state = ui_runner(inputs, machine)

        assert state.status == ExerciseStatus.ABORTED
        assert "Exercise aborted" in output.getvalue()

    def test_observer_is_removed_after_run(self, ui_runner, machine):
        ui_runner(InputSequence(["", "q"]), machine)

        assert machine._observers == []


class TestInteractiveCommands:
    """Tests for pause, reset and input validation."""

    def test_invalid_input_shows_help(self, ui_runner, machine, output):
        inputs = InputSequence(["", "hello", "9", "1 0", "q"])

        state = ui_runner(inputs, machine)

        assert output.getvalue().count("Enter a block number") == 3
        assert state.arrangement == ()

    def test_drop_while_paused_is_rejected(self, ui_runner, machine, output):
        inputs = InputSequence(["", "p", "1", "p", "1", "q"])

        state = ui_runner(inputs, machine)

        assert "Cannot drop while exercise is paused" in output.getvalue()
        assert len(state.arrangement) == 1
        assert state.status == ExerciseStatus.ABORTED

    def test_reset_starts_over(self, ui_runner, machine):
        inputs = InputSequence(["", "1", "2", "r", "q"])

        state = ui_runner(inputs, machine)

        assert state.arrangement == ()
        assert state.score.feedback_log == ()
        assert state.time_remaining == 60

    def test_position_beyond_end_appends(self, ui_runner, machine):
        inputs = InputSequence(["", "1", "1 9", "q"])

        state = ui_runner(inputs, machine)

        assert len(state.arrangement) == 2


class TestInteractiveTimer:
    def test_time_runs_out(self, ui_runner, machine, output):
        inputs = InputSequence(["", "1"])

        state = ui_runner(inputs, machine, time_source=FakeTime(step=61))

        assert state.status == ExerciseStatus.FAILED
        assert state.arrangement == ()
        assert "Time's Up!" in output.getvalue()

    def test_ticks_follow_the_clock(self, ui_runner, machine):
        inputs = InputSequence(["", "1", "q"])

        state = ui_runner(inputs, machine, time_source=FakeTime(step=5))

        assert state.time_remaining < 60
        assert state.status == ExerciseStatus.ABORTED


class TestHostClock:
    def test_whole_seconds_with_carry(self):
        readings = iter([0.0, 0.6, 1.2, 1.9])
        clock = HostClock(lambda: next(readings))

        assert clock.elapsed_seconds() == 0
        assert clock.elapsed_seconds() == 1
        assert clock.elapsed_seconds() == 0

    def test_restart_drops_accumulated_time(self):
        readings = iter([0.0, 0.9, 10.0, 10.5])
        clock = HostClock(lambda: next(readings))

        clock.elapsed_seconds()
        clock.restart()

        assert clock.elapsed_seconds() == 0


class TestParsePlacement:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2", (2, None)),
            ("2 1", (2, 1)),
            (" 3   4 ", (3, 4)),
            ("0", None),
            ("4", None),
            ("2 0", None),
            ("a", None),
            ("1 2 3", None),
            ("", None),
        ],
    )
    def test_parse(self, text, expected):
        assert StackingUI.parse_placement(text, 3) == expected


class TestMainEntryPoint:
    """Tests for CLI routing in main.py."""

    def test_play_quit_immediately(self, monkeypatch, capsys):
        monkeypatch.setattr(Console, "clear", lambda self: None)
        monkeypatch.setattr(Console, "input", InputSequence(["q"]))

        main.main(["play", "--snippet", "factorial", "--seed", "1"])

        assert "Code Stacking Challenge" in capsys.readouterr().out

    def test_empty_source_file_exits(self, tmp_path):
        source = tmp_path / "empty.py"
        source.write_text("\n\n")

        with pytest.raises(SystemExit) as exc_info:
            main.main(["play", "--source", str(source)])

        assert exc_info.value.code == 1

    def test_missing_source_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["play", "--source", str(tmp_path / "missing.py")])

        assert exc_info.value.code == 1

    @pytest.mark.parametrize(
        "argv",
        [
            ["play", "-t", "0"],
            ["play", "--time-limit", "-5"],
            ["simulate", "--accuracy", "1.5", "--runs", "1"],
        ],
    )
    def test_invalid_option_values_exit(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main.main(argv)

        assert exc_info.value.code == 1
        assert "Error: invalid" in capsys.readouterr().out

    def test_undecodable_source_file_exits(self, tmp_path, capsys):
        source = tmp_path / "latin1.py"
        source.write_bytes(b"x = '\xff\xfe'\n")

        with pytest.raises(SystemExit) as exc_info:
            main.main(["play", "--source", str(source)])

        assert exc_info.value.code == 1
        assert "cannot read source" in capsys.readouterr().out

    def test_simulate_command(self, tmp_path, capsys):
        output = tmp_path / "results.json"

        main.main(
            ["simulate", "--snippet", "factorial", "--runs", "2", "--seed", "4", "-o", str(output)]
        )

        assert output.exists()
        assert "Completion rate" in capsys.readouterr().out

    def test_parser_defaults(self):
        args = main.create_parser().parse_args(["simulate"])

        assert args.runs == 10
        assert args.accuracy == 0.8
        assert args.difficulty == "medium"
        assert args.split == "line"

    def test_build_exercise_config(self):
        args = main.create_parser().parse_args(
            ["play", "--difficulty", "hard", "-t", "30", "--split", "statement"]
        )

        config = main.build_exercise_config(args)

        assert config.resolve_time_limit() == 30
        assert config.resolve_scoring().base_points == 150
        assert config.split_mode.value == "statement"

    def test_load_source_defaults_to_snippet(self):
        args = main.create_parser().parse_args(["play"])

        assert main.load_source(args) == main.SAMPLE_SNIPPETS[main.DEFAULT_SNIPPET]
