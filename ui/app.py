import time
from typing import Callable, Optional

from rich.console import Console
from rich.text import Text
from rich.panel import Panel

from exercises import ExerciseError, ExerciseStateMachine
from models import ExerciseState, ExerciseStatus
from ui.components import EffectBanner, ExercisePanel, ResultSummary, format_time
from ui.effects import EffectCue, derive_effects
from ui.styles import (
    DEFAULT_THEME,
    TERMINAL_GREEN,
    ERROR_RED,
    MUTED_GRAY,
    TEXT_LIGHT,
)


class HostClock:
    """Turns wall-clock time into whole-second ticks for the engine."""

    def __init__(self, time_source: Callable[[], float] = time.monotonic):
        self._time_source = time_source
        self._last = time_source()
        self._carry = 0.0

    def restart(self) -> None:
        """Forget time accumulated so far (e.g. while paused)."""
        self._last = self._time_source()
        self._carry = 0.0

    def elapsed_seconds(self) -> int:
        now = self._time_source()
        self._carry += now - self._last
        self._last = now
        whole = int(self._carry)
        self._carry -= whole
        return whole


class StackingUI:
    """Terminal front-end for a code stacking exercise."""

    def __init__(
        self,
        console: Optional[Console] = None,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.console = console or Console(theme=DEFAULT_THEME)
        self._time_source = time_source
        self._previous: Optional[ExerciseState] = None
        self._cues: list[EffectCue] = []

    def on_state(self, state: ExerciseState) -> None:
        """Observer callback: derive cues from the snapshot diff."""
        self._cues = derive_effects(self._previous, state)
        self._previous = state

    def run(self, machine: ExerciseStateMachine) -> ExerciseState:
        """Play one exercise to the end. Returns the final snapshot."""
        self._previous = machine.state
        unsubscribe = machine.subscribe(self.on_state)
        try:
            if not self.show_start_screen(machine.state):
                return machine.state

            machine.start()
            clock = HostClock(self._time_source)

            while not machine.state.is_finished:
                self.clear_screen()
                self.show_exercise(machine.state)
                user_input = self.console.input(
                    Text("Your move: ", style=f"bold {MUTED_GRAY}")
                ).strip()

                if machine.state.status == ExerciseStatus.ACTIVE:
                    elapsed = clock.elapsed_seconds()
                    if elapsed:
                        machine.tick(elapsed)
                    if machine.state.status == ExerciseStatus.FAILED:
                        break

                if not self._handle_command(machine, clock, user_input):
                    self.show_quit_message()
                    return machine.state

            self.show_result(machine.state)
            return machine.state
        finally:
            unsubscribe()

    def _handle_command(
        self,
        machine: ExerciseStateMachine,
        clock: HostClock,
        user_input: str,
    ) -> bool:
        """Apply one command. Returns False when the player quits."""
        command = user_input.lower()
        status = machine.state.status

        try:
            if command == "q":
                if status in (ExerciseStatus.ACTIVE, ExerciseStatus.PAUSED):
                    machine.abort()
                return False

            if command == "p":
                if status == ExerciseStatus.PAUSED:
                    machine.resume()
                    clock.restart()
                else:
                    machine.pause()
                return True

            if command == "r":
                machine.reset()
                machine.start()
                clock.restart()
                return True

            placement = self.parse_placement(user_input, len(machine.state.available))
            if placement is None:
                self.show_error(
                    "Enter a block number and optional position (e.g. '2' or '2 1')"
                )
                return True

            block_number, position = placement
            fragment = machine.state.available[block_number - 1]
            index = position - 1 if position is not None else None
            machine.drop(fragment.id, index=index)
        except ExerciseError as e:
            self.show_error(str(e))
        return True

    @staticmethod
    def parse_placement(user_input: str, available_count: int) -> tuple[int, int | None] | None:
        """Parse '<block>' or '<block> <position>' (both 1-based)."""
        parts = user_input.split()
        if not parts or len(parts) > 2:
            return None
        try:
            numbers = [int(part) for part in parts]
        except ValueError:
            return None

        block_number = numbers[0]
        if not 1 <= block_number <= available_count:
            return None
        position = numbers[1] if len(numbers) == 2 else None
        if position is not None and position < 1:
            return None
        return block_number, position

    def show_start_screen(self, state: ExerciseState) -> bool:
        """Show the intro panel. Returns False if the player quits."""
        content = Text()
        content.append("Ready to start the challenge?\n\n", style=f"bold {TERMINAL_GREEN}")
        content.append(
            "Arrange the code blocks in the correct order to form a complete program.\n\n",
            style=TEXT_LIGHT,
        )
        content.append(f"Blocks: {state.total_fragments}   ", style=MUTED_GRAY)
        content.append(f"Time limit: {format_time(state.time_limit)}   ", style=MUTED_GRAY)
        content.append(f"Difficulty: {state.difficulty.upper()}", style=MUTED_GRAY)

        self.console.print(
            Panel(content, title="Code Stacking Challenge", border_style=TERMINAL_GREEN)
        )
        user_input = self.console.input(
            Text("Press Enter to start (or 'q' to quit)...", style=f"bold {MUTED_GRAY}")
        ).strip()
        return user_input.lower() != "q"

    def show_exercise(self, state: ExerciseState) -> None:
        self.console.print(ExercisePanel(state))
        if self._cues:
            self.console.print(EffectBanner(self._cues))
        self.console.print()

    def show_result(self, state: ExerciseState) -> None:
        self.console.print(ResultSummary(state))

    def show_error(self, message: str) -> None:
        self.console.print(Text(f"Error: {message}", style=ERROR_RED))

    def show_quit_message(self) -> None:
        self.console.print()
        self.console.print(Text("Exercise aborted. See you next time!", style=MUTED_GRAY))

    def clear_screen(self) -> None:
        self.console.clear()
