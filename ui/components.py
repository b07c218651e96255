from rich.text import Text
from rich.panel import Panel
from rich.table import Table
from rich.style import Style
from rich.align import Align
from rich.columns import Columns
from rich import box

from models import ExerciseState, ExerciseStatus, Fragment
from ui.effects import EffectCue, EffectKind
from ui.styles import (
    TERMINAL_GREEN,
    SCORE_GOLD,
    COMBO_TEAL,
    ERROR_RED,
    MUTED_GRAY,
    TEXT_LIGHT,
    get_time_style,
    get_combo_style,
    create_completed_header,
    create_failed_header,
)


def format_time(seconds: int) -> str:
    """Format seconds as M:SS."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


def _fragment_line(fragment: Fragment) -> str:
    # Multi-line statements keep their own inner indentation.
    return fragment.content.rstrip()


class ExerciseHeader:
    """Score, timer, combo and progress line."""

    def __init__(self, state: ExerciseState):
        self.state = state

    def render(self) -> Text:
        state = self.state
        score = state.score
        content = Text()
        content.append(f"Score: {score.score}", Style(color=SCORE_GOLD, bold=True))
        content.append("   ")
        content.append(
            f"Time: {format_time(state.time_remaining)}",
            get_time_style(state.time_remaining),
        )
        content.append("   ")
        content.append(
            f"x{score.combo_multiplier:.1f} combo",
            get_combo_style(score.combo_multiplier),
        )
        if score.streak_count:
            content.append(f"   Streak: {score.streak_count}", Style(color=COMBO_TEAL))
        content.append("\n")
        content.append(self._create_progress_bar(), Style(color=MUTED_GRAY))
        return content

    def _create_progress_bar(self) -> str:
        """Create a text-based progress bar."""
        width = 30
        percent = self.state.progress * 100
        filled = int(width * percent / 100)
        bar = "█" * filled + "░" * (width - filled)
        return f"[{bar}] {percent:.0f}%"

    def __rich__(self) -> Text:
        return self.render()


class BlocksPanel:
    """Numbered list of fragments still waiting to be placed."""

    def __init__(self, fragments: tuple[Fragment, ...]):
        self.fragments = fragments

    def render(self) -> Panel:
        content = Text()
        if not self.fragments:
            content.append("All blocks placed!", Style(color=MUTED_GRAY))
        for i, fragment in enumerate(self.fragments, start=1):
            content.append(f"{i:>2}. ", Style(color=SCORE_GOLD, bold=True))
            content.append(_fragment_line(fragment), Style(color=TEXT_LIGHT))
            content.append("\n")

        return Panel(
            Align.left(content),
            title="Available Blocks",
            border_style=MUTED_GRAY,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()


class SolutionPanel:
    """The learner's arrangement with its insertion slots."""

    def __init__(self, fragments: tuple[Fragment, ...]):
        self.fragments = fragments

    def render(self) -> Panel:
        content = Text()
        for i, fragment in enumerate(self.fragments, start=1):
            content.append(f"{i:>2}| ", Style(color=MUTED_GRAY))
            content.append(_fragment_line(fragment), Style(color=TERMINAL_GREEN))
            content.append("\n")
        if not self.fragments:
            content.append("Drop blocks here", Style(color=MUTED_GRAY))

        return Panel(
            Align.left(content),
            title="Your Solution",
            border_style=TERMINAL_GREEN,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()


class ExercisePanel:
    """Full exercise view: header, available blocks and solution side by side."""

    def __init__(self, state: ExerciseState, title: str = "Code Stacking Challenge"):
        self.state = state
        self.title = title

    def render(self) -> Panel:
        body = Table.grid(expand=True)
        body.add_column()
        body.add_row(ExerciseHeader(self.state).render())
        body.add_row(
            Columns(
                [
                    BlocksPanel(self.state.available).render(),
                    SolutionPanel(self.state.arrangement).render(),
                ],
                expand=True,
            )
        )

        if self.state.status == ExerciseStatus.PAUSED:
            subtitle = "Paused - 'p' to resume, 'q' to quit"
        else:
            subtitle = "'<block> [position]' to place, 'p' pause, 'r' reset, 'q' quit"

        return Panel(
            body,
            title=self.title,
            subtitle=subtitle,
            border_style=TERMINAL_GREEN,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()


class EffectBanner:
    """One-line rendering of the cues raised by the last move."""

    def __init__(self, cues: list[EffectCue]):
        self.cues = cues

    def render(self) -> Text:
        content = Text()
        for cue in self.cues:
            if cue.kind == EffectKind.FLASH_SUCCESS:
                content.append("✓ Correct! ", Style(color=TERMINAL_GREEN, bold=True))
            elif cue.kind == EffectKind.FLASH_ERROR:
                content.append(f"✗ {cue.text} ", Style(color=ERROR_RED, bold=True))
            elif cue.kind == EffectKind.FLOATING_SCORE:
                color = SCORE_GOLD if cue.value > 0 else ERROR_RED
                content.append(f"{cue.text} ", Style(color=color))
            elif cue.kind in (EffectKind.COMBO, EffectKind.HIGH_COMBO):
                content.append(f"{cue.text} ", get_combo_style(cue.value))
            elif cue.text:
                content.append(f"{cue.text} ", Style(color=COMBO_TEAL, bold=True))
        return content

    def __rich__(self) -> Text:
        return self.render()


class ResultSummary:
    """Final panel shown when an exercise completes or fails."""

    def __init__(self, state: ExerciseState):
        self.state = state

    def render(self) -> Panel:
        score = self.state.score
        completed = self.state.status == ExerciseStatus.COMPLETED

        stats = Table(
            show_header=False,
            border_style=MUTED_GRAY,
            box=box.SIMPLE,
        )
        stats.add_column("Label", style=Style(color=MUTED_GRAY))
        stats.add_column("Value", justify="right")

        stats.add_row("Final Score", Text(str(score.score), style=Style(color=SCORE_GOLD, bold=True)))
        stats.add_row("Time Remaining", format_time(self.state.time_remaining))
        stats.add_row("Max Combo", f"x{score.max_combo_reached:.1f}")
        stats.add_row(
            "Correct",
            Text(str(score.correct_placements), style=Style(color=TERMINAL_GREEN)),
        )
        stats.add_row(
            "Incorrect",
            Text(str(score.incorrect_placements), style=Style(color=ERROR_RED)),
        )

        header = create_completed_header() if completed else create_failed_header()

        return Panel(
            Columns([Align.center(header), Align.center(stats)], align="center"),
            title="Result",
            border_style=TERMINAL_GREEN if completed else ERROR_RED,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()
