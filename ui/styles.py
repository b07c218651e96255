from rich.theme import Theme
from rich.style import Style
from rich.text import Text

TERMINAL_GREEN = "#00FF00"
SCORE_GOLD = "#FFD93D"
COMBO_TEAL = "#4ECDC4"
ERROR_RED = "#FF6B6B"
MUTED_GRAY = "#666666"
TEXT_LIGHT = "#CCCCCC"

DEFAULT_THEME = Theme(
    {
        "primary": Style(color=TERMINAL_GREEN, bold=True),
        "score": Style(color=SCORE_GOLD, bold=True),
        "combo": Style(color=COMBO_TEAL, bold=True),
        "high_combo": Style(color=ERROR_RED, bold=True),
        "success": Style(color=TERMINAL_GREEN),
        "error": Style(color=ERROR_RED, bold=True),
        "muted": Style(color=MUTED_GRAY),
        "code": Style(color=TEXT_LIGHT),
    }
)


def get_time_style(time_remaining: int) -> Style:
    """Timer turns red in the last ten seconds."""
    if time_remaining < 10:
        return Style(color=ERROR_RED, bold=True)
    return Style(color=TEXT_LIGHT)


def get_combo_style(combo: float) -> Style:
    if combo >= 2.0:
        return Style(color=ERROR_RED, bold=True)
    if combo > 1.2:
        return Style(color=COMBO_TEAL, bold=True)
    return Style(color=MUTED_GRAY)


def create_completed_header() -> Text:
    header = Text()
    header.append("✓ ", Style(color=TERMINAL_GREEN, bold=True))
    header.append("Challenge Completed!", Style(color=TERMINAL_GREEN, bold=True))
    return header


def create_failed_header() -> Text:
    header = Text()
    header.append("✗ ", Style(color=ERROR_RED, bold=True))
    header.append("Time's Up!", Style(color=ERROR_RED, bold=True))
    return header
