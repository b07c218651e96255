"""Building and shuffling the fragment set for a code stacking exercise."""

import random

from exercises.config import SplitMode
from exercises.errors import EmptySourceError
from models import Fragment


def get_indentation(line: str) -> int:
    """Count leading whitespace characters (tabs count as one)."""
    return len(line) - len(line.lstrip())


def _make_fragment(index: int, content: str, line_number: int) -> Fragment:
    return Fragment(
        id=f"block-{index}",
        content=content,
        indentation_level=get_indentation(content),
        original_index=index,
        line_number=line_number,
    )


def _split_lines(lines: list[str]) -> list[tuple[str, int]]:
    return [
        (line, number)
        for number, line in enumerate(lines, start=1)
        if line.strip()
    ]


def _split_statements(lines: list[str]) -> list[tuple[str, int]]:
    """Group lines into statements.

    Brace lines stand alone, a line ending with ';' closes the pending
    statement, anything else is accumulated. However a statement is closed,
    it keeps the indentation and line number of its first line.
    """
    pieces: list[tuple[str, int]] = []
    pending: list[str] = []
    pending_start = 0

    def flush() -> None:
        nonlocal pending
        if pending:
            pieces.append(("\n".join(pending), pending_start))
            pending = []

    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("}") or stripped.endswith("{"):
            flush()
            pieces.append((line, number))
        else:
            if not pending:
                pending_start = number
            pending.append(line)
            if stripped.endswith(";"):
                flush()

    flush()
    return pieces


def build_fragments(
    source_code: str,
    split_mode: SplitMode = SplitMode.LINE,
) -> list[Fragment]:
    """Split source code into ordered fragments.

    Args:
        source_code: The code the learner has to reconstruct.
        split_mode: Cut per line or per statement.

    Returns:
        Fragments in source order; ``original_index`` runs from 0.

    Raises:
        EmptySourceError: If the source has no non-blank lines.
    """
    lines = source_code.splitlines()

    if split_mode == SplitMode.STATEMENT:
        pieces = _split_statements(lines)
    else:
        pieces = _split_lines(lines)

    if not pieces:
        raise EmptySourceError()

    return [
        _make_fragment(index, content, line_number)
        for index, (content, line_number) in enumerate(pieces)
    ]


def shuffle(
    fragments: list[Fragment],
    rng: random.Random | None = None,
) -> list[Fragment]:
    """Return a uniformly random permutation (Fisher-Yates).

    The input list is left untouched.
    """
    rng = rng or random.Random()
    shuffled = list(fragments)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def shuffle_unsolved(
    fragments: list[Fragment],
    rng: random.Random | None = None,
    max_attempts: int = 10,
) -> list[Fragment]:
    """Shuffle, retrying while the result is still in source order.

    Gives up after ``max_attempts`` and returns the last shuffle.
    """
    rng = rng or random.Random()
    source_order = [fragment.id for fragment in fragments]

    shuffled = shuffle(fragments, rng)
    attempts = 1
    while (
        len(fragments) > 1
        and attempts < max_attempts
        and [fragment.id for fragment in shuffled] == source_order
    ):
        shuffled = shuffle(fragments, rng)
        attempts += 1
    return shuffled
