"""Resolve where a dropped fragment lands in the solution area."""

from models import BlockPosition


def resolve_insertion_index(positions: list[BlockPosition], pointer_y: float) -> int:
    """Find the insertion index for a drop at ``pointer_y``.

    The placed fragment whose vertical center is closest to the pointer
    decides: dropping above its center inserts before it, anything else
    inserts after it. Ties go to the first position in iteration order.
    Coordinates grow downwards, as on screen.

    Args:
        positions: ``{index, center_y}`` pairs of the placed fragments.
        pointer_y: Vertical pointer coordinate at drop time.

    Returns:
        Index in ``0..len(positions)`` inclusive.
    """
    if not positions:
        return 0

    closest = positions[0]
    closest_distance = abs(closest.center_y - pointer_y)
    for position in positions[1:]:
        distance = abs(position.center_y - pointer_y)
        if distance < closest_distance:
            closest = position
            closest_distance = distance

    if pointer_y < closest.center_y:
        return closest.index
    return closest.index + 1
