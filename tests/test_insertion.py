"""Unit tests for pointer-based insertion index resolution."""

from exercises import resolve_insertion_index
from models import BlockPosition


def make_positions(*centers: float) -> list[BlockPosition]:
    return [BlockPosition(index=i, center_y=y) for i, y in enumerate(centers)]


class TestResolveInsertionIndex:
    """Tests for the nearest-center rule."""

    def test_empty_area_inserts_at_zero(self):
        assert resolve_insertion_index([], 123.0) == 0

    def test_above_single_block_inserts_before(self):
        assert resolve_insertion_index(make_positions(50), 10) == 0

    def test_below_single_block_inserts_after(self):
        assert resolve_insertion_index(make_positions(50), 90) == 1

    def test_exactly_on_center_inserts_after(self):
        assert resolve_insertion_index(make_positions(50), 50) == 1

    def test_nearest_block_decides(self):
        positions = make_positions(20, 60, 100)

        assert resolve_insertion_index(positions, 55) == 1
        assert resolve_insertion_index(positions, 65) == 2
        assert resolve_insertion_index(positions, 95) == 2
        assert resolve_insertion_index(positions, 140) == 3

    def test_far_above_everything(self):
        assert resolve_insertion_index(make_positions(20, 60, 100), -500) == 0

    def test_tie_goes_to_first_position(self):
        """Midway between two centers the earlier block wins, so insert after it."""
        positions = make_positions(20, 60)

        assert resolve_insertion_index(positions, 40) == 1

    def test_tie_respects_iteration_order(self):
        positions = [
            BlockPosition(index=1, center_y=60),
            BlockPosition(index=0, center_y=20),
        ]

        # 40 is equidistant; index 1 comes first and 40 is above its center.
        assert resolve_insertion_index(positions, 40) == 1

    def test_result_stays_in_range(self):
        positions = make_positions(10, 30, 50, 70)

        for pointer_y in range(-100, 200, 7):
            assert 0 <= resolve_insertion_index(positions, pointer_y) <= len(positions)
