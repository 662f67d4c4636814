from delta_history.diff.changes import ChangeIndex
from delta_history.diff.parser import parse_diff


class TestChangeIndex:
    def test_build_collects_additions_and_deletions(self, scenario_a_diff):
        index = ChangeIndex.build(parse_diff(scenario_a_diff))
        assert index.positions == (2, 3, 4)
        assert len(index) == 3

    def test_next_and_previous(self):
        index = ChangeIndex([3, 7, 12])
        assert index.next(0) == 3
        assert index.next(3) == 7
        assert index.next(8) == 12
        assert index.previous(12) == 7
        assert index.previous(5) == 3

    def test_no_wraparound(self):
        index = ChangeIndex([3, 7])
        assert index.next(7) is None
        assert index.next(100) is None
        assert index.previous(3) is None
        assert index.previous(0) is None

    def test_next_and_previous_are_inverse_at_interior_points(self):
        positions = [2, 5, 9, 14, 20]
        index = ChangeIndex(positions)
        for p in positions[1:-1]:
            assert index.previous(index.next(p)) == p
            assert index.next(index.previous(p)) == p

    def test_empty_index(self):
        index = ChangeIndex()
        assert index.next(0) is None
        assert index.previous(10) is None
        assert index.position() is None

    def test_position_tracks_last_jump(self):
        index = ChangeIndex([1, 4, 6])
        assert index.position() is None
        index.next(0)
        assert index.position() == (1, 3)
        index.next(4)
        assert index.position() == (3, 3)

    def test_peek_leaves_position_alone(self):
        index = ChangeIndex([1, 4, 6])
        index.next(0)
        assert index.peek_next(1) == 4
        assert index.peek_previous(6) == 4
        assert index.peek_next(6) is None
        assert index.position() == (1, 3)

    def test_mark_records_only_known_changes(self):
        index = ChangeIndex([1, 4, 6])
        index.mark(4)
        assert index.position() == (2, 3)
        index.mark(5)
        assert index.position() == (2, 3)
