"""Tests for scroll, cursor and split state."""

from delta_history.state.viewport import (
    DEFAULT_SPLIT,
    H_SCROLL_STEP,
    SPLIT_MAX,
    SPLIT_MIN,
    LayoutMode,
    ViewportState,
)


class TestScrolling:
    def test_scenario_d_scroll_stops_at_max(self):
        """100 lines with 20 visible can scroll to line 80 and no further."""
        viewport = ViewportState(fixed_visible_lines=20)
        for _ in range(85):
            viewport.scroll_down(100)
        assert viewport.v_scroll == 80

    def test_scroll_up_stops_at_zero(self):
        viewport = ViewportState()
        viewport.scroll_up()
        assert viewport.v_scroll == 0

    def test_short_diff_never_scrolls(self):
        viewport = ViewportState(fixed_visible_lines=20)
        viewport.scroll_down(5)
        viewport.page_down(5)
        assert viewport.v_scroll == 0

    def test_page_down_and_up(self):
        viewport = ViewportState(term_w=80, term_h=43)
        page = viewport.page_size()
        assert page > 0
        viewport.page_down(1000)
        assert viewport.v_scroll == page
        viewport.page_up()
        viewport.page_up()
        assert viewport.v_scroll == 0

    def test_horizontal_scroll_bounds(self):
        viewport = ViewportState()
        viewport.scroll_diff_right(10)
        viewport.scroll_diff_right(10)
        viewport.scroll_diff_right(10)
        assert viewport.h_scroll_diff == 2 * H_SCROLL_STEP
        viewport.scroll_diff_left()
        viewport.scroll_diff_left()
        viewport.scroll_diff_left()
        assert viewport.h_scroll_diff == 0

    def test_commit_scroll_independent_of_diff(self):
        viewport = ViewportState()
        viewport.scroll_commits_right(100)
        assert viewport.h_scroll_commits == H_SCROLL_STEP
        assert viewport.h_scroll_diff == 0


class TestCursor:
    def test_cursor_moves_window(self):
        viewport = ViewportState(fixed_visible_lines=5)
        for _ in range(7):
            viewport.cursor_down(100)
        assert viewport.cursor_line == 7
        assert viewport.v_scroll == 3

    def test_cursor_stops_at_last_line(self):
        viewport = ViewportState(fixed_visible_lines=5)
        for _ in range(10):
            viewport.cursor_down(3)
        assert viewport.cursor_line == 2

    def test_cursor_up_scrolls_back(self):
        viewport = ViewportState(fixed_visible_lines=5, v_scroll=10, cursor_line=10)
        viewport.cursor_up()
        assert viewport.cursor_line == 9
        assert viewport.v_scroll == 9

    def test_center_on_far_target(self):
        viewport = ViewportState(fixed_visible_lines=10)
        viewport.center_on(50, 100)
        assert viewport.cursor_line == 50
        assert viewport.v_scroll == 45

    def test_center_on_visible_target_keeps_scroll(self):
        viewport = ViewportState(fixed_visible_lines=10, v_scroll=20)
        viewport.center_on(25, 100)
        assert viewport.v_scroll == 20

    def test_center_near_end_is_clamped(self):
        viewport = ViewportState(fixed_visible_lines=10)
        viewport.center_on(99, 100)
        assert viewport.v_scroll == 90


class TestSizing:
    def test_visible_lines_depend_on_layout(self):
        viewport = ViewportState(term_w=160, term_h=41)
        unified = viewport.visible_lines(LayoutMode.UNIFIED)
        side = viewport.visible_lines(LayoutMode.SIDE_BY_SIDE)
        assert unified == int(40 * (1 - DEFAULT_SPLIT)) - 2
        assert side == int(40 * 0.7) - 2

    def test_tiny_terminal_has_no_negative_sizes(self):
        viewport = ViewportState(term_w=10, term_h=2)
        assert viewport.visible_lines() == 0
        assert viewport.page_size() == 0

    def test_resize_pulls_back_horizontal_scroll(self):
        viewport = ViewportState(h_scroll_diff=200, h_scroll_commits=30)
        viewport.resize(100, 30)
        assert viewport.h_scroll_diff == 90
        assert viewport.h_scroll_commits == 30

    def test_clamp(self):
        viewport = ViewportState(fixed_visible_lines=10, v_scroll=50, cursor_line=70)
        viewport.clamp(20)
        assert viewport.v_scroll == 10
        assert viewport.cursor_line == 19

    def test_clamp_empty_diff(self):
        viewport = ViewportState(v_scroll=5, cursor_line=5)
        viewport.clamp(0)
        assert viewport.v_scroll == 0
        assert viewport.cursor_line == 0

    def test_split_ratio_bounds(self):
        viewport = ViewportState()
        for _ in range(20):
            viewport.increase_split()
        assert viewport.split_ratio == SPLIT_MAX
        for _ in range(20):
            viewport.decrease_split()
        assert viewport.split_ratio == SPLIT_MIN

    def test_reset_diff_scroll(self):
        viewport = ViewportState(v_scroll=4, h_scroll_diff=8, cursor_line=6, h_scroll_commits=4)
        viewport.reset_diff_scroll()
        assert (viewport.v_scroll, viewport.h_scroll_diff, viewport.cursor_line) == (0, 0, 0)
        assert viewport.h_scroll_commits == 4
