"""Tests for in-diff search: matching, navigation and highlight overlay."""

from rich.segment import Segment
from rich.style import Style

from delta_history.diff.parser import parse_diff
from delta_history.diff.search import (
    CURRENT_MATCH_STYLE,
    MATCH_STYLE,
    DiffSearchState,
    SearchEngine,
    SearchMatch,
    compile_pattern,
    find_matches,
    highlight_segments,
)


class TestFindMatches:
    def test_scenario_b_only_content_lines(self, scenario_a_diff):
        """'line' matches the deletion and both additions, never the hunk header."""
        lines = parse_diff(scenario_a_diff)
        matches = find_matches(lines, compile_pattern("line"))

        assert [m.line_index for m in matches] == [2, 3, 4]
        assert all(m.text == "line" for m in matches)
        assert matches[0].char_start == len("-old ")

    def test_case_insensitive(self):
        lines = parse_diff("@@ -1 +1 @@\n+Hello HELLO hello\n")
        assert len(find_matches(lines, compile_pattern("hello"))) == 3

    def test_headers_are_not_searched(self, sample_diff):
        lines = parse_diff(sample_diff)
        matches = find_matches(lines, compile_pattern("index|diff --git"))
        assert matches == []

    def test_zero_width_matches_cover_one_character(self, scenario_a_diff):
        lines = parse_diff(scenario_a_diff)
        matches = find_matches(lines, compile_pattern("^"))
        assert [(m.line_index, m.char_start, m.char_end, m.text) for m in matches] == [
            (1, 0, 1, " "),
            (2, 0, 1, "-"),
            (3, 0, 1, "+"),
            (4, 0, 1, "+"),
        ]

    def test_zero_width_match_at_line_end_stays_empty(self, scenario_a_diff):
        lines = parse_diff(scenario_a_diff)
        matches = find_matches(lines, compile_pattern("$"))
        assert len(matches) == 4
        assert all(m.char_start == m.char_end == len(lines[m.line_index].text) for m in matches)

    def test_invalid_pattern(self, scenario_a_diff):
        assert compile_pattern("[unclosed") is None
        assert compile_pattern("") is None
        assert find_matches(parse_diff(scenario_a_diff), None) == []

    def test_deterministic(self, sample_diff):
        lines = parse_diff(sample_diff)
        pattern = compile_pattern("line|=")
        assert find_matches(lines, pattern) == find_matches(lines, pattern)


class TestSearchEngine:
    def test_pattern_reused_until_query_changes(self):
        engine = SearchEngine()
        first = engine.compile("abc")
        assert engine.compile("abc") is first
        assert engine.compile("abd") is not first


class TestDiffSearchState:
    """Query editing and match navigation."""

    def _state(self, diff, query="line"):
        lines = parse_diff(diff)
        state = DiffSearchState()
        state.set_query(query, lines)
        return state, lines

    def test_typing_updates_results(self, scenario_a_diff):
        lines = parse_diff(scenario_a_diff)
        state = DiffSearchState()
        for char in "new":
            state.append_char(char, lines)
        assert state.query == "new"
        assert len(state.results) == 2
        state.delete_char(lines)
        assert state.query == "ne"

    def test_confirm_selects_first_match(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        match = state.confirm()
        assert not state.is_input_mode
        assert state.is_active
        assert match == state.results[0]
        assert state.current == 0

    def test_confirm_without_results(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff, "zzz")
        assert state.confirm() is None
        assert not state.is_active
        assert "No matches" in state.status_text()

    def test_next_match_wraps_around(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        state.confirm()
        for _ in range(len(state.results)):
            state.next_match()
        assert state.current == 0

    def test_previous_match_wraps_to_last(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        state.confirm()
        state.previous_match()
        assert state.current == len(state.results) - 1

    def test_next_from_no_selection_starts_at_first(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        assert state.current is None
        assert state.next_match() == state.results[0]

    def test_matches_on_line(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        state.confirm()
        assert len(state.matches_on_line(2)) == 1
        assert state.matches_on_line(0) == []
        assert state.line_has_current_match(2)
        assert not state.line_has_current_match(3)

    def test_status_text(self, scenario_a_diff):
        state, _ = self._state(scenario_a_diff)
        assert state.status_text() == "/line  (3 matches)"
        state.confirm()
        state.next_match()
        assert state.status_text() == "/line  Match 2/3"


class TestHighlightSegments:
    def test_no_matches_passes_through(self):
        segments = [Segment("abc", Style(color="red"))]
        assert highlight_segments(segments, []) == segments

    def test_splits_only_overlapping_spans(self):
        red = Style(color="red")
        blue = Style(color="blue")
        segments = [Segment("-old ", red), Segment("line", blue), Segment(" end", red)]
        match = SearchMatch(0, 5, 9, "line")

        result = highlight_segments(segments, [match])

        assert [s.text for s in result] == ["-old ", "line", " end"]
        assert result[0].style == red
        assert result[1].style == blue + MATCH_STYLE
        assert result[2].style == red

    def test_match_inside_one_span(self):
        segments = [Segment("+new line 1")]
        match = SearchMatch(0, 5, 9, "line")

        result = highlight_segments(segments, [match], current=match)

        assert [s.text for s in result] == ["+new ", "line", " 1"]
        assert result[1].style == Style() + CURRENT_MATCH_STYLE

    def test_offset_for_scrolled_segments(self):
        segments = [Segment("line 1")]
        match = SearchMatch(0, 5, 9, "line")
        result = highlight_segments(segments, [match], offset=5)
        assert [s.text for s in result] == ["line", " 1"]
