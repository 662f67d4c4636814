from rich.text import Text

from delta_history.git.models import FileStatus, GitFile
from delta_history.picker import MATCH_HIGHLIGHT, FilePickerState, matched_offsets

FILES = [
    GitFile("README.md"),
    GitFile("src/app/main.py", FileStatus.MODIFIED),
    GitFile("src/app/models.py"),
    GitFile("tests/test_main.py", FileStatus.UNTRACKED),
]


class TestFilePickerState:
    def test_empty_query_lists_everything_in_order(self):
        picker = FilePickerState(FILES)
        assert [f.path for f, _ in picker.filtered] == [f.path for f in FILES]
        assert picker.selected_file() == FILES[0]

    def test_query_filters_by_subsequence(self):
        picker = FilePickerState(FILES)
        for char in "main":
            picker.append_char(char)
        paths = [f.path for f, _ in picker.filtered]
        assert set(paths) == {"src/app/main.py", "tests/test_main.py"}

    def test_case_insensitive(self):
        picker = FilePickerState(FILES)
        picker.update_query("readme")
        assert [f.path for f, _ in picker.filtered] == ["README.md"]

    def test_no_match(self):
        picker = FilePickerState(FILES)
        picker.update_query("zzz")
        assert picker.filtered == []
        assert picker.selected_file() is None

    def test_scores_sorted_best_first(self):
        picker = FilePickerState(FILES)
        picker.update_query("models")
        scores = [score for _, score in picker.filtered]
        assert scores == sorted(scores, reverse=True)
        assert picker.filtered[0][0].path == "src/app/models.py"

    def test_delete_and_clear(self):
        picker = FilePickerState(FILES)
        picker.update_query("mainx")
        assert picker.filtered == []
        picker.delete_char()
        assert picker.query == "main"
        assert picker.filtered
        picker.clear_query()
        assert len(picker.filtered) == len(FILES)

    def test_selection_moves_within_bounds(self):
        picker = FilePickerState(FILES)
        picker.move_up()
        assert picker.selected == 0
        for _ in range(10):
            picker.move_down()
        assert picker.selected == len(FILES) - 1
        assert picker.selected_file() == FILES[-1]

    def test_typing_resets_selection(self):
        picker = FilePickerState(FILES)
        picker.move_down()
        picker.append_char("s")
        assert picker.selected == 0

    def test_highlight(self):
        picker = FilePickerState(FILES)
        assert picker.highlight("README.md").plain == "README.md"
        picker.update_query("rd")
        highlighted = picker.highlight("README.md")
        assert highlighted.plain == "README.md"
        assert highlighted.spans

    def test_highlight_appends_into_rich_text(self):
        """The picker list composes highlighted paths into one Rich line."""
        picker = FilePickerState([GitFile("src/app.py")])
        picker.update_query("app")
        line = Text()
        line.append("M ")
        line.append_text(picker.highlight("src/app.py"))
        assert line.plain == "M src/app.py"
        assert [(span.start, span.end) for span in line.spans if span.style == MATCH_HIGHLIGHT] == [
            (6, 7),
            (7, 8),
            (8, 9),
        ]


class TestMatchedOffsets:
    def test_leftmost_subsequence(self):
        assert matched_offsets("app", "src/app.py") == [4, 5, 6]

    def test_case_insensitive_and_spaces_ignored(self):
        assert matched_offsets("R m", "README.md") == [0, 4]

    def test_not_a_subsequence(self):
        assert matched_offsets("zz", "README.md") == []
