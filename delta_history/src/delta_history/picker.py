"""State behind the file picker: query editing, fuzzy filtering and selection."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text
from textual.fuzzy import Matcher

from .git.models import GitFile

MATCH_HIGHLIGHT = Style(color="orange1", bold=True)


def matched_offsets(query: str, candidate: str) -> list[int]:
    """Leftmost case-insensitive positions of the query characters in ``candidate``.

    Whitespace in the query is ignored. Returns an empty list when the query
    is not a subsequence of the candidate.
    """
    lowered = candidate.lower()
    offsets: list[int] = []
    position = 0
    for char in query.lower():
        if char.isspace():
            continue
        found = lowered.find(char, position)
        if found == -1:
            return []
        offsets.append(found)
        position = found + 1
    return offsets


class FilePickerState:
    """Filters repository files by a fuzzy query.

    With an empty query every file is listed in path order; otherwise only
    files the matcher scores above zero are kept, best match first.
    """

    def __init__(self, files: list[GitFile]):
        self.files = list(files)
        self.query = ""
        self.selected = 0
        self.filtered: list[tuple[GitFile, float]] = []
        self._matcher: Matcher | None = None
        self._update_filter()

    def _update_filter(self) -> None:
        if not self.query:
            self._matcher = None
            self.filtered = [(f, 1.0) for f in self.files]
        else:
            self._matcher = Matcher(self.query, case_sensitive=False)
            scored = [(f, self._matcher.match(f.path)) for f in self.files]
            scored = [item for item in scored if item[1] > 0]
            scored.sort(key=lambda item: (-item[1], item[0].path))
            self.filtered = scored
        if self.selected >= len(self.filtered):
            self.selected = max(0, len(self.filtered) - 1)

    def update_query(self, query: str) -> None:
        self.query = query
        self.selected = 0
        self._update_filter()

    def append_char(self, char: str) -> None:
        self.update_query(self.query + char)

    def delete_char(self) -> None:
        self.update_query(self.query[:-1])

    def clear_query(self) -> None:
        self.update_query("")

    def move_up(self) -> None:
        if self.selected > 0:
            self.selected -= 1

    def move_down(self) -> None:
        if self.selected + 1 < len(self.filtered):
            self.selected += 1

    def selected_file(self) -> GitFile | None:
        if 0 <= self.selected < len(self.filtered):
            return self.filtered[self.selected][0]
        return None

    def highlight(self, path: str) -> Text:
        """``path`` with the characters matched by the query emphasized."""
        text = Text(path)
        if self._matcher is None:
            return text
        for offset in matched_offsets(self.query, path):
            text.stylize(MATCH_HIGHLIGHT, offset, offset + 1)
        return text
