"""In-diff regex search for Delta History.

Search is always case-insensitive and only looks at content lines
(additions, deletions and context). Match offsets are character offsets
into the raw line, marker included, so they can be laid directly over the
rendered spans by :func:`highlight_segments`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from rich.segment import Segment
from rich.style import Style

from ..utils.error_handling import log_search_error
from .parser import DiffLine

MATCH_STYLE = Style(color="black", bgcolor="yellow")
CURRENT_MATCH_STYLE = Style(color="black", bgcolor="dark_orange", bold=True)


@dataclass(frozen=True)
class SearchMatch:
    """A single match inside a diff line."""

    line_index: int
    char_start: int
    char_end: int
    text: str


def compile_pattern(query: str) -> re.Pattern | None:
    """Compile ``query`` case-insensitively; None when empty or invalid."""
    if not query:
        return None
    try:
        return re.compile(query, re.IGNORECASE)
    except re.error as e:
        log_search_error(query, e)
        return None


def find_matches(lines: Sequence[DiffLine], pattern: re.Pattern | None) -> list[SearchMatch]:
    """All matches on content lines, ordered by position.

    A zero-width match (``^``, ``\\b``) is widened to the character it sits on so
    it can be highlighted; at the end of a line it stays empty.
    """
    if pattern is None:
        return []
    matches: list[SearchMatch] = []
    for index, line in enumerate(lines):
        if not line.kind.is_content:
            continue
        for m in pattern.finditer(line.text):
            start, end = m.span()
            if start == end:
                end = min(start + 1, len(line.text))
            matches.append(SearchMatch(index, start, end, line.text[start:end]))
    return matches


class SearchEngine:
    """Caches the compiled pattern so it is rebuilt only when the query changes."""

    def __init__(self) -> None:
        self._query: str | None = None
        self._pattern: re.Pattern | None = None

    @property
    def pattern(self) -> re.Pattern | None:
        return self._pattern

    def compile(self, query: str) -> re.Pattern | None:
        if query != self._query:
            self._query = query
            self._pattern = compile_pattern(query)
        return self._pattern

    def search(self, lines: Sequence[DiffLine], query: str) -> list[SearchMatch]:
        return find_matches(lines, self.compile(query))


@dataclass
class DiffSearchState:
    """State of one search session over the current diff.

    While ``is_input_mode`` is set the user is still typing the query and
    results update on every keystroke.
    """

    query: str = ""
    is_input_mode: bool = True
    results: list[SearchMatch] = field(default_factory=list)
    current: int | None = None
    engine: SearchEngine = field(default_factory=SearchEngine, repr=False)
    _by_line: dict[int, list[int]] = field(default_factory=dict, repr=False)

    @property
    def pattern(self) -> re.Pattern | None:
        return self.engine.pattern

    @property
    def current_match(self) -> SearchMatch | None:
        if self.current is None or not self.results:
            return None
        return self.results[self.current]

    @property
    def is_active(self) -> bool:
        """Confirmed search with at least one result (n/N navigate matches)."""
        return not self.is_input_mode and bool(self.results)

    def update(self, lines: Sequence[DiffLine]) -> None:
        """Re-run the query against ``lines``; clears the current match."""
        self.results = self.engine.search(lines, self.query)
        self.current = None
        self._by_line = {}
        for i, m in enumerate(self.results):
            self._by_line.setdefault(m.line_index, []).append(i)

    def set_query(self, query: str, lines: Sequence[DiffLine]) -> None:
        self.query = query
        self.update(lines)

    def append_char(self, char: str, lines: Sequence[DiffLine]) -> None:
        self.set_query(self.query + char, lines)

    def delete_char(self, lines: Sequence[DiffLine]) -> None:
        self.set_query(self.query[:-1], lines)

    def confirm(self) -> SearchMatch | None:
        """Leave input mode and jump to the first match, if any."""
        self.is_input_mode = False
        if not self.results:
            self.current = None
            return None
        self.current = 0
        return self.results[0]

    def next_match(self) -> SearchMatch | None:
        if not self.results:
            return None
        self.current = 0 if self.current is None else (self.current + 1) % len(self.results)
        return self.results[self.current]

    def previous_match(self) -> SearchMatch | None:
        if not self.results:
            return None
        if self.current is None or self.current == 0:
            self.current = len(self.results) - 1
        else:
            self.current -= 1
        return self.results[self.current]

    def matches_on_line(self, line_index: int) -> list[SearchMatch]:
        return [self.results[i] for i in self._by_line.get(line_index, ())]

    def line_has_current_match(self, line_index: int) -> bool:
        match = self.current_match
        return match is not None and match.line_index == line_index

    def status_text(self) -> str:
        if self.is_input_mode:
            count = len(self.results)
            return f"/{self.query}  ({count} match{'es' if count != 1 else ''})"
        if not self.results:
            return f"/{self.query}  No matches"
        position = (self.current or 0) + 1
        return f"/{self.query}  Match {position}/{len(self.results)}"


def highlight_segments(
    segments: Sequence[Segment],
    matches: Sequence[SearchMatch],
    *,
    offset: int = 0,
    current: SearchMatch | None = None,
    match_style: Style = MATCH_STYLE,
    current_style: Style = CURRENT_MATCH_STYLE,
) -> list[Segment]:
    """Overlay search matches on already-styled spans.

    Only spans that overlap a match are split, into pre/match/post pieces;
    everything else passes through untouched so syntax colors survive.

    Args:
        segments: Styled spans whose concatenated text is the line (from ``offset``)
        matches: Matches on this line, in order
        offset: Raw-line column at which the first segment begins
        current: The current match, drawn with ``current_style``
        match_style: Style layered over ordinary matches
        current_style: Style layered over the current match
    """
    if not matches:
        return list(segments)

    result: list[Segment] = []
    pos = offset
    for seg in segments:
        start, end = pos, pos + len(seg.text)
        pos = end
        overlapping = [m for m in matches if m.char_start < end and m.char_end > start]
        if not overlapping:
            result.append(seg)
            continue

        base = seg.style or Style()
        cursor = start
        for m in overlapping:
            a = max(m.char_start, start)
            b = min(m.char_end, end)
            if a > cursor:
                result.append(Segment(seg.text[cursor - start:a - start], seg.style))
            overlay = current_style if m == current else match_style
            result.append(Segment(seg.text[a - start:b - start], base + overlay))
            cursor = b
        if cursor < end:
            result.append(Segment(seg.text[cursor - start:], seg.style))
    return result
