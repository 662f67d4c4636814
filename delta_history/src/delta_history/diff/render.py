"""Turn parsed diff lines into styled rows for the visible window.

The renderer owns every color decision; the rest of the diff package only
deals in line indices and character offsets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from .parser import DiffLine, DiffLineType
from .search import DiffSearchState, highlight_segments
from .side_by_side import SideBySideDiff
from .syntax import SyntaxHighlighter

KIND_STYLES: dict[DiffLineType, Style] = {
    DiffLineType.HEADER: Style(color="bright_blue", bold=True),
    DiffLineType.HUNK_HEADER: Style(color="cyan"),
    DiffLineType.ADDITION: Style(color="green"),
    DiffLineType.DELETION: Style(color="red"),
    DiffLineType.CONTEXT: Style(),
}
LINE_BACKGROUNDS: dict[DiffLineType, Style] = {
    DiffLineType.ADDITION: Style(bgcolor="#0f2f1a"),
    DiffLineType.DELETION: Style(bgcolor="#3a1418"),
}
META_STYLE = Style(color="bright_black")
GUTTER_STYLE = Style(color="bright_black")
CURSOR_STYLE = Style(bgcolor="grey23")
EMPTY_CELL_STYLE = Style(color="grey30")


@dataclass
class RenderRow:
    """One visible row: styled spans plus flags the widget may decorate."""

    segments: list[Segment] = field(default_factory=list)
    is_cursor_row: bool = False
    has_current_match: bool = False

    @property
    def plain(self) -> str:
        return "".join(s.text for s in self.segments)

    def to_text(self) -> Text:
        text = Text(no_wrap=True, overflow="crop")
        for seg in self.segments:
            text.append(seg.text, seg.style)
        return text


def style_line(line: DiffLine, highlighter: SyntaxHighlighter | None, file_path: str | None) -> list[Segment]:
    """Styled spans covering the whole raw line, marker included."""
    kind_style = KIND_STYLES[line.kind]
    if not line.has_marker:
        style = kind_style if line.kind is not DiffLineType.CONTEXT else META_STYLE
        return [Segment(line.text, style)]

    marker, body = line.text[:1], line.text[1:]
    background = LINE_BACKGROUNDS.get(line.kind)
    if highlighter is not None:
        body_segments = highlighter.highlight(body, file_path, kind_style)
    else:
        body_segments = [Segment(body, kind_style)]
    if background is not None:
        body_segments = [Segment(s.text, (s.style or Style()) + background) for s in body_segments]
        marker_style = kind_style + background
    else:
        marker_style = kind_style
    return [Segment(marker, marker_style), *body_segments]


def crop_segments(segments: Sequence[Segment], start: int, width: int | None = None) -> list[Segment]:
    """Drop the first ``start`` characters, then keep at most ``width``."""
    result: list[Segment] = []
    skip = max(0, start)
    remaining = width
    for seg in segments:
        text = seg.text
        if skip:
            if len(text) <= skip:
                skip -= len(text)
                continue
            text = text[skip:]
            skip = 0
        if remaining is not None:
            if remaining <= 0:
                break
            text = text[:remaining]
            remaining -= len(text)
        if text:
            result.append(Segment(text, seg.style))
    return result


def _with_cursor(segments: list[Segment]) -> list[Segment]:
    return [Segment(s.text, (s.style or Style()) + CURSOR_STYLE) for s in segments]


def _number(value: int | None, width: int = 5) -> str:
    return f"{value:>{width}}" if value is not None else " " * width


class DiffRenderer:
    """Builds :class:`RenderRow` lists for the unified and side-by-side panels."""

    def __init__(
        self,
        highlighter: SyntaxHighlighter | None = None,
        file_path: str | None = None,
        max_line_chars: int | None = None,
    ):
        self.highlighter = highlighter
        self.file_path = file_path
        self.max_line_chars = max_line_chars

    def _line_segments(
        self, line: DiffLine, index: int | None, search: DiffSearchState | None
    ) -> tuple[list[Segment], bool]:
        segments = style_line(line, self.highlighter, self.file_path)
        if self.max_line_chars is not None:
            segments = crop_segments(segments, 0, self.max_line_chars)
        has_current = False
        if search is not None and index is not None:
            matches = search.matches_on_line(index)
            if matches:
                segments = highlight_segments(segments, matches, current=search.current_match)
                has_current = search.line_has_current_match(index)
        return segments, has_current

    def unified_rows(
        self,
        lines: Sequence[DiffLine],
        start: int,
        count: int,
        *,
        cursor_line: int | None = None,
        search: DiffSearchState | None = None,
        h_scroll: int = 0,
        width: int | None = None,
    ) -> list[RenderRow]:
        rows: list[RenderRow] = []
        gutter_width = 12
        content_width = None if width is None else max(0, width - gutter_width)
        for index in range(max(0, start), min(len(lines), start + max(0, count))):
            line = lines[index]
            segments, has_current = self._line_segments(line, index, search)
            segments = crop_segments(segments, h_scroll, content_width)
            gutter = Segment(f"{_number(line.old_line_no)} {_number(line.new_line_no)}│", GUTTER_STYLE)
            row = RenderRow([gutter, *segments], index == cursor_line, has_current)
            if row.is_cursor_row:
                row.segments = _with_cursor(row.segments)
            rows.append(row)
        return rows

    def side_rows(
        self,
        diff: SideBySideDiff,
        side: str,
        start: int,
        count: int,
        *,
        cursor_line: int | None = None,
        search: DiffSearchState | None = None,
        h_scroll: int = 0,
        width: int | None = None,
    ) -> list[RenderRow]:
        """Rows for one column; ``side`` is ``"old"`` or ``"new"``."""
        column = diff.old_lines if side == "old" else diff.new_lines
        source_slot = 0 if side == "old" else 1
        gutter_width = 6
        content_width = None if width is None else max(0, width - gutter_width)
        rows: list[RenderRow] = []
        for row_index in range(max(0, start), min(len(column), start + max(0, count))):
            line = column[row_index]
            if line is None:
                segments = [Segment(" " * 5 + "│", GUTTER_STYLE)]
                row = RenderRow(segments, row_index == cursor_line, False)
            else:
                source = diff.row_sources[row_index][source_slot]
                body, has_current = self._line_segments(line, source, search)
                body = crop_segments(body, h_scroll, content_width)
                number = line.old_line_no if side == "old" else line.new_line_no
                gutter = Segment(f"{_number(number)}│", GUTTER_STYLE)
                row = RenderRow([gutter, *body], row_index == cursor_line, has_current)
            if row.is_cursor_row:
                row.segments = _with_cursor(row.segments)
            rows.append(row)
        return rows


def rows_to_text(rows: Sequence[RenderRow]) -> Text:
    """Join rendered rows into one Rich Text for a Static widget."""
    text = Text(no_wrap=True, overflow="crop")
    for i, row in enumerate(rows):
        if i:
            text.append("\n")
        text.append_text(row.to_text())
    return text
