"""Unified diff parsing for Delta History.

This module turns raw ``git diff`` output into a flat list of
:class:`DiffLine` records suitable for navigation, search and rendering.
The index of a line in the returned list is its canonical line index; every
other component (change index, search matches, side-by-side row sources,
viewport cursor) refers to lines by that index.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

HUNK_HEADER_RE = re.compile(r"@@ -(\d+),?\d* \+(\d+),?\d* @@")


class DiffLineType(Enum):
    """Classification of a single line of unified diff output."""

    HEADER = "header"
    HUNK_HEADER = "hunk_header"
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"

    @property
    def is_change(self) -> bool:
        return self in (DiffLineType.ADDITION, DiffLineType.DELETION)

    @property
    def is_content(self) -> bool:
        """True for lines carrying file content (searchable lines)."""
        return self in (DiffLineType.ADDITION, DiffLineType.DELETION, DiffLineType.CONTEXT)


@dataclass(frozen=True)
class DiffLine:
    """One line of a parsed diff.

    ``old_line_no`` is set for deletions and context lines, ``new_line_no``
    for additions and context lines. Headers carry neither.
    """

    kind: DiffLineType
    text: str
    old_line_no: int | None = None
    new_line_no: int | None = None

    @property
    def is_change(self) -> bool:
        return self.kind.is_change

    @property
    def has_marker(self) -> bool:
        """Whether the first character is a diff marker (``+``, ``-`` or space)."""
        if self.kind is DiffLineType.ADDITION or self.kind is DiffLineType.DELETION:
            return True
        return self.kind is DiffLineType.CONTEXT and self.text.startswith(" ")


def split_lines(raw: str) -> list[str]:
    """Split on ``\\n`` only, dropping one trailing ``\\r`` per line."""
    if not raw:
        return []
    lines = raw.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def classify_line(text: str) -> DiffLineType:
    """Classify a raw diff line by its prefix."""
    if text.startswith("diff --git") or text.startswith("index "):
        return DiffLineType.HEADER
    if text.startswith("@@"):
        return DiffLineType.HUNK_HEADER
    if text.startswith("+") and not text.startswith("+++"):
        return DiffLineType.ADDITION
    if text.startswith("-") and not text.startswith("---"):
        return DiffLineType.DELETION
    return DiffLineType.CONTEXT


def parse_hunk_header(text: str) -> tuple[int, int] | None:
    """Return ``(old_start, new_start)`` from a hunk header, or None if malformed."""
    match = HUNK_HEADER_RE.match(text)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def parse_diff(raw: str) -> list[DiffLine]:
    """Parse unified diff text into line-numbered :class:`DiffLine` records.

    Total over arbitrary input: unknown lines become context and malformed
    hunk headers leave the running counters untouched.

    Args:
        raw: Diff text as produced by ``git diff`` or ``git show --patch``

    Returns:
        One DiffLine per input line, in input order
    """
    lines: list[DiffLine] = []
    # Counters hold the last line number consumed on each side
    old_no = 0
    new_no = 0

    for text in split_lines(raw):
        kind = classify_line(text)

        if kind is DiffLineType.HEADER:
            lines.append(DiffLine(kind, text))
        elif kind is DiffLineType.HUNK_HEADER:
            starts = parse_hunk_header(text)
            if starts is not None:
                old_no = starts[0] - 1
                new_no = starts[1] - 1
            lines.append(DiffLine(kind, text))
        elif kind is DiffLineType.ADDITION:
            new_no += 1
            lines.append(DiffLine(kind, text, new_line_no=new_no))
        elif kind is DiffLineType.DELETION:
            # Deletions are stamped before the old counter moves
            lines.append(DiffLine(kind, text, old_line_no=old_no))
            old_no += 1
        else:
            old_no += 1
            new_no += 1
            lines.append(DiffLine(kind, text, old_line_no=old_no, new_line_no=new_no))

    return lines


def max_line_width(lines: list[DiffLine]) -> int:
    """Length in characters of the longest line, for horizontal scroll bounds."""
    return max((len(line.text) for line in lines), default=0)
