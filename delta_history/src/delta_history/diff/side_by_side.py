"""Side-by-side projection of a parsed unified diff."""

from __future__ import annotations

from dataclasses import dataclass, field

from .parser import DiffLine, DiffLineType

RowSource = tuple[int | None, int | None]


@dataclass
class SideBySideDiff:
    """Two equal-length columns of optional lines plus their unified origins.

    ``row_sources[r]`` holds the unified line indices that ended up in row
    ``r`` on the old and new side respectively.
    """

    old_lines: list[DiffLine | None] = field(default_factory=list)
    new_lines: list[DiffLine | None] = field(default_factory=list)
    row_sources: list[RowSource] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.old_lines)

    def __len__(self) -> int:
        return len(self.old_lines)

    def line_index_at(self, row: int) -> int | None:
        """Unified line index shown in ``row``, preferring the old side."""
        if not 0 <= row < len(self.row_sources):
            return None
        old_src, new_src = self.row_sources[row]
        return old_src if old_src is not None else new_src

    def row_of(self, line_index: int) -> int | None:
        """Row displaying the unified line ``line_index``."""
        for row, (old_src, new_src) in enumerate(self.row_sources):
            if old_src == line_index or new_src == line_index:
                return row
        return None

    def max_line_width(self) -> int:
        widths = [len(line.text) for line in self.old_lines + self.new_lines if line is not None]
        return max(widths, default=0)


def project(lines: list[DiffLine]) -> SideBySideDiff:
    """Map unified lines onto old/new columns, then pair deletions with additions."""
    result = SideBySideDiff()

    for index, line in enumerate(lines):
        if line.kind is DiffLineType.DELETION:
            result.old_lines.append(line)
            result.new_lines.append(None)
            result.row_sources.append((index, None))
        elif line.kind is DiffLineType.ADDITION:
            result.old_lines.append(None)
            result.new_lines.append(line)
            result.row_sources.append((None, index))
        else:
            result.old_lines.append(line)
            result.new_lines.append(line)
            result.row_sources.append((index, index))

    _compact(result)
    return result


def _is_lone_deletion(diff: SideBySideDiff, row: int) -> bool:
    left = diff.old_lines[row]
    return left is not None and left.kind is DiffLineType.DELETION and diff.new_lines[row] is None


def _is_lone_addition(diff: SideBySideDiff, row: int) -> bool:
    right = diff.new_lines[row]
    return diff.old_lines[row] is None and right is not None and right.kind is DiffLineType.ADDITION


def _compact(diff: SideBySideDiff) -> None:
    """Greedy pairing: a lone deletion takes the first addition right after it."""
    row = 0
    while row < len(diff.old_lines):
        nxt = row + 1
        if _is_lone_deletion(diff, row) and nxt < len(diff.old_lines) and _is_lone_addition(diff, nxt):
            diff.new_lines[row], diff.new_lines[nxt] = diff.new_lines[nxt], None
            diff.row_sources[row] = (diff.row_sources[row][0], diff.row_sources[nxt][1])
            # The addition's old slot was already empty, so the row is now blank
            del diff.old_lines[nxt]
            del diff.new_lines[nxt]
            del diff.row_sources[nxt]
        row += 1
