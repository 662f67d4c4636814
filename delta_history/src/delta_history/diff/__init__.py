"""Diff representation: parsing, side-by-side projection, change index and search."""

from .changes import ChangeIndex
from .parser import DiffLine, DiffLineType, parse_diff
from .search import DiffSearchState, SearchMatch, compile_pattern, find_matches, highlight_segments
from .side_by_side import SideBySideDiff, project

__all__ = [
    "ChangeIndex",
    "DiffLine",
    "DiffLineType",
    "DiffSearchState",
    "SearchMatch",
    "SideBySideDiff",
    "compile_pattern",
    "find_matches",
    "highlight_segments",
    "parse_diff",
    "project",
]
