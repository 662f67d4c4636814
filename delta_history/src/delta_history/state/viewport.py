"""Scroll, cursor and split state for the commit list and diff panels.

Every transition clamps instead of raising. Sizes are derived from the
terminal dimensions on each call so a resize is picked up immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SPLIT_MIN = 0.20
SPLIT_MAX = 0.70
SPLIT_STEP = 0.05
DEFAULT_SPLIT = 0.40
H_SCROLL_STEP = 4
SIDE_BY_SIDE_DIFF_SHARE = 0.7


class LayoutMode(str, Enum):
    AUTO = "auto"
    UNIFIED = "unified"
    SIDE_BY_SIDE = "side-by-side"


@dataclass
class ViewportState:
    term_w: int = 80
    term_h: int = 24
    split_ratio: float = DEFAULT_SPLIT
    v_scroll: int = 0
    h_scroll_diff: int = 0
    h_scroll_commits: int = 0
    cursor_line: int = 0
    layout: LayoutMode = LayoutMode.UNIFIED
    # Measured diff panel height, set by the screen; overrides the terminal estimate
    fixed_visible_lines: int | None = None

    # Sizing

    def visible_lines(self, layout: LayoutMode | None = None) -> int:
        """Diff rows that fit on screen for the (effective) layout."""
        if self.fixed_visible_lines is not None:
            return max(0, self.fixed_visible_lines)
        layout = layout or self.layout
        body = self.term_h - 1
        if layout is LayoutMode.SIDE_BY_SIDE:
            rows = int(body * SIDE_BY_SIDE_DIFF_SHARE) - 2
        else:
            rows = int(body * (1 - self.split_ratio)) - 2
        return max(0, rows)

    def page_size(self) -> int:
        diff_height = int((self.term_h - 3) * (1 - self.split_ratio))
        return max(0, diff_height - 2) // 2

    def _visible(self, visible_lines: int | None) -> int:
        return self.visible_lines() if visible_lines is None else max(0, visible_lines)

    def max_scroll(self, total_lines: int, visible_lines: int | None = None) -> int:
        return max(0, total_lines - self._visible(visible_lines))

    # Vertical scrolling

    def scroll_up(self) -> None:
        self.v_scroll = max(0, self.v_scroll - 1)

    def scroll_down(self, total_lines: int, visible_lines: int | None = None) -> None:
        if self.v_scroll < self.max_scroll(total_lines, visible_lines):
            self.v_scroll += 1

    def page_up(self) -> None:
        self.v_scroll = max(0, self.v_scroll - self.page_size())

    def page_down(self, total_lines: int, visible_lines: int | None = None) -> None:
        self.v_scroll = min(self.v_scroll + self.page_size(), self.max_scroll(total_lines, visible_lines))

    # Horizontal scrolling

    def scroll_diff_left(self) -> None:
        self.h_scroll_diff = max(0, self.h_scroll_diff - H_SCROLL_STEP)

    def scroll_diff_right(self, max_width: int) -> None:
        if self.h_scroll_diff + H_SCROLL_STEP < max_width:
            self.h_scroll_diff += H_SCROLL_STEP

    def scroll_commits_left(self) -> None:
        self.h_scroll_commits = max(0, self.h_scroll_commits - H_SCROLL_STEP)

    def scroll_commits_right(self, max_width: int) -> None:
        if self.h_scroll_commits + H_SCROLL_STEP < max_width:
            self.h_scroll_commits += H_SCROLL_STEP

    # Cursor

    def cursor_up(self, visible_lines: int | None = None) -> None:
        if self.cursor_line > 0:
            self.cursor_line -= 1
            self.ensure_cursor_visible(visible_lines)

    def cursor_down(self, total_lines: int, visible_lines: int | None = None) -> None:
        if self.cursor_line + 1 < total_lines:
            self.cursor_line += 1
            self.ensure_cursor_visible(visible_lines)

    def ensure_cursor_visible(self, visible_lines: int | None = None) -> None:
        """Scroll the minimum amount needed to show the cursor."""
        visible = self._visible(visible_lines)
        if self.cursor_line < self.v_scroll:
            self.v_scroll = self.cursor_line
        elif visible > 0 and self.cursor_line >= self.v_scroll + visible:
            self.v_scroll = self.cursor_line - visible + 1

    def center_on(self, target: int, total_lines: int | None = None, visible_lines: int | None = None) -> None:
        """Move the cursor to ``target``, centering it when it lies below the window."""
        visible = self._visible(visible_lines)
        if target < self.v_scroll:
            self.v_scroll = target
        elif target >= self.v_scroll + visible:
            self.v_scroll = max(0, target - visible // 2)
        if total_lines is not None:
            self.v_scroll = min(self.v_scroll, self.max_scroll(total_lines, visible))
        self.cursor_line = target

    # Terminal and layout

    def resize(self, width: int, height: int, total_lines: int | None = None) -> None:
        self.term_w = width
        self.term_h = height
        if self.h_scroll_diff > width:
            self.h_scroll_diff = max(0, width - 10)
        if self.h_scroll_commits > width:
            self.h_scroll_commits = max(0, width - 10)
        if total_lines is not None:
            self.clamp(total_lines)

    def clamp(self, total_lines: int) -> None:
        """Pull scroll and cursor back inside a diff of ``total_lines`` rows."""
        self.v_scroll = min(self.v_scroll, self.max_scroll(total_lines))
        self.cursor_line = max(0, min(self.cursor_line, total_lines - 1))

    def increase_split(self) -> None:
        self.split_ratio = round(min(SPLIT_MAX, self.split_ratio + SPLIT_STEP), 2)

    def decrease_split(self) -> None:
        self.split_ratio = round(max(SPLIT_MIN, self.split_ratio - SPLIT_STEP), 2)

    def reset_diff_scroll(self) -> None:
        self.v_scroll = 0
        self.h_scroll_diff = 0
        self.cursor_line = 0
