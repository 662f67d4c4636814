"""Session state for one Delta History run.

:class:`HistorySession` owns everything the screens display: the current
mode, the commit list, the parsed diff with its derived structures (change
index, search state, side-by-side projection), the diff cache and the
viewport. Screens call its methods in response to keys and re-render from
its attributes afterwards.

All git access goes through the ``git`` collaborator handed to the session
(a :class:`~delta_history.git.GitRepository` in the app, a fake in tests).
Collaborator errors propagate to the caller as
:class:`~delta_history.utils.errors.DeltaHistoryError`; methods fetch before
they mutate so a failure leaves the session as it was.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

from .cache import DiffCache, range_key
from .diff.changes import ChangeIndex
from .diff.parser import DiffLine, parse_diff
from .diff.search import DiffSearchState
from .diff.side_by_side import SideBySideDiff, project
from .git.history import CommitStats
from .git.models import Commit, GitFile, WorkingDirectoryStatus
from .picker import FilePickerState
from .state.viewport import LayoutMode, ViewportState
from .utils.config import config
from .utils.logger import log


class GitCollaborator(Protocol):
    def fetch_commit_history(self, file_path: str, follow_renames: bool = True,
                             first_parent: bool = False) -> list[Commit]: ...
    def get_commit_parents(self, commit_hash: str) -> list[str]: ...
    def build_rename_map(self, file_path: str) -> dict[str, str]: ...
    def fetch_diff(self, commit_hash: str, parent_hash: str | None, file_path: str,
                   context_lines: int = 3) -> str: ...
    def diff_between(self, older_hash: str, newer_hash: str, file_path: str,
                     context_lines: int = 3) -> str: ...
    def check_working_directory_status(self, file_path: str) -> WorkingDirectoryStatus: ...
    def working_directory_diff(self, file_path: str, context_lines: int = 3) -> str: ...
    def list_files(self) -> list[GitFile]: ...


class FocusedPanel(Enum):
    COMMITS = "commits"
    DIFF = "diff"


@dataclass
class FilePickerMode:
    """Choosing a file. ``previous_file`` is None when the run started here."""

    picker: FilePickerState
    previous_file: str | None = None


@dataclass
class HistoryMode:
    file_path: str
    focused_panel: FocusedPanel = FocusedPanel.COMMITS


AppMode = Union[FilePickerMode, HistoryMode]


class CopyFormat(Enum):
    FULL_SHA = "sha"
    SHORT_SHA = "short"
    MESSAGE = "message"
    AUTHOR = "author"
    DATE = "date"
    PATH = "path"


class HistorySession:
    def __init__(
        self,
        git: GitCollaborator,
        *,
        context_lines: int | None = None,
        follow_renames: bool = True,
        first_parent: bool = False,
        layout: LayoutMode = LayoutMode.AUTO,
        cache_size: int | None = None,
        side_by_side_min_width: int | None = None,
    ):
        self.git = git
        self.context_lines = config.context_lines if context_lines is None else context_lines
        self.follow_renames = follow_renames
        self.first_parent = first_parent
        self.layout_mode = LayoutMode(layout)
        self.side_by_side_min_width = side_by_side_min_width or config.side_by_side_min_width

        self.mode: AppMode | None = None
        self.came_from_file_picker = False
        self.commits: list[Commit] = []
        self.selected_index = 0
        self.rename_map: dict[str, str] = {}

        self.current_diff = ""
        self.diff_lines: list[DiffLine] = []
        self.side_by_side: SideBySideDiff | None = None
        self.changes = ChangeIndex()
        self.search: DiffSearchState | None = None
        self.cache = DiffCache(cache_size if cache_size is not None else config.cache_size)
        self.viewport = ViewportState()
        self.viewport.layout = self.effective_layout()

        self.range_start: int | None = None
        self.current_range: tuple[int, int] | None = None

        self.message: str | None = None
        self.message_is_error = False
        self._message_time: float | None = None

    # Mode handling

    @property
    def file_path(self) -> str | None:
        return self.mode.file_path if isinstance(self.mode, HistoryMode) else None

    @property
    def focused_panel(self) -> FocusedPanel | None:
        return self.mode.focused_panel if isinstance(self.mode, HistoryMode) else None

    @property
    def picker(self) -> FilePickerState | None:
        return self.mode.picker if isinstance(self.mode, FilePickerMode) else None

    def start_file_picker(self) -> None:
        """Enter the picker at startup, when no file was given."""
        self.mode = FilePickerMode(FilePickerState(self.git.list_files()))

    def switch_to_history(self, file_path: str, from_picker: bool = False) -> None:
        """Show the history of ``file_path``, discarding everything about the previous file."""
        self.mode = HistoryMode(file_path)
        self.came_from_file_picker = from_picker

        self.commits = []
        self.selected_index = 0
        self.rename_map = {}
        self._clear_diff()
        self.cache.clear()
        self.range_start = None
        self.current_range = None

        self.load_git_data()

    def switch_to_file_picker(self) -> None:
        """History to picker, remembering the file we came from."""
        if not isinstance(self.mode, HistoryMode):
            return
        previous = self.mode.file_path
        files = self.git.list_files()
        self.mode = FilePickerMode(FilePickerState(files), previous_file=previous)
        self.came_from_file_picker = False

    def return_to_file_picker(self) -> None:
        """Leave history for a fresh picker with nothing to return to."""
        if not isinstance(self.mode, HistoryMode):
            return
        self.mode = FilePickerMode(FilePickerState(self.git.list_files()))
        self.came_from_file_picker = False

    def cancel_file_picker(self) -> bool:
        """Return to the previous file's history; False when there is none."""
        if isinstance(self.mode, FilePickerMode) and self.mode.previous_file is not None:
            self.switch_to_history(self.mode.previous_file)
            return True
        return False

    def switch_focus(self) -> None:
        if isinstance(self.mode, HistoryMode):
            if self.mode.focused_panel is FocusedPanel.COMMITS:
                self.mode.focused_panel = FocusedPanel.DIFF
            else:
                self.mode.focused_panel = FocusedPanel.COMMITS

    # Loading

    def _fetch_commits(self, file_path: str) -> list[Commit]:
        """History of ``file_path`` with the working tree pseudo-commit on top when dirty."""
        commits = list(self.git.fetch_commit_history(file_path, self.follow_renames, self.first_parent))
        status = self.git.check_working_directory_status(file_path)
        if status.has_changes:
            commits.insert(0, Commit.working_directory(status))
        return commits

    def load_git_data(self) -> None:
        if not isinstance(self.mode, HistoryMode):
            return
        file_path = self.mode.file_path

        commits = self._fetch_commits(file_path)
        rename_map = self.git.build_rename_map(file_path) if self.follow_renames else {}

        self.commits = commits
        self.rename_map = rename_map
        log.info(f"[SESSION] Loaded {len(commits)} commits for {file_path}")

        if self.commits:
            self.selected_index = min(self.selected_index, len(self.commits) - 1)
            self.load_diff_for_selected_commit()

    def refresh_working_directory(self) -> None:
        """Reload history after the viewed file changed on disk, keeping the selection."""
        if not isinstance(self.mode, HistoryMode):
            return
        selected = self.selected_commit
        keep_hash = selected.hash if selected else None

        commits = self._fetch_commits(self.mode.file_path)
        index = next((i for i, c in enumerate(commits) if c.hash == keep_hash), 0)
        diff = self._fetch_commit_diff(commits[index]) if commits else ""

        self.commits = commits
        self.selected_index = index
        self.range_start = None
        self.current_range = None
        self._set_diff(diff)

    def _fetch_commit_diff(self, commit: Commit) -> str:
        file_path = self.file_path or ""
        if commit.is_working_directory:
            # Working tree diffs change under us, so they bypass the cache
            return self.git.working_directory_diff(file_path, self.context_lines)

        cached = self.cache.get(commit.hash)
        if cached is not None:
            return cached

        parents = self.git.get_commit_parents(commit.hash)
        parent = parents[0] if parents else None
        path_at_commit = self.rename_map.get(commit.hash, file_path)
        diff = self.git.fetch_diff(commit.hash, parent, path_at_commit, self.context_lines)
        self.cache.put(commit.hash, diff)
        return diff

    def load_diff_for_selected_commit(self) -> None:
        commit = self.selected_commit
        if commit is None or not isinstance(self.mode, HistoryMode):
            return
        self._set_diff(self._fetch_commit_diff(commit))

    def _clear_diff(self) -> None:
        self.current_diff = ""
        self.diff_lines = []
        self.side_by_side = None
        self.changes = ChangeIndex()
        self.search = None
        self.viewport.reset_diff_scroll()

    def _set_diff(self, diff: str) -> None:
        """Replace the diff and every structure derived from it."""
        self.current_diff = diff
        self.diff_lines = parse_diff(diff)
        self.changes = ChangeIndex.build(self.diff_lines)
        if self.search is not None:
            self.search.update(self.diff_lines)
        self._update_side_by_side()
        self.viewport.reset_diff_scroll()

    def _update_side_by_side(self) -> None:
        if self.effective_layout() is LayoutMode.SIDE_BY_SIDE:
            self.side_by_side = project(self.diff_lines)
        else:
            self.side_by_side = None

    # Commit selection

    @property
    def selected_commit(self) -> Commit | None:
        if 0 <= self.selected_index < len(self.commits):
            return self.commits[self.selected_index]
        return None

    def select_commit(self, index: int) -> None:
        if not 0 <= index < len(self.commits) or not isinstance(self.mode, HistoryMode):
            return
        diff = self._fetch_commit_diff(self.commits[index])
        self.selected_index = index
        if self.range_start is None:
            self.current_range = None
        self.search = None
        self._set_diff(diff)

    def move_selection_up(self) -> None:
        if self.selected_index > 0:
            self.select_commit(self.selected_index - 1)

    def move_selection_down(self) -> None:
        if self.selected_index + 1 < len(self.commits):
            self.select_commit(self.selected_index + 1)

    # Range diffs

    @staticmethod
    def order_range(start: int, end: int) -> tuple[int, int]:
        """``(older_index, newer_index)``; the list is newest first."""
        return (start, end) if start > end else (end, start)

    def toggle_range_selection(self) -> None:
        if not isinstance(self.mode, HistoryMode) or not self.commits:
            return
        if self.range_start is None:
            self.range_start = self.selected_index
            return
        start, self.range_start = self.range_start, None
        if start == self.selected_index:
            self.current_range = None
            return
        self._show_range(start, self.selected_index)

    def clear_range_selection(self) -> None:
        self.range_start = None
        self.current_range = None

    def is_marked_for_range(self, index: int) -> bool:
        return self.range_start == index

    def _show_range(self, start: int, end: int) -> None:
        if not (0 <= start < len(self.commits) and 0 <= end < len(self.commits)):
            return
        older_index, newer_index = self.order_range(start, end)
        older, newer = self.commits[older_index], self.commits[newer_index]
        key = range_key(older.hash, newer.hash)

        diff = self.cache.get(key)
        if diff is None:
            diff = self.git.diff_between(older.hash, newer.hash, self.file_path or "", self.context_lines)
            self.cache.put(key, diff)
        self._set_diff(diff)
        self.current_range = (older_index, newer_index)

    # Layout and sizing

    def effective_layout(self) -> LayoutMode:
        if self.layout_mode is LayoutMode.AUTO:
            if self.viewport.term_w >= self.side_by_side_min_width:
                return LayoutMode.SIDE_BY_SIDE
            return LayoutMode.UNIFIED
        return self.layout_mode

    def set_layout(self, layout: LayoutMode) -> None:
        self.layout_mode = LayoutMode(layout)
        self._sync_layout()

    def cycle_layout(self) -> None:
        order = [LayoutMode.AUTO, LayoutMode.UNIFIED, LayoutMode.SIDE_BY_SIDE]
        self.set_layout(order[(order.index(self.layout_mode) + 1) % len(order)])

    def _sync_layout(self) -> None:
        layout = self.effective_layout()
        if layout is not self.viewport.layout:
            self.viewport.layout = layout
            self._update_side_by_side()
            self.viewport.clamp(self.diff_line_count())

    def handle_resize(self, width: int, height: int) -> None:
        self.viewport.resize(width, height)
        self._sync_layout()
        self.viewport.clamp(self.diff_line_count())

    def diff_line_count(self) -> int:
        if self.side_by_side is not None:
            return self.side_by_side.row_count
        return len(self.diff_lines)

    def max_diff_line_width(self) -> int:
        if self.side_by_side is not None:
            return self.side_by_side.max_line_width()
        return max((len(line.text) for line in self.diff_lines), default=0)

    def max_commit_line_width(self) -> int:
        return max((len(c.list_label) for c in self.commits), default=0)

    def _row_for_line(self, line_index: int) -> int:
        if self.side_by_side is None:
            return line_index
        row = self.side_by_side.row_of(line_index)
        return line_index if row is None else row

    def _line_for_cursor(self) -> int:
        cursor = self.viewport.cursor_line
        if self.side_by_side is None:
            return cursor
        line = self.side_by_side.line_index_at(cursor)
        return cursor if line is None else line

    # Navigation by key

    def move_up(self) -> None:
        if self.focused_panel is FocusedPanel.DIFF:
            self.viewport.cursor_up()
        else:
            self.move_selection_up()

    def move_down(self) -> None:
        if self.focused_panel is FocusedPanel.DIFF:
            self.viewport.cursor_down(self.diff_line_count())
        else:
            self.move_selection_down()

    def page_up(self) -> None:
        self.viewport.page_up()

    def page_down(self) -> None:
        self.viewport.page_down(self.diff_line_count())

    def scroll_left(self) -> None:
        if self.focused_panel is FocusedPanel.DIFF:
            self.viewport.scroll_diff_left()
        else:
            self.viewport.scroll_commits_left()

    def scroll_right(self) -> None:
        if self.focused_panel is FocusedPanel.DIFF:
            self.viewport.scroll_diff_right(self.max_diff_line_width())
        else:
            self.viewport.scroll_commits_right(self.max_commit_line_width())

    def next_change(self) -> bool:
        return self._jump_to_change(self.changes.peek_next)

    def previous_change(self) -> bool:
        return self._jump_to_change(self.changes.peek_previous)

    def _jump_to_change(self, step) -> bool:
        if self.focused_panel is not FocusedPanel.DIFF:
            return False
        row = self.viewport.cursor_line
        line = self._line_for_cursor()
        while True:
            target = step(line)
            if target is None:
                return False
            # A paired deletion and addition share one side-by-side row
            if self._row_for_line(target) != row:
                break
            line = target
        self.changes.mark(target)
        self.viewport.center_on(self._row_for_line(target), self.diff_line_count())
        return True

    # Search

    def start_search(self) -> None:
        self.search = DiffSearchState()

    def search_input(self, char: str) -> None:
        if self.search is not None and self.search.is_input_mode:
            self.search.append_char(char, self.diff_lines)

    def search_backspace(self) -> None:
        if self.search is not None and self.search.is_input_mode:
            self.search.delete_char(self.diff_lines)

    def confirm_search(self) -> None:
        if self.search is None:
            return
        match = self.search.confirm()
        if match is not None:
            self._jump_to_line(match.line_index)

    def cancel_search(self) -> None:
        self.search = None

    @property
    def search_active(self) -> bool:
        return self.search is not None and self.search.is_active

    def next_search_match(self) -> None:
        if self.search is None:
            return
        match = self.search.next_match()
        if match is not None:
            self._jump_to_line(match.line_index)

    def previous_search_match(self) -> None:
        if self.search is None:
            return
        match = self.search.previous_match()
        if match is not None:
            self._jump_to_line(match.line_index)

    def _jump_to_line(self, line_index: int) -> None:
        self.viewport.center_on(self._row_for_line(line_index), self.diff_line_count())

    # Copying and messages

    def copy_text(self, fmt: CopyFormat) -> str | None:
        """Text to put on the clipboard for the selected commit."""
        commit = self.selected_commit
        if commit is None:
            return None
        if fmt is CopyFormat.FULL_SHA:
            return commit.hash
        if fmt is CopyFormat.SHORT_SHA:
            return commit.short_hash
        if fmt is CopyFormat.MESSAGE:
            return commit.message
        if fmt is CopyFormat.AUTHOR:
            return commit.author
        if fmt is CopyFormat.DATE:
            return commit.date
        return self.file_path

    def commit_stats(self, commit: Commit) -> CommitStats | None:
        if commit.is_working_directory:
            return None
        fetch = getattr(self.git, "fetch_commit_stats", None)
        return fetch(commit.hash) if fetch else None

    def commit_refs(self, commit: Commit) -> list[str]:
        if commit.is_working_directory:
            return []
        fetch = getattr(self.git, "fetch_commit_refs", None)
        return fetch(commit.hash) if fetch else []

    def set_message(self, text: str, error: bool = False, now: float | None = None) -> None:
        self.message = text
        self.message_is_error = error
        self._message_time = time.monotonic() if now is None else now

    def check_message_timeout(self, now: float | None = None) -> bool:
        """Clear an expired message; True when something was cleared."""
        if self._message_time is None:
            return False
        now = time.monotonic() if now is None else now
        if now - self._message_time >= config.message_timeout:
            self.message = None
            self.message_is_error = False
            self._message_time = None
            return True
        return False
