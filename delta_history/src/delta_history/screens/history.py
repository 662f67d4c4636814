"""Main history screen: commit list plus diff panel(s)."""

from __future__ import annotations

import os
from typing import Callable

from rich.segment import Segment
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Static

from delta_history.diff.render import DiffRenderer, crop_segments, rows_to_text
from delta_history.diff.syntax import SyntaxHighlighter
from delta_history.session import CopyFormat, FocusedPanel, HistorySession
from delta_history.state.viewport import LayoutMode
from delta_history.utils.base_screen import BaseScreen
from delta_history.utils.config import config
from delta_history.utils.error_handling import log_git_error, log_ui_error, log_watchdog_error
from delta_history.utils.errors import DeltaHistoryError
from delta_history.utils.logger import log
from delta_history.utils.watchdog import watch_file

from .commit_info import CommitInfoScreen
from .help import HelpScreen


class HistoryScreen(BaseScreen):
    """Browse the history of one file.

    The diff panels are plain Statics redrawn from the session on every
    change; scrolling is done by the viewport state, not by Textual.
    """

    BINDINGS = [
        Binding("tab", "switch_focus", "Focus", priority=True),
    ]

    DEFAULT_CSS = """
    #history-root {
        width: 100%;
        height: 1fr;
    }
    #history-main {
        width: 100%;
        height: 1fr;
    }
    .history-panel {
        height: 100%;
        border: round $panel-lighten-2;
        overflow: hidden hidden;
    }
    .history-panel.focused {
        border: round $accent;
    }
    #diff-panel, #old-panel, #new-panel {
        width: 1fr;
    }
    #commits-bottom {
        height: 30%;
        width: 100%;
    }
    """

    _KEY_HANDLERS = {
        "j": "_handle_down_key",
        "down": "_handle_down_key",
        "k": "_handle_up_key",
        "up": "_handle_up_key",
        "pageup": "_handle_page_up_key",
        "pagedown": "_handle_page_down_key",
        "ctrl+u": "_handle_page_up_key",
        "ctrl+d": "_handle_page_down_key",
        "ctrl+b": "_handle_page_up_key",
        "ctrl+f": "_handle_page_down_key",
        "a": "_handle_scroll_left_key",
        "left": "_handle_scroll_left_key",
        "s": "_handle_scroll_right_key",
        "right": "_handle_scroll_right_key",
        "h": "_handle_shrink_split_key",
        "l": "_handle_grow_split_key",
        "d": "_handle_range_key",
        "/": "_handle_search_start_key",
        "slash": "_handle_search_start_key",
        "n": "_handle_next_key",
        "N": "_handle_previous_key",
        "y": "_handle_copy_sha_key",
        "Y": "_handle_copy_short_sha_key",
        "i": "_handle_info_key",
        "enter": "_handle_info_key",
        "f": "_handle_file_picker_key",
        "v": "_handle_layout_key",
        "?": "_handle_help_key",
        "question_mark": "_handle_help_key",
        "escape": "_handle_escape_key",
        "q": "_handle_quit_key",
    }

    def __init__(self, session: HistorySession, watch: bool = True) -> None:
        super().__init__(page_name=session.file_path or "History")
        self.session = session
        self.watch = watch
        self._renderer = DiffRenderer(SyntaxHighlighter(), session.file_path, config.max_line_chars)
        self._stop_watch: Callable[[], None] | None = None
        self._commits_side: Static | None = None
        self._commits_bottom: Static | None = None
        self._diff_panel: Static | None = None
        self._old_panel: Static | None = None
        self._new_panel: Static | None = None
        self._laid_out_side_by_side: bool | None = None
        self.rendered_diff_rows = 0

    def compose_main_content(self) -> ComposeResult:
        self._commits_side = Static("", id="commits-side", classes="history-panel")
        self._diff_panel = Static("", id="diff-panel", classes="history-panel")
        self._old_panel = Static("", id="old-panel", classes="history-panel")
        self._new_panel = Static("", id="new-panel", classes="history-panel")
        self._commits_bottom = Static("", id="commits-bottom", classes="history-panel")
        with Vertical(id="history-root"):
            with Horizontal(id="history-main"):
                yield self._commits_side
                yield self._diff_panel
                yield self._old_panel
                yield self._new_panel
            yield self._commits_bottom

    def get_footer_text(self) -> str:
        return (
            " [orange1]j/k[/orange1] Move  [orange1]Tab[/orange1] Focus  [orange1]/[/orange1] Search"
            "  [orange1]n/N[/orange1] Next/Prev  [orange1]d[/orange1] Range  [orange1]i[/orange1] Info"
            "  [orange1]f[/orange1] Files  [orange1]?[/orange1] Help  [orange1]q[/orange1] Quit"
        )

    async def on_mount(self):
        await super().on_mount()
        width, height = self.app.size
        self.session.handle_resize(width, height)
        self.set_interval(0.5, self._tick_messages)
        self._start_watching()
        self.refresh_view()

    def on_unmount(self):
        self._stop_watching()

    def on_resize(self, event):
        width, height = self.app.size
        self.session.handle_resize(width, height)
        self.refresh_view()
        self.call_after_refresh(self._remeasure)

    # Live refresh

    def _start_watching(self):
        if not self.watch or not self.session.file_path:
            return
        root = getattr(self.session.git, "root", None)
        if root is None:
            return
        path = os.path.join(str(root), self.session.file_path)

        def trigger_refresh():
            self.app.call_from_thread(self._on_file_changed)

        try:
            _observer, self._stop_watch = watch_file(path, trigger_refresh, debounce_ms=config.watch_debounce_ms)
        except (OSError, RuntimeError) as e:
            log_watchdog_error(path, "starting observer for", e)
            self._stop_watch = None

    def _stop_watching(self):
        if self._stop_watch is not None:
            self._stop_watch()
            self._stop_watch = None

    def _on_file_changed(self):
        log("[HISTORY] Viewed file changed, refreshing")
        self._run(self.session.refresh_working_directory, "refreshing working tree")

    # Key handling

    def on_key(self, event):
        """Dispatch keys; while typing a search query every key goes to the query."""
        key = getattr(event, "key", None)
        if key is None:
            return

        search = self.session.search
        if search is not None and search.is_input_mode:
            self._handle_search_input_key(event)
            return

        name = self._KEY_HANDLERS.get(key) or self._KEY_HANDLERS.get(getattr(event, "character", None) or "")
        if name is None:
            return
        self._stop_event(event)
        getattr(self, name)()

    def _stop_event(self, event):
        try:
            event.stop()
            event.prevent_default()
        except (AttributeError, RuntimeError) as e:
            log_ui_error("history screen", "stopping key event", e)

    def _handle_search_input_key(self, event):
        self._stop_event(event)
        key = event.key
        if key == "escape":
            self.session.cancel_search()
        elif key == "enter":
            self.session.confirm_search()
        elif key == "backspace":
            self.session.search_backspace()
        elif event.character and event.character.isprintable():
            self.session.search_input(event.character)
        self.refresh_view()

    def _handle_down_key(self):
        self._run(self.session.move_down, "selecting commit")

    def _handle_up_key(self):
        self._run(self.session.move_up, "selecting commit")

    def _handle_page_up_key(self):
        self.session.page_up()
        self.refresh_view()

    def _handle_page_down_key(self):
        self.session.page_down()
        self.refresh_view()

    def _handle_scroll_left_key(self):
        self.session.scroll_left()
        self.refresh_view()

    def _handle_scroll_right_key(self):
        self.session.scroll_right()
        self.refresh_view()

    def _handle_shrink_split_key(self):
        self.session.viewport.decrease_split()
        self.refresh_view()

    def _handle_grow_split_key(self):
        self.session.viewport.increase_split()
        self.refresh_view()

    def _handle_range_key(self):
        self._run(self.session.toggle_range_selection, "loading range diff")

    def _handle_search_start_key(self):
        self.session.start_search()
        self.refresh_view()

    def _handle_next_key(self):
        if self.session.search_active:
            self.session.next_search_match()
        else:
            self.session.next_change()
        self.refresh_view()

    def _handle_previous_key(self):
        if self.session.search_active:
            self.session.previous_search_match()
        else:
            self.session.previous_change()
        self.refresh_view()

    def _handle_copy_sha_key(self):
        self.copy_selected(CopyFormat.FULL_SHA)

    def _handle_copy_short_sha_key(self):
        self.copy_selected(CopyFormat.SHORT_SHA)

    def _handle_info_key(self):
        commit = self.session.selected_commit
        if commit is not None:
            self.app.push_screen(CommitInfoScreen(self.session, commit))

    def _handle_file_picker_key(self):
        self._run(self.session.switch_to_file_picker, "listing repository files")
        self.app.show_session_mode()

    def _handle_layout_key(self):
        self.session.cycle_layout()
        self.session.set_message(f"Layout: {self.session.layout_mode.value}")
        self.refresh_view()

    def _handle_help_key(self):
        self.app.push_screen(HelpScreen())

    def _handle_escape_key(self):
        """Layered cancel: search, then pending range, then back to the file picker."""
        if self.session.search is not None:
            self.session.cancel_search()
        elif self.session.range_start is not None:
            self.session.clear_range_selection()
        else:
            self._run(self.session.return_to_file_picker, "listing repository files")
            self.app.show_session_mode()
            return
        self.refresh_view()

    def _handle_quit_key(self):
        self.app.exit()

    def action_switch_focus(self):
        self.session.switch_focus()
        self.refresh_view()

    def copy_selected(self, fmt: CopyFormat):
        text = self.session.copy_text(fmt)
        if text is None:
            return
        self.app.copy_to_clipboard(text)
        self.session.set_message(f"Copied: {text}")
        self.refresh_view()

    def _run(self, operation: Callable[[], None], description: str):
        """Run a session operation, turning git failures into a status message."""
        try:
            operation()
        except DeltaHistoryError as e:
            log_git_error(description, e, self.session.file_path)
            self.session.set_message(str(e), error=True)
        self.refresh_view()

    def _tick_messages(self):
        if self.session.check_message_timeout():
            self._update_footer()

    # Rendering

    def refresh_view(self):
        if self._diff_panel is None or not self.is_mounted:
            return
        side_by_side = self.session.effective_layout() is LayoutMode.SIDE_BY_SIDE
        self._apply_layout(side_by_side)
        if side_by_side != self._laid_out_side_by_side:
            # Panel sizes are only known once the new layout has been arranged
            self._laid_out_side_by_side = side_by_side
            self.call_after_refresh(self._remeasure)
        self._sync_diff_rows(side_by_side)
        self._render_commits(self._commits_bottom if side_by_side else self._commits_side)
        if side_by_side:
            self._render_side_by_side()
        else:
            self._render_unified()
        self._update_footer()

    def _apply_layout(self, side_by_side: bool):
        focus_diff = self.session.focused_panel is FocusedPanel.DIFF
        self._commits_side.display = not side_by_side
        self._diff_panel.display = not side_by_side
        self._old_panel.display = side_by_side
        self._new_panel.display = side_by_side
        self._commits_bottom.display = side_by_side
        self._commits_side.styles.width = f"{int(round(self.session.viewport.split_ratio * 100))}%"
        for panel in (self._diff_panel, self._old_panel, self._new_panel):
            panel.set_class(focus_diff, "focused")
        for panel in (self._commits_side, self._commits_bottom):
            panel.set_class(not focus_diff, "focused")

    @staticmethod
    def _inner_size(panel: Static) -> tuple[int | None, int]:
        """Content area of a bordered panel; ``size`` already excludes the border."""
        width, height = panel.size
        return (width or None), max(1, height)

    def _sync_diff_rows(self, side_by_side: bool) -> bool:
        """Use the diff panel's measured height as the navigation window.

        Returns True when the height changed since the last render.
        """
        panel = self._new_panel if side_by_side else self._diff_panel
        height = panel.size.height
        viewport = self.session.viewport
        if height <= 0 or height == viewport.fixed_visible_lines:
            return False
        viewport.fixed_visible_lines = height
        viewport.clamp(self.session.diff_line_count())
        viewport.ensure_cursor_visible()
        return True

    def _remeasure(self):
        if not self.is_mounted:
            return
        side_by_side = self.session.effective_layout() is LayoutMode.SIDE_BY_SIDE
        if self._sync_diff_rows(side_by_side):
            self.refresh_view()

    def _render_commits(self, panel: Static):
        session = self.session
        width, height = self._inner_size(panel)
        first = max(0, session.selected_index - height + 1)
        older_newer = session.current_range or ()
        text = Text(no_wrap=True, overflow="crop")
        for index in range(first, min(len(session.commits), first + height)):
            commit = session.commits[index]
            if session.is_marked_for_range(index):
                marker, style = "● ", "bold magenta"
            elif index in older_newer:
                marker, style = "◆ ", "bold cyan"
            elif index == session.selected_index:
                marker, style = "▶ ", "bold"
            else:
                marker, style = "  ", ""
            if index == session.selected_index:
                style = (style + " reverse").strip()
            label = f"{commit.short_hash} {commit.date[:10]} {commit.subject}"
            visible = crop_segments([Segment(label)], session.viewport.h_scroll_commits,
                                    None if width is None else max(0, width - 2))
            if index != first:
                text.append("\n")
            text.append(marker, style=style)
            text.append("".join(s.text for s in visible), style=style)
        panel.update(text)
        panel.border_title = f"Commits ({len(session.commits)})"

    def _diff_title(self) -> str:
        session = self.session
        if session.current_range is not None:
            older, newer = session.current_range
            return f"Range {session.commits[older].short_hash}..{session.commits[newer].short_hash}"
        commit = session.selected_commit
        if commit is None:
            return "Diff"
        return f"{commit.short_hash} {commit.subject}"

    def _diff_subtitle(self) -> str:
        session = self.session
        if session.search is not None:
            return session.search.status_text()
        position = session.changes.position()
        if position is not None:
            return f"Change {position[0]}/{position[1]}"
        return f"{len(session.changes)} changes"

    def _cursor(self) -> int | None:
        if self.session.focused_panel is FocusedPanel.DIFF:
            return self.session.viewport.cursor_line
        return None

    def _render_unified(self):
        session = self.session
        viewport = session.viewport
        width, _height = self._inner_size(self._diff_panel)
        rows = self._renderer.unified_rows(
            session.diff_lines,
            viewport.v_scroll,
            viewport.visible_lines(),
            cursor_line=self._cursor(),
            search=session.search,
            h_scroll=viewport.h_scroll_diff,
            width=width,
        )
        self._diff_panel.update(rows_to_text(rows))
        self.rendered_diff_rows = len(rows)
        self._diff_panel.border_title = self._diff_title()
        self._diff_panel.border_subtitle = self._diff_subtitle()

    def _render_side_by_side(self):
        session = self.session
        if session.side_by_side is None:
            return
        viewport = session.viewport
        for side, panel in (("old", self._old_panel), ("new", self._new_panel)):
            width, _height = self._inner_size(panel)
            rows = self._renderer.side_rows(
                session.side_by_side,
                side,
                viewport.v_scroll,
                viewport.visible_lines(),
                cursor_line=self._cursor(),
                search=session.search,
                h_scroll=viewport.h_scroll_diff,
                width=width,
            )
            panel.update(rows_to_text(rows))
            self.rendered_diff_rows = len(rows)
        self._old_panel.border_title = f"Old  {self._diff_title()}"
        self._new_panel.border_title = "New"
        self._new_panel.border_subtitle = self._diff_subtitle()

    def _update_footer(self):
        session = self.session
        try:
            footer = self.footer
        except NoMatches as e:
            log_ui_error("footer", "querying", e)
            return
        if session.search is not None and session.search.is_input_mode:
            footer.show_status(f"/{session.search.query}")
        elif session.range_start is not None and not session.message:
            footer.show_status("Range start marked, select another commit and press d")
        else:
            footer.show_status(session.message, error=session.message_is_error)
