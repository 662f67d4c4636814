"""File picker: fuzzy-find a tracked file, then open its history."""

from __future__ import annotations

import time

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from delta_history.git.files import format_age, format_file_size
from delta_history.git.models import FileStatus
from delta_history.session import HistorySession
from delta_history.utils.base_screen import BaseScreen
from delta_history.utils.error_handling import log_git_error, log_ui_error
from delta_history.utils.errors import DeltaHistoryError
from delta_history.utils.logger import log

STATUS_STYLES = {
    FileStatus.MODIFIED: "yellow",
    FileStatus.STAGED: "green",
    FileStatus.UNTRACKED: "bright_black",
    FileStatus.MIXED: "bold yellow",
}


class FilePickerScreen(BaseScreen):
    """Type to filter, arrows to move, Enter to open."""

    DEFAULT_CSS = """
    #picker-root {
        width: 100%;
        height: 1fr;
    }
    #picker-query {
        height: 3;
        border: round $accent;
        padding: 0 1;
    }
    #picker-list {
        height: 1fr;
        border: round $panel-lighten-2;
        overflow: hidden hidden;
    }
    """

    _KEY_HANDLERS = {
        "up": "_handle_up_key",
        "ctrl+p": "_handle_up_key",
        "ctrl+k": "_handle_up_key",
        "down": "_handle_down_key",
        "ctrl+n": "_handle_down_key",
        "ctrl+j": "_handle_down_key",
        "enter": "_handle_enter_key",
        "backspace": "_handle_backspace_key",
        "ctrl+u": "_handle_clear_key",
        "escape": "_handle_escape_key",
    }

    def __init__(self, session: HistorySession) -> None:
        super().__init__(page_name="Open file")
        self.session = session
        self._query: Static | None = None
        self._list: Static | None = None

    def compose_main_content(self) -> ComposeResult:
        self._query = Static("", id="picker-query")
        self._list = Static("", id="picker-list")
        with Vertical(id="picker-root"):
            yield self._query
            yield self._list

    def get_footer_text(self) -> str:
        return (
            " Type to filter  [orange1]↑/↓[/orange1] Move  [orange1]Enter[/orange1] Open"
            "  [orange1]Ctrl+U[/orange1] Clear  [orange1]Esc[/orange1] Back"
        )

    async def on_mount(self):
        await super().on_mount()
        self.refresh_view()

    def on_resize(self, event):
        self.refresh_view()

    def on_key(self, event):
        picker = self.session.picker
        if picker is None:
            return
        name = self._KEY_HANDLERS.get(event.key)
        if name is not None:
            self._stop_event(event)
            getattr(self, name)()
        elif event.character and event.character.isprintable():
            self._stop_event(event)
            picker.append_char(event.character)
        else:
            return
        self.refresh_view()

    def _stop_event(self, event):
        try:
            event.stop()
            event.prevent_default()
        except (AttributeError, RuntimeError) as e:
            log_ui_error("file picker", "stopping key event", e)

    def _handle_up_key(self):
        self.session.picker.move_up()

    def _handle_down_key(self):
        self.session.picker.move_down()

    def _handle_backspace_key(self):
        self.session.picker.delete_char()

    def _handle_clear_key(self):
        self.session.picker.clear_query()

    def _handle_enter_key(self):
        selected = self.session.picker.selected_file()
        if selected is None:
            return
        log(f"[PICKER] Opening {selected.path}")
        try:
            self.session.switch_to_history(selected.path, from_picker=True)
        except DeltaHistoryError as e:
            log_git_error("loading history of", e, selected.path)
            self.session.set_message(str(e), error=True)
        self.app.show_session_mode()

    def _handle_escape_key(self):
        try:
            returned = self.session.cancel_file_picker()
        except DeltaHistoryError as e:
            log_git_error("returning to history", e)
            self.session.set_message(str(e), error=True)
            returned = True
        if returned:
            self.app.show_session_mode()
        else:
            self.app.exit()

    # Rendering

    def refresh_view(self):
        picker = self.session.picker
        if picker is None or self._list is None or not self.is_mounted:
            return
        self._query.update(Text.assemble(("> ", "bold orange1"), picker.query, ("█", "dim")))
        self._query.border_title = f"{len(picker.filtered)}/{len(picker.files)} files"

        height = max(1, self._list.size.height - 2)
        first = max(0, picker.selected - height + 1)
        now = time.time()
        text = Text(no_wrap=True, overflow="ellipsis")
        for index in range(first, min(len(picker.filtered), first + height)):
            git_file, _score = picker.filtered[index]
            if index != first:
                text.append("\n")
            line = Text()
            line.append(f"{git_file.status.symbol} ", style=STATUS_STYLES.get(git_file.status, ""))
            line.append_text(picker.highlight(git_file.path))
            line.append(f"  {format_file_size(git_file.size)}  {format_age(git_file.mtime, now)}", style="dim")
            if index == picker.selected:
                line.stylize("reverse")
            text.append_text(line)
        if not picker.filtered:
            text.append("No matching files", style="dim italic")
        self._list.update(text)
