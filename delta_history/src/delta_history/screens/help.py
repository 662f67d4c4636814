from rich.table import Table
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

KEY_HELP = [
    ("j / k, ↓ / ↑", "Select commit, or move the diff cursor when the diff is focused"),
    ("Tab", "Switch focus between commits and diff"),
    ("PgUp / PgDn", "Page the diff (also Ctrl+U / Ctrl+D, Ctrl+B / Ctrl+F)"),
    ("a / s", "Scroll the focused panel left / right"),
    ("h / l", "Shrink / grow the commit list"),
    ("v", "Cycle layout: auto, unified, side-by-side"),
    ("d", "Mark range start, then press again on another commit"),
    ("/", "Search the diff (Enter confirms, Esc cancels)"),
    ("n / N", "Next / previous match, or next / previous change"),
    ("y / Y", "Copy full / short SHA"),
    ("i / Enter", "Commit details"),
    ("f", "Open another file"),
    ("Esc", "Cancel search or range, then back to the file picker"),
    ("q", "Quit"),
]


class HelpScreen(ModalScreen):
    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close"),
        Binding("question_mark", "close", "Close"),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }
    #help-box {
        width: 80;
        height: auto;
        max-height: 90%;
        border: round $accent;
        background: $surface;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold orange1", no_wrap=True)
        table.add_column()
        for keys, description in KEY_HELP:
            table.add_row(keys, description)
        with VerticalScroll(id="help-box") as box:
            box.border_title = "Keys"
            yield Static(table)

    def action_close(self):
        self.app.pop_screen()
