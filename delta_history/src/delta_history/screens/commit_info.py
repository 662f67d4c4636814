"""Modal popup with the full metadata of one commit."""

from __future__ import annotations

import re

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from delta_history.git.models import Commit
from delta_history.session import CopyFormat, HistorySession
from delta_history.utils.error_handling import log_git_error
from delta_history.utils.errors import DeltaHistoryError

_PR_NUMBER_RE = re.compile(r"#(\d+)")


def pull_request_number(subject: str) -> int | None:
    """PR number referenced by a commit subject (``Merge pull request #12`` or ``... (#12)``)."""
    match = _PR_NUMBER_RE.search(subject)
    return int(match.group(1)) if match else None


def build_commit_info(commit: Commit, stats=None, refs: list[str] | None = None) -> Text:
    """Rich text body for the popup."""
    text = Text()

    def row(label: str, value: str, style: str = "") -> None:
        text.append(f"{label:<11}", style="bold orange1")
        text.append(f"{value}\n", style=style)

    if commit.is_working_directory:
        row("Commit", "Working directory (uncommitted changes)", "bold yellow")
        row("Status", commit.subject)
        return text

    row("Commit", commit.hash, "bold yellow")
    row("Author", commit.author)
    row("Date", commit.date)
    if commit.committer_name and commit.committer != commit.author:
        row("Committer", commit.committer)
    if commit.committer_date and commit.committer_date != commit.date:
        row("Committed", commit.committer_date)
    if refs:
        row("Refs", ", ".join(refs), "cyan")
    pr = pull_request_number(commit.subject)
    if pr is not None:
        row("PR", f"#{pr}", "magenta")
    if stats is not None:
        row(
            "Stats",
            f"{stats.files_changed} files changed, {stats.insertions} insertions(+), {stats.deletions} deletions(-)",
        )
    text.append("\n")
    text.append(commit.subject + "\n", style="bold")
    if commit.body:
        text.append("\n" + commit.body + "\n")
    return text


class CommitInfoScreen(ModalScreen):
    """Commit details; copy keys put fields on the clipboard."""

    BINDINGS = [
        Binding("escape", "dismiss_info", "Close"),
        Binding("q", "dismiss_info", "Close"),
        Binding("i", "dismiss_info", "Close"),
        Binding("y", "copy('sha')", "Copy SHA"),
        Binding("Y", "copy('short')", "Copy short SHA"),
        Binding("m", "copy('message')", "Copy message"),
        Binding("a", "copy('author')", "Copy author"),
        Binding("d", "copy('date')", "Copy date"),
        Binding("p", "copy('path')", "Copy path"),
    ]

    DEFAULT_CSS = """
    CommitInfoScreen {
        align: center middle;
    }
    #commit-info-box {
        width: 80%;
        max-width: 110;
        height: 70%;
        border: round $accent;
        background: $surface;
        padding: 0 1;
    }
    #commit-info-hints {
        dock: bottom;
        height: 1;
    }
    """

    def __init__(self, session: HistorySession, commit: Commit) -> None:
        super().__init__()
        self.session = session
        self.commit = commit

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="commit-info-box") as box:
            box.border_title = f"Commit {self.commit.short_hash}"
            yield Static(self._body(), id="commit-info-body")
            yield Static(
                Text.from_markup(
                    "[orange1]y/Y[/orange1] SHA  [orange1]m[/orange1] Message  [orange1]a[/orange1] Author"
                    "  [orange1]d[/orange1] Date  [orange1]p[/orange1] Path  [orange1]Esc[/orange1] Close"
                ),
                id="commit-info-hints",
            )

    def _body(self) -> Text:
        try:
            stats = self.session.commit_stats(self.commit)
            refs = self.session.commit_refs(self.commit)
        except DeltaHistoryError as e:
            log_git_error("loading commit details for", e, self.commit.hash)
            stats, refs = None, []
        return build_commit_info(self.commit, stats, refs)

    def action_dismiss_info(self):
        self.app.pop_screen()

    def action_copy(self, fmt: str):
        copy_format = CopyFormat(fmt)
        text = self.session.copy_text(copy_format)
        if not text:
            return
        self.app.copy_to_clipboard(text)
        label = copy_format.name.lower().replace("_", " ")
        self.session.set_message(f"Copied {label}: {text.splitlines()[0]}")
        self.notify(f"Copied {label}", timeout=2)
