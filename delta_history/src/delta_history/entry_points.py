import argparse
import os
import sys

from textual.app import App

from delta_history.git.files import find_repo_root, verify_file_in_repo
from delta_history.git.repository import GitRepository
from delta_history.screens.file_picker import FilePickerScreen
from delta_history.screens.history import HistoryScreen
from delta_history.session import FilePickerMode, HistoryMode, HistorySession
from delta_history.state.viewport import LayoutMode
from delta_history.utils.config import LAYOUT_CHOICES, HistoryOptions, config
from delta_history.utils.errors import DeltaHistoryError
from delta_history.utils.logger import log

MIN_CONTEXT_LINES = 0
MAX_CONTEXT_LINES = 100


class HistoryApp(App):
    BINDINGS = []
    DEFAULT_CSS = """
    App {
        background: $surface-darken-3;
    }

    Screen {
        background: $surface-darken-3;
        width: 100%;
        height: 100%;
    }
    """

    def __init__(self, session: HistorySession, watch: bool = True):
        """Initialize the Delta History application.

        Args:
            session: Session already positioned on a file or in the file picker
            watch: Refresh the working tree entry when the viewed file changes
        """
        super().__init__()
        self.theme = "textual-dark"
        self.session = session
        self.watch = watch

    def on_mount(self):
        self.push_screen(self._screen_for_mode())

    def _screen_for_mode(self):
        if isinstance(self.session.mode, FilePickerMode):
            return FilePickerScreen(self.session)
        return HistoryScreen(self.session, watch=self.watch)

    def show_session_mode(self):
        """Replace the current screen with the one matching the session mode.

        A history screen is always rebuilt since its renderer is bound to one file.
        """
        mode = self.session.mode
        current = self.screen
        if isinstance(mode, FilePickerMode) and isinstance(current, FilePickerScreen):
            current.refresh_view()
            return
        if (
            isinstance(mode, HistoryMode)
            and isinstance(current, HistoryScreen)
            and current.page_name == mode.file_path
        ):
            current.refresh_view()
            return
        log(f"[APP] Switching to {type(mode).__name__}")
        self.switch_screen(self._screen_for_mode())


def _create_argument_parser():
    """Create and configure the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="delta-history", description="Delta History: browse the git history of a file"
    )
    parser.add_argument("file", nargs="?", metavar="FILE", help="File to show; omit to pick one interactively")
    parser.add_argument("-C", "--repo", type=str, help="Repository directory (default: current directory)")
    parser.add_argument(
        "-L", "--lines", type=int, default=None, help=f"Context lines around changes (default: {config.context_lines})"
    )
    parser.add_argument("--first-parent", action="store_true", help="Follow only the first parent of merges")
    parser.add_argument("--no-follow", action="store_true", help="Do not follow the file across renames")
    parser.add_argument("--layout", choices=LAYOUT_CHOICES, default=None, help="Diff layout (default: auto)")
    parser.add_argument("--no-watch", action="store_true", help="Do not watch the file for changes")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to /tmp/delta_history_debug.log")
    return parser


def _fail(message: str):
    log.error(message)
    sys.stderr.write(f"Error: {message}\n")
    sys.stderr.write("Use --help for usage information.\n")
    sys.exit(1)


def _validate_options(options: HistoryOptions) -> HistoryOptions:
    """Resolve the repository and file, exiting with status 1 on any problem."""
    if not MIN_CONTEXT_LINES <= options.context_lines <= MAX_CONTEXT_LINES:
        _fail(f"--lines must be between {MIN_CONTEXT_LINES} and {MAX_CONTEXT_LINES}, got {options.context_lines}")

    start = options.repo_root
    if start is None:
        start = os.getcwd()
        if options.file_path and os.path.isdir(os.path.dirname(os.path.abspath(options.file_path))):
            start = os.path.dirname(os.path.abspath(options.file_path))
    try:
        root = find_repo_root(start)
        file_path = options.file_path
        if file_path is not None:
            # Relative paths are taken from the cwd first, then from the repository root
            if os.path.exists(file_path):
                file_path = os.path.abspath(file_path)
            else:
                file_path = os.path.join(str(root), file_path)
            file_path = verify_file_in_repo(root, file_path)
    except DeltaHistoryError as e:
        _fail(str(e))

    options.repo_root = str(root)
    options.file_path = file_path
    return options


def _create_session(options: HistoryOptions) -> HistorySession:
    session = HistorySession(
        GitRepository(options.repo_root),
        context_lines=options.context_lines,
        follow_renames=options.follow_renames,
        first_parent=options.first_parent,
        layout=LayoutMode(options.layout),
    )
    try:
        if options.file_path:
            session.switch_to_history(options.file_path)
        else:
            session.start_file_picker()
    except DeltaHistoryError as e:
        _fail(str(e))
    return session


def main():
    """Main entry point for Delta History."""
    parser = _create_argument_parser()
    args = parser.parse_args()

    if args.debug:
        log.enable_debug()

    options = _validate_options(HistoryOptions.from_args(args).merge_with_env())
    log(f"[APP] Starting in {options.repo_root} file={options.file_path} options={options}")
    session = _create_session(options)
    try:
        HistoryApp(session, watch=options.watch).run()
    finally:
        log.close()


if __name__ == "__main__":
    main()
