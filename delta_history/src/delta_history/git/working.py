from __future__ import annotations

from pathlib import Path

from ..utils.errors import GitCommandError
from .commands import run_git_raw
from .models import WorkingDirectoryStatus

CLEAN_MESSAGE = "Working directory is clean - no changes detected"


def check_working_directory_status(repo_root: str | Path, file_path: str) -> WorkingDirectoryStatus:
    """Whether ``file_path`` has staged and/or unstaged changes."""
    staged = run_git_raw(["diff", "--cached", "--name-only", "--", file_path], repo_root)
    unstaged = run_git_raw(["diff", "--name-only", "--", file_path], repo_root)
    return WorkingDirectoryStatus.from_flags(
        staged=staged.ok and bool(staged.stdout.strip()),
        unstaged=unstaged.ok and bool(unstaged.stdout.strip()),
    )


def working_directory_diff(repo_root: str | Path, file_path: str, context_lines: int = 3) -> str:
    """Diff of the working tree (staged and unstaged) against HEAD."""
    args = ["diff", f"--unified={context_lines}", "HEAD", "--", file_path]
    result = run_git_raw(args, repo_root)
    if not result.ok:
        if "does not exist" in result.stderr or "pathspec" in result.stderr:
            return _new_file_diff(repo_root, file_path)
        raise GitCommandError(args, result.stderr, result.returncode)
    if not result.stdout.strip():
        return CLEAN_MESSAGE
    return result.stdout


def _new_file_diff(repo_root: str | Path, file_path: str) -> str:
    # --no-index exits 1 when the inputs differ, which is the expected case here
    result = run_git_raw(["diff", "--no-index", "/dev/null", file_path], repo_root)
    if result.stdout.strip():
        return result.stdout
    return (
        f"diff --git a/{file_path} b/{file_path}\n"
        "new file mode 100644\n"
        f"--- /dev/null\n+++ b/{file_path}\n"
        "(New file - content not shown)\n"
    )
