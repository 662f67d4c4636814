from __future__ import annotations

from pathlib import Path

from ..utils.errors import GitCommandError
from .commands import run_git_raw

FILE_ABSENT_MESSAGE = "File not present in this commit\n"


def _is_missing_path(stderr: str) -> bool:
    return "does not exist" in stderr or "pathspec" in stderr


def _run_diff(args: list[str], repo_root: str | Path) -> str:
    result = run_git_raw(args, repo_root)
    if result.ok:
        return result.stdout
    if _is_missing_path(result.stderr):
        return FILE_ABSENT_MESSAGE
    raise GitCommandError(args, result.stderr, result.returncode)


def fetch_diff(
    repo_root: str | Path,
    commit_hash: str,
    parent_hash: str | None,
    file_path: str,
    context_lines: int = 3,
) -> str:
    """Diff of ``file_path`` introduced by ``commit_hash``.

    Root commits (no parent) fall back to ``git show --patch``.
    """
    if parent_hash:
        args = ["diff", f"--unified={context_lines}", "--find-renames", parent_hash, commit_hash, "--", file_path]
    else:
        args = ["show", "--patch", "--format=", f"--unified={context_lines}", commit_hash, "--", file_path]
    return _run_diff(args, repo_root)


def diff_between(
    repo_root: str | Path,
    older_hash: str,
    newer_hash: str,
    file_path: str,
    context_lines: int = 3,
) -> str:
    """Cumulative diff of ``file_path`` from ``older_hash`` to ``newer_hash``."""
    args = ["diff", f"--unified={context_lines}", "--find-renames", older_hash, newer_hash, "--", file_path]
    return _run_diff(args, repo_root)
