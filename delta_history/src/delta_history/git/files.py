"""Repository discovery and file listing for the file picker."""

from __future__ import annotations

import os
from pathlib import Path

from ..utils.errors import FileNotInRepositoryError, NotAGitRepositoryError
from ..utils.logger import log
from .commands import run_git, run_git_raw
from .models import FileStatus, GitFile

_INDEX_WORKTREE_STATUS = {
    (" ", "M"): FileStatus.MODIFIED,
    ("M", " "): FileStatus.STAGED,
    ("A", " "): FileStatus.STAGED,
    ("D", " "): FileStatus.STAGED,
    ("R", " "): FileStatus.STAGED,
    ("C", " "): FileStatus.STAGED,
    ("M", "M"): FileStatus.MIXED,
    ("A", "M"): FileStatus.MIXED,
    ("?", "?"): FileStatus.UNTRACKED,
}


def parse_status_porcelain(stdout: str) -> dict[str, FileStatus]:
    """Parse ``git status --porcelain -z`` into a path to status map."""
    statuses: dict[str, FileStatus] = {}
    entries = stdout.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        x, y, path = entry[0], entry[1], entry[3:]
        statuses[path] = _INDEX_WORKTREE_STATUS.get((x, y), FileStatus.MODIFIED)
        if x in ("R", "C"):
            # Renames and copies carry the source path as an extra entry
            i += 1
    return statuses


def list_repository_files(repo_root: str | Path) -> list[GitFile]:
    """Tracked and untracked (not ignored) files, sorted by path."""
    listing = run_git(["ls-files", "--cached", "--others", "--exclude-standard", "-z"], repo_root)
    status = run_git_raw(["status", "--porcelain", "-z"], repo_root)
    statuses = parse_status_porcelain(status.stdout) if status.ok else {}

    files: list[GitFile] = []
    seen: set[str] = set()
    for rel in listing.split("\0"):
        if not rel or rel in seen:
            continue
        seen.add(rel)
        try:
            st = os.stat(os.path.join(repo_root, rel))
            size, mtime = st.st_size, st.st_mtime
        except OSError:
            size, mtime = None, None
        files.append(GitFile(rel, statuses.get(rel, FileStatus.CLEAN), size, mtime))
    files.sort(key=lambda f: f.path)
    return files


def find_repo_root(path: str | Path) -> Path:
    """Top-level directory of the work tree containing ``path``.

    Raises:
        NotAGitRepositoryError: ``path`` is not inside a git work tree
    """
    start = Path(path)
    if not start.is_dir():
        start = start.parent
    result = run_git_raw(["rev-parse", "--show-toplevel"], start if str(start) else ".")
    if not result.ok:
        raise NotAGitRepositoryError(f"Not a git repository: {path}")
    root = Path(result.stdout.strip())
    log.debug(f"[GIT] Repository root: {root}")
    return root


def verify_file_in_repo(repo_root: str | Path, file_path: str | Path) -> str:
    """Path of ``file_path`` relative to the repo root, checked against the index.

    Raises:
        FileNotInRepositoryError: the file lies outside the repo or is not tracked
    """
    root = Path(repo_root).resolve()
    candidate = Path(file_path)
    if candidate.is_absolute():
        try:
            relative = candidate.resolve().relative_to(root)
        except ValueError as e:
            raise FileNotInRepositoryError(f"{file_path} is outside the repository {root}") from e
    else:
        relative = candidate
    rel = relative.as_posix()
    result = run_git_raw(["ls-files", "--error-unmatch", "--", rel], root)
    if not result.ok:
        raise FileNotInRepositoryError(f"{rel} is not tracked in {root}")
    return rel


def format_file_size(size: int | None) -> str:
    if size is None:
        return "-"
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}K"
    if size < 1024 ** 3:
        return f"{size / 1024 ** 2:.1f}M"
    return f"{size / 1024 ** 3:.1f}G"


def format_age(mtime: float | None, now: float) -> str:
    """Compact relative age such as ``5m ago``."""
    if mtime is None:
        return "-"
    seconds = int(now - mtime)
    if seconds < 0:
        return "unknown"
    for limit, div, unit in ((60, 1, "s"), (3600, 60, "m"), (86400, 3600, "h"), (86400 * 7, 86400, "d"),
                             (86400 * 30, 86400 * 7, "w")):
        if seconds < limit:
            return f"{seconds // div}{unit} ago"
    return f"{seconds // (86400 * 30)}mo ago"
