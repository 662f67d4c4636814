"""Commit history, parents, renames and per-commit details for one file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..utils.error_handling import log_git_error
from ..utils.errors import GitCommandError
from .commands import run_git, run_git_raw
from .models import Commit

FIELD_SEP = "\x00"
RECORD_SEP = "\x1e"
LOG_FORMAT = "--format=%H%x00%h%x00%ad%x00%an%x00%ae%x00%cn%x00%ce%x00%cd%x00%s%x00%b%x1e"
DATE_FORMAT = "--date=format:%Y-%m-%d %H:%M:%S"

_FULL_HASH_RE = re.compile(r"^[0-9a-fA-F]{40}$")
_STAT_NUMBER_RE = re.compile(r"(\d+)\s+(file|insertion|deletion)")


@dataclass(frozen=True)
class CommitStats:
    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


def parse_log_output(stdout: str) -> list[Commit]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
    commits: list[Commit] = []
    for record in stdout.split(RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        parts = record.split(FIELD_SEP, 9)
        if len(parts) < 5:
            continue
        parts += [""] * (10 - len(parts))
        commits.append(
            Commit(
                hash=parts[0],
                short_hash=parts[1],
                date=parts[2],
                author_name=parts[3],
                author_email=parts[4],
                committer_name=parts[5],
                committer_email=parts[6],
                committer_date=parts[7],
                subject=parts[8],
                body=parts[9].strip(),
            )
        )
    return commits


def fetch_commit_history(
    repo_root: str | Path, file_path: str, follow_renames: bool = True, first_parent: bool = False
) -> list[Commit]:
    """Commits touching ``file_path``, newest first."""
    args = ["log"]
    if follow_renames:
        args.append("--follow")
    if first_parent:
        args.append("--first-parent")
    args += [LOG_FORMAT, DATE_FORMAT, "--", file_path]
    return parse_log_output(run_git(args, repo_root))


def get_commit_parents(repo_root: str | Path, commit_hash: str) -> list[str]:
    """Parent hashes of ``commit_hash`` (empty for a root commit)."""
    out = run_git(["rev-list", "--parents", "-n", "1", commit_hash], repo_root)
    fields = out.split()
    return fields[1:]


def parse_rename_log(stdout: str, file_path: str) -> dict[str, str]:
    """Map commit hash to the file's path in that commit.

    Input is ``git log --follow --name-status --format=%H``, newest first:
    each hash line is followed by the status line for the file. A rename
    switches the tracked path to the old name for every older commit.
    """
    rename_map: dict[str, str] = {}
    current_hash = ""
    current_path = file_path
    for line in stdout.splitlines():
        if not line:
            continue
        if _FULL_HASH_RE.match(line):
            current_hash = line
            rename_map[current_hash] = current_path
            continue
        parts = line.split("\t")
        if line.startswith("R") and len(parts) == 3:
            old_path, new_path = parts[1], parts[2]
            if current_hash:
                rename_map[current_hash] = new_path
            current_path = old_path
        elif line[:1] in ("A", "M", "D") and len(parts) == 2:
            current_path = parts[1]
            if current_hash:
                rename_map[current_hash] = current_path
    return rename_map


def build_rename_map(repo_root: str | Path, file_path: str) -> dict[str, str]:
    """Rename map for ``file_path``; empty when git cannot produce one."""
    result = run_git_raw(["log", "--follow", "--name-status", "--format=%H", "--", file_path], repo_root)
    if not result.ok:
        log_git_error("building rename map for", GitCommandError(["log", "--follow"], result.stderr), file_path)
        return {}
    return parse_rename_log(result.stdout, file_path)


def parse_stat_summary(stdout: str) -> CommitStats | None:
    """Read the ``N files changed, X insertions(+), Y deletions(-)`` summary line."""
    for line in reversed(stdout.splitlines()):
        if "file" in line and ("insertion" in line or "deletion" in line):
            values = {kind: int(n) for n, kind in _STAT_NUMBER_RE.findall(line)}
            return CommitStats(
                files_changed=values.get("file", 0),
                insertions=values.get("insertion", 0),
                deletions=values.get("deletion", 0),
            )
    return None


def fetch_commit_stats(repo_root: str | Path, commit_hash: str) -> CommitStats | None:
    result = run_git_raw(["show", "--stat", "--format=", commit_hash], repo_root)
    if not result.ok:
        return None
    return parse_stat_summary(result.stdout)


def fetch_commit_refs(repo_root: str | Path, commit_hash: str) -> list[str]:
    """Branches containing and tags pointing at ``commit_hash``."""
    refs: list[str] = []
    branches = run_git_raw(["branch", "--contains", commit_hash], repo_root)
    if branches.ok:
        for line in branches.stdout.splitlines():
            name = line.strip().removeprefix("* ").strip()
            if name and not name.startswith("(HEAD detached"):
                refs.append(f"branch:{name}")
    tags = run_git_raw(["tag", "--points-at", commit_hash], repo_root)
    if tags.ok:
        refs.extend(f"tag:{t.strip()}" for t in tags.stdout.splitlines() if t.strip())
    return refs
