"""Thin subprocess wrapper around the ``git`` executable."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..utils.errors import GitCommandError
from ..utils.logger import log


@dataclass
class GitResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def run_git_raw(args: Sequence[str], cwd: str | Path | None = None) -> GitResult:
    """Run git and return the result whatever the exit status.

    Raises:
        GitCommandError: git could not be started at all
    """
    cmd = ["git", *args]
    log.debug(f"[GIT] {' '.join(cmd)} (cwd={cwd})")
    try:
        proc = subprocess.run(cmd, cwd=cwd, capture_output=True, check=False)
    except OSError as e:
        raise GitCommandError(args, f"could not run git: {e}") from e
    return GitResult(proc.returncode, _decode(proc.stdout), _decode(proc.stderr))


def run_git(args: Sequence[str], cwd: str | Path | None = None) -> str:
    """Run git and return stdout.

    Raises:
        GitCommandError: git failed to start or exited non-zero
    """
    result = run_git_raw(args, cwd)
    if not result.ok:
        raise GitCommandError(args, result.stderr or result.stdout, result.returncode)
    return result.stdout
