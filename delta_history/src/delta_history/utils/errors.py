"""Exception hierarchy for Delta History."""

from __future__ import annotations

from typing import Sequence


class DeltaHistoryError(Exception):
    """Base class for recoverable application errors."""


class GitCommandError(DeltaHistoryError):
    """A git invocation failed or could not be started."""

    def __init__(self, args: Sequence[str], message: str, returncode: int | None = None):
        self.git_args = list(args)
        self.message = message.strip()
        self.returncode = returncode
        super().__init__(self.message or f"git {' '.join(self.git_args)} failed")

    @property
    def command(self) -> str:
        return "git " + " ".join(self.git_args)


class NotAGitRepositoryError(DeltaHistoryError):
    """The given path is not inside a git work tree."""


class FileNotInRepositoryError(DeltaHistoryError):
    """The given file is not tracked by (or not inside) the repository."""


class ConfigError(Exception):
    """Configuration validation error."""
