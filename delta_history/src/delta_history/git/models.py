from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

WORKING_DIR_HASH = "WORKING_DIR"
WORKING_DIR_SHORT_HASH = "WD"


class WorkingDirectoryStatus(Enum):
    CLEAN = "Clean"
    MODIFIED = "Modified"
    STAGED = "Staged"
    MODIFIED_AND_STAGED = "Modified + Staged"

    @property
    def has_changes(self) -> bool:
        return self is not WorkingDirectoryStatus.CLEAN

    @classmethod
    def from_flags(cls, staged: bool, unstaged: bool) -> WorkingDirectoryStatus:
        if staged and unstaged:
            return cls.MODIFIED_AND_STAGED
        if staged:
            return cls.STAGED
        if unstaged:
            return cls.MODIFIED
        return cls.CLEAN


@dataclass(frozen=True)
class Commit:
    """One entry of a file's history, newest first."""

    hash: str
    short_hash: str
    date: str
    author_name: str
    author_email: str
    committer_name: str = ""
    committer_email: str = ""
    committer_date: str = ""
    subject: str = ""
    body: str = ""

    @property
    def is_working_directory(self) -> bool:
        return self.hash == WORKING_DIR_HASH

    @property
    def author(self) -> str:
        if self.author_email:
            return f"{self.author_name} <{self.author_email}>"
        return self.author_name

    @property
    def committer(self) -> str:
        if self.committer_email:
            return f"{self.committer_name} <{self.committer_email}>"
        return self.committer_name

    @property
    def message(self) -> str:
        return f"{self.subject}\n\n{self.body}" if self.body else self.subject

    @property
    def list_label(self) -> str:
        """Text shown for this commit in the history list."""
        return f"{self.short_hash} {self.subject}"

    @classmethod
    def working_directory(cls, status: WorkingDirectoryStatus) -> Commit:
        return cls(
            hash=WORKING_DIR_HASH,
            short_hash=WORKING_DIR_SHORT_HASH,
            date="Now",
            author_name="Working Directory",
            author_email="",
            subject=status.value,
        )


class FileStatus(Enum):
    CLEAN = " "
    MODIFIED = "M"
    STAGED = "A"
    UNTRACKED = "?"
    MIXED = "±"

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True)
class GitFile:
    path: str
    status: FileStatus = FileStatus.CLEAN
    size: int | None = None
    mtime: float | None = None
