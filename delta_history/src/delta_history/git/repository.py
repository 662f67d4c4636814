from __future__ import annotations

from pathlib import Path

from . import diff, files, history, working
from .models import Commit, GitFile, WorkingDirectoryStatus


class GitRepository:
    """The git collaborator bound to one repository root.

    The session only talks to git through this object, so tests can hand
    it any object with the same methods.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"GitRepository({str(self.root)!r})"

    def fetch_commit_history(self, file_path: str, follow_renames: bool = True, first_parent: bool = False) -> list[Commit]:
        return history.fetch_commit_history(self.root, file_path, follow_renames, first_parent)

    def get_commit_parents(self, commit_hash: str) -> list[str]:
        return history.get_commit_parents(self.root, commit_hash)

    def build_rename_map(self, file_path: str) -> dict[str, str]:
        return history.build_rename_map(self.root, file_path)

    def fetch_commit_stats(self, commit_hash: str) -> history.CommitStats | None:
        return history.fetch_commit_stats(self.root, commit_hash)

    def fetch_commit_refs(self, commit_hash: str) -> list[str]:
        return history.fetch_commit_refs(self.root, commit_hash)

    def fetch_diff(self, commit_hash: str, parent_hash: str | None, file_path: str, context_lines: int = 3) -> str:
        return diff.fetch_diff(self.root, commit_hash, parent_hash, file_path, context_lines)

    def diff_between(self, older_hash: str, newer_hash: str, file_path: str, context_lines: int = 3) -> str:
        return diff.diff_between(self.root, older_hash, newer_hash, file_path, context_lines)

    def check_working_directory_status(self, file_path: str) -> WorkingDirectoryStatus:
        return working.check_working_directory_status(self.root, file_path)

    def working_directory_diff(self, file_path: str, context_lines: int = 3) -> str:
        return working.working_directory_diff(self.root, file_path, context_lines)

    def list_files(self) -> list[GitFile]:
        return files.list_repository_files(self.root)
