"""Git collaborator: every subprocess call Delta History makes lives here."""

from .diff import FILE_ABSENT_MESSAGE, diff_between, fetch_diff
from .files import find_repo_root, list_repository_files, verify_file_in_repo
from .history import build_rename_map, fetch_commit_history, get_commit_parents
from .models import WORKING_DIR_HASH, Commit, FileStatus, GitFile, WorkingDirectoryStatus
from .repository import GitRepository
from .working import CLEAN_MESSAGE, check_working_directory_status, working_directory_diff

__all__ = [
    "CLEAN_MESSAGE",
    "FILE_ABSENT_MESSAGE",
    "WORKING_DIR_HASH",
    "Commit",
    "FileStatus",
    "GitFile",
    "GitRepository",
    "WorkingDirectoryStatus",
    "build_rename_map",
    "check_working_directory_status",
    "diff_between",
    "fetch_commit_history",
    "fetch_diff",
    "find_repo_root",
    "get_commit_parents",
    "list_repository_files",
    "verify_file_in_repo",
    "working_directory_diff",
]
