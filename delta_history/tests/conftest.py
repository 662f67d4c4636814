import os
import shutil
import subprocess
import sys
from typing import Iterator

import pytest

# Ensure local src path is importable
_here = os.path.dirname(os.path.dirname(__file__))  # delta_history folder
_src = os.path.join(_here, "src")
if os.path.isdir(_src) and _src not in sys.path:
    sys.path.insert(0, _src)

from delta_history.git.models import Commit, FileStatus, GitFile, WorkingDirectoryStatus  # noqa: E402
from delta_history.utils.errors import GitCommandError  # noqa: E402

SCENARIO_A_DIFF = "@@ -1,2 +1,3 @@\n context\n-old line\n+new line 1\n+new line 2\n"

SAMPLE_DIFF = (
    "diff --git a/app.py b/app.py\n"
    "index 1111111..2222222 100644\n"
    "--- a/app.py\n"
    "+++ b/app.py\n"
    "@@ -1,4 +1,4 @@\n"
    " import os\n"
    "-print('old line')\n"
    "+print('new line')\n"
    " x = 1\n"
    " y = 2\n"
    "@@ -10,3 +10,4 @@ def main():\n"
    "     a = 1\n"
    "+    b = 2\n"
    "     return a\n"
)


def make_commit(index: int, subject: str | None = None, body: str = "") -> Commit:
    """Deterministic commit with a 40-char hash derived from ``index``."""
    full = f"{index:040x}"
    return Commit(
        hash=full,
        short_hash=full[:7],
        date=f"2024-01-{index + 1:02d} 12:00:00",
        author_name="Ada Lovelace",
        author_email="ada@example.com",
        committer_name="Ada Lovelace",
        committer_email="ada@example.com",
        committer_date=f"2024-01-{index + 1:02d} 12:00:00",
        subject=subject or f"Commit number {index}",
        body=body,
    )


class FakeGit:
    """In-memory git collaborator recording every call the session makes."""

    def __init__(self, commits=None, diffs=None, status=WorkingDirectoryStatus.CLEAN, files=None):
        self.commits = list(commits if commits is not None else [make_commit(i) for i in range(5)])
        self.diffs = dict(diffs or {})
        self.status = status
        self.files = list(files or [GitFile("app.py", FileStatus.MODIFIED), GitFile("docs/readme.md")])
        self.rename_map: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.working_diff = SCENARIO_A_DIFF

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise GitCommandError([name], f"{name} failed", 128)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def fetch_commit_history(self, file_path, follow_renames=True, first_parent=False):
        self._record("fetch_commit_history", file_path, follow_renames, first_parent)
        return self.commits

    def get_commit_parents(self, commit_hash):
        self._record("get_commit_parents", commit_hash)
        hashes = [c.hash for c in self.commits]
        if commit_hash in hashes:
            i = hashes.index(commit_hash)
            return hashes[i + 1:i + 2]
        return []

    def build_rename_map(self, file_path):
        self._record("build_rename_map", file_path)
        return dict(self.rename_map)

    def fetch_diff(self, commit_hash, parent_hash, file_path, context_lines=3):
        self._record("fetch_diff", commit_hash, parent_hash, file_path, context_lines)
        return self.diffs.get(commit_hash, SAMPLE_DIFF)

    def diff_between(self, older_hash, newer_hash, file_path, context_lines=3):
        self._record("diff_between", older_hash, newer_hash, file_path, context_lines)
        return SCENARIO_A_DIFF

    def check_working_directory_status(self, file_path):
        self._record("check_working_directory_status", file_path)
        return self.status

    def working_directory_diff(self, file_path, context_lines=3):
        self._record("working_directory_diff", file_path, context_lines)
        return self.working_diff

    def list_files(self):
        self._record("list_files")
        return list(self.files)


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def sample_diff() -> str:
    return SAMPLE_DIFF


@pytest.fixture
def scenario_a_diff() -> str:
    return SCENARIO_A_DIFF


def _git(repo: str, *args: str) -> str:
    env = dict(os.environ)
    env.update(
        GIT_AUTHOR_NAME="Test Author",
        GIT_AUTHOR_EMAIL="author@example.com",
        GIT_COMMITTER_NAME="Test Author",
        GIT_COMMITTER_EMAIL="author@example.com",
        GIT_CONFIG_GLOBAL=os.devnull,
        GIT_CONFIG_SYSTEM=os.devnull,
    )
    proc = subprocess.run(["git", *args], cwd=repo, env=env, capture_output=True, text=True, check=True)
    return proc.stdout


@pytest.fixture
def git_repo(tmp_path) -> Iterator[str]:
    """Small repository: notes.txt gets three commits, then is renamed to story.txt.

    Skipped when the git executable is not available.
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = str(tmp_path / "repo")
    os.makedirs(repo)
    _git(repo, "init", "-q", "-b", "main")

    def write(name: str, content: str):
        with open(os.path.join(repo, name), "w", encoding="utf-8") as f:
            f.write(content)

    write("notes.txt", "alpha\nbeta\n")
    _git(repo, "add", "notes.txt")
    _git(repo, "commit", "-q", "-m", "Add notes")

    write("notes.txt", "alpha\nbeta\ngamma\n")
    _git(repo, "commit", "-q", "-am", "Add gamma")

    write("notes.txt", "alpha\nBETA\ngamma\n")
    _git(repo, "commit", "-q", "-am", "Shout beta (#42)")

    _git(repo, "mv", "notes.txt", "story.txt")
    _git(repo, "commit", "-q", "-m", "Rename notes to story")

    write("other.txt", "unrelated\n")
    _git(repo, "add", "other.txt")
    _git(repo, "commit", "-q", "-m", "Add other file")
    _git(repo, "tag", "v1.0")

    yield repo
