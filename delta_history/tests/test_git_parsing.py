"""Tests for git output parsing and the subprocess-backed collaborator."""

import os
import shutil
import time

import pytest

from delta_history.git import (
    CLEAN_MESSAGE,
    FILE_ABSENT_MESSAGE,
    FileStatus,
    GitRepository,
    WorkingDirectoryStatus,
    find_repo_root,
    verify_file_in_repo,
)
from delta_history.git.files import format_age, format_file_size, parse_status_porcelain
from delta_history.git.history import parse_log_output, parse_rename_log, parse_stat_summary
from delta_history.utils.errors import FileNotInRepositoryError, GitCommandError, NotAGitRepositoryError

HASH_A = "a" * 40
HASH_B = "b" * 40
HASH_C = "c" * 40


class TestParseLogOutput:
    def test_parses_records(self):
        stdout = (
            f"{HASH_A}\x00aaaaaaa\x002024-05-01 10:00:00\x00Ada\x00ada@example.com\x00"
            "Bob\x00bob@example.com\x002024-05-02 11:00:00\x00Fix parser\x00Longer body\n\x1e\n"
            f"{HASH_B}\x00bbbbbbb\x002024-04-01 09:00:00\x00Ada\x00ada@example.com\x00"
            "Ada\x00ada@example.com\x002024-04-01 09:00:00\x00Initial\x00\x1e\n"
        )
        commits = parse_log_output(stdout)

        assert [c.hash for c in commits] == [HASH_A, HASH_B]
        first = commits[0]
        assert first.short_hash == "aaaaaaa"
        assert first.subject == "Fix parser"
        assert first.body == "Longer body"
        assert first.committer == "Bob <bob@example.com>"
        assert first.message == "Fix parser\n\nLonger body"
        assert commits[1].body == ""

    def test_empty_output(self):
        assert parse_log_output("") == []

    def test_separator_inside_body_is_kept(self):
        stdout = f"{HASH_A}\x00aaaaaaa\x00d\x00n\x00e\x00n\x00e\x00d\x00Subject\x00body\x00more\x1e"
        commit = parse_log_output(stdout)[0]
        assert commit.subject == "Subject"
        assert commit.body == "body\x00more"


class TestParseRenameLog:
    def test_rename_switches_path_for_older_commits(self):
        stdout = (
            f"{HASH_A}\n\nM\tnew.txt\n"
            f"{HASH_B}\n\nR100\told.txt\tnew.txt\n"
            f"{HASH_C}\n\nA\told.txt\n"
        )
        rename_map = parse_rename_log(stdout, "new.txt")
        assert rename_map == {HASH_A: "new.txt", HASH_B: "new.txt", HASH_C: "old.txt"}

    def test_no_renames(self):
        stdout = f"{HASH_A}\n\nM\tfile.py\n{HASH_B}\n\nA\tfile.py\n"
        assert parse_rename_log(stdout, "file.py") == {HASH_A: "file.py", HASH_B: "file.py"}


class TestParseStatus:
    def test_porcelain_statuses(self):
        stdout = " M mod.py\0M  staged.py\0MM both.py\0?? new.py\0R  moved.py\0orig.py\0"
        statuses = parse_status_porcelain(stdout)
        assert statuses == {
            "mod.py": FileStatus.MODIFIED,
            "staged.py": FileStatus.STAGED,
            "both.py": FileStatus.MIXED,
            "new.py": FileStatus.UNTRACKED,
            "moved.py": FileStatus.STAGED,
        }

    def test_stat_summary(self):
        stats = parse_stat_summary(" a.py | 3 ++-\n 1 file changed, 2 insertions(+), 1 deletion(-)\n")
        assert (stats.files_changed, stats.insertions, stats.deletions) == (1, 2, 1)
        assert parse_stat_summary("") is None

    def test_working_directory_status_flags(self):
        assert WorkingDirectoryStatus.from_flags(False, False) is WorkingDirectoryStatus.CLEAN
        assert WorkingDirectoryStatus.from_flags(True, False) is WorkingDirectoryStatus.STAGED
        assert WorkingDirectoryStatus.from_flags(False, True) is WorkingDirectoryStatus.MODIFIED
        assert WorkingDirectoryStatus.from_flags(True, True) is WorkingDirectoryStatus.MODIFIED_AND_STAGED


class TestFormatting:
    @pytest.mark.parametrize(
        "size, expected",
        [(None, "-"), (0, "0B"), (1023, "1023B"), (2048, "2.0K"), (5 * 1024 * 1024, "5.0M")],
    )
    def test_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_age(self):
        now = 1_000_000.0
        assert format_age(None, now) == "-"
        assert format_age(now - 30, now) == "30s ago"
        assert format_age(now - 600, now) == "10m ago"
        assert format_age(now - 7200, now) == "2h ago"
        assert format_age(now + 100, now) == "unknown"


class TestGitRepository:
    """Exercises the real git executable against a throwaway repository."""

    def test_history_follows_rename(self, git_repo):
        repo = GitRepository(git_repo)
        commits = repo.fetch_commit_history("story.txt")
        assert [c.subject for c in commits] == [
            "Rename notes to story",
            "Shout beta (#42)",
            "Add gamma",
            "Add notes",
        ]
        rename_map = repo.build_rename_map("story.txt")
        assert rename_map[commits[0].hash] == "story.txt"
        assert rename_map[commits[1].hash] == "notes.txt"

    def test_no_follow_stops_at_rename(self, git_repo):
        commits = GitRepository(git_repo).fetch_commit_history("story.txt", follow_renames=False)
        assert len(commits) == 1

    def test_diff_of_commit(self, git_repo):
        repo = GitRepository(git_repo)
        commits = repo.fetch_commit_history("story.txt")
        shout = commits[1]
        parents = repo.get_commit_parents(shout.hash)
        diff = repo.fetch_diff(shout.hash, parents[0], "notes.txt")
        assert "-beta" in diff
        assert "+BETA" in diff

    def test_root_commit_diff(self, git_repo):
        repo = GitRepository(git_repo)
        root = repo.fetch_commit_history("story.txt")[-1]
        assert repo.get_commit_parents(root.hash) == []
        diff = repo.fetch_diff(root.hash, None, "notes.txt")
        assert "+alpha" in diff

    def test_missing_path_returns_sentinel(self, git_repo):
        repo = GitRepository(git_repo)
        root = repo.fetch_commit_history("story.txt")[-1]
        assert repo.fetch_diff(root.hash, None, "no/such/file.txt") in ("", FILE_ABSENT_MESSAGE)

    def test_diff_between(self, git_repo):
        repo = GitRepository(git_repo)
        commits = repo.fetch_commit_history("story.txt")
        diff = repo.diff_between(commits[3].hash, commits[1].hash, "notes.txt")
        assert "+gamma" in diff
        assert "+BETA" in diff

    def test_working_directory(self, git_repo):
        repo = GitRepository(git_repo)
        assert repo.check_working_directory_status("story.txt") is WorkingDirectoryStatus.CLEAN
        assert repo.working_directory_diff("story.txt") == CLEAN_MESSAGE

        with open(os.path.join(git_repo, "story.txt"), "a", encoding="utf-8") as f:
            f.write("delta\n")
        assert repo.check_working_directory_status("story.txt") is WorkingDirectoryStatus.MODIFIED
        assert "+delta" in repo.working_directory_diff("story.txt")

    def test_list_files(self, git_repo):
        with open(os.path.join(git_repo, "scratch.txt"), "w", encoding="utf-8") as f:
            f.write("temp\n")
        files = {f.path: f for f in GitRepository(git_repo).list_files()}
        assert set(files) == {"story.txt", "other.txt", "scratch.txt"}
        assert files["scratch.txt"].status is FileStatus.UNTRACKED
        assert files["story.txt"].size == len("alpha\nBETA\ngamma\n")
        assert files["story.txt"].mtime <= time.time()

    def test_commit_details(self, git_repo):
        repo = GitRepository(git_repo)
        newest = repo.fetch_commit_history("other.txt")[0]
        stats = repo.fetch_commit_stats(newest.hash)
        assert stats.files_changed == 1
        assert stats.insertions == 1
        refs = repo.fetch_commit_refs(newest.hash)
        assert "tag:v1.0" in refs
        assert "branch:main" in refs

    def test_unknown_revision_raises(self, git_repo):
        with pytest.raises(GitCommandError):
            GitRepository(git_repo).get_commit_parents("deadbeef" * 5)


class TestRepositoryDiscovery:
    def test_find_repo_root_from_subdirectory(self, git_repo):
        sub = os.path.join(git_repo, "nested")
        os.makedirs(sub)
        assert os.path.realpath(find_repo_root(sub)) == os.path.realpath(git_repo)

    def test_not_a_repository(self, tmp_path):
        if shutil.which("git") is None:
            pytest.skip("git executable not available")
        with pytest.raises(NotAGitRepositoryError):
            find_repo_root(tmp_path)

    def test_verify_file(self, git_repo):
        assert verify_file_in_repo(git_repo, "story.txt") == "story.txt"
        assert verify_file_in_repo(git_repo, os.path.join(git_repo, "story.txt")) == "story.txt"
        with pytest.raises(FileNotInRepositoryError):
            verify_file_in_repo(git_repo, "missing.txt")
        with pytest.raises(FileNotInRepositoryError):
            verify_file_in_repo(git_repo, "/definitely/outside.txt")
