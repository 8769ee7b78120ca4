"""Tests for git operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipmark.exceptions import GitError
from shipmark.vcs import GitRepository, normalize_remote_url, parse_log_output
from shipmark.vcs.git import FIELD_SEPARATOR, RECORD_SEPARATOR


def record(*fields: str) -> str:
    return FIELD_SEPARATOR.join(fields) + RECORD_SEPARATOR


class TestParseLogOutput:
    """Tests for parse_log_output()."""

    def test_single_commit(self):
        """Every field of a record is read."""
        output = record("abc123def", "abc123d", "feat: add x", "", "Jane", "2024-06-01")

        [commit] = parse_log_output(output)

        assert commit.hash == "abc123def"
        assert commit.short_hash == "abc123d"
        assert commit.subject == "feat: add x"
        assert commit.body == ""
        assert commit.author == "Jane"
        assert commit.date == "2024-06-01"

    def test_multiline_body(self):
        """Bodies keep their inner newlines."""
        body = "Longer description.\n\nBREAKING CHANGE: removed y\n"
        output = record("1" * 40, "1111111", "feat!: drop y", body, "Jane", "2024-06-01")

        [commit] = parse_log_output(output)

        assert commit.body == "Longer description.\n\nBREAKING CHANGE: removed y"

    def test_several_commits(self):
        """Records are returned in log order."""
        output = "\n".join(
            [
                record("a" * 40, "aaaaaaa", "fix: one", "", "A", "2024-06-02"),
                record("b" * 40, "bbbbbbb", "feat: two", "", "B", "2024-06-01"),
            ]
        )

        assert [c.subject for c in parse_log_output(output)] == ["fix: one", "feat: two"]

    def test_empty_output(self):
        """No output means no commits."""
        assert parse_log_output("") == []


class TestNormalizeRemoteUrl:
    """Tests for normalize_remote_url()."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("git@github.com:owner/repo.git", "https://github.com/owner/repo"),
            ("git@gitlab.com:group/sub/repo", "https://gitlab.com/group/sub/repo"),
            ("ssh://git@github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("https://github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("https://github.com/owner/repo/", "https://github.com/owner/repo"),
        ],
    )
    def test_normalizes(self, url: str, expected: str):
        """SSH and HTTPS remotes become browsable URLs."""
        assert normalize_remote_url(url) == expected

    def test_none(self):
        """No remote gives no URL."""
        assert normalize_remote_url(None) is None
        assert normalize_remote_url("") is None


class TestGitRepository:
    """Tests for GitRepository against a real repository."""

    def test_not_a_repo(self, tmp_path: Path):
        """ensure_repo() explains how to create a repository."""
        repo = GitRepository(tmp_path)

        assert not repo.is_repo()
        with pytest.raises(GitError, match="Not a git repository") as excinfo:
            repo.ensure_repo()
        assert "Run: git init" in excinfo.value.suggestions

    def test_repo_state(self, temp_git_repo: Path):
        """A fresh repository has commits, no remote and a clean tree."""
        repo = GitRepository(temp_git_repo)

        assert repo.is_repo()
        assert repo.has_commits()
        assert not repo.has_remote()
        assert repo.get_remote_url() is None
        assert not repo.is_dirty()

    def test_dirty(self, temp_git_repo: Path):
        """A modified file makes the tree dirty."""
        (temp_git_repo / "package.json").write_text('{"version": "1.0.1"}\n')

        assert GitRepository(temp_git_repo).is_dirty()

    def test_remote_url(self, temp_git_repo: Path, git):
        """The origin URL is returned as configured."""
        git(temp_git_repo, "remote", "add", "origin", "git@github.com:owner/repo.git")
        repo = GitRepository(temp_git_repo)

        assert repo.has_remote()
        assert repo.get_remote_url() == "git@github.com:owner/repo.git"

    def test_tags(self, temp_git_repo: Path):
        """Tags sort by version and can be deleted."""
        repo = GitRepository(temp_git_repo)
        assert repo.get_tags() == []
        assert repo.get_latest_tag() is None

        repo.create_tag("v1.0.0", "Release 1.0.0")
        repo.create_tag("v1.10.0", "Release 1.10.0")
        repo.create_tag("v1.2.0", "Release 1.2.0")

        assert repo.get_tags() == ["v1.10.0", "v1.2.0", "v1.0.0"]
        assert repo.tag_exists("v1.2.0")
        assert not repo.tag_exists("v9.9.9")

        repo.delete_tag("v1.2.0")
        assert not repo.tag_exists("v1.2.0")

    def test_commits_since_tag(self, temp_git_repo: Path, git):
        """Commits after a tag are counted and parsed newest first."""
        repo = GitRepository(temp_git_repo)
        repo.create_tag("v1.0.0", "Release 1.0.0")
        (temp_git_repo / "a.txt").write_text("a\n")
        repo.commit("feat(core): add a", ["a.txt"])
        (temp_git_repo / "b.txt").write_text("b\n")
        git(temp_git_repo, "add", "b.txt")
        git(temp_git_repo, "commit", "-q", "-m", "fix: handle b", "-m", "BREAKING CHANGE: b is required")

        commits = repo.get_commits(repo.get_latest_tag())

        assert repo.get_latest_tag() == "v1.0.0"
        assert repo.count_commits_since("v1.0.0") == 2
        assert repo.count_commits_since() == 3
        assert [c.subject for c in commits] == ["fix: handle b", "feat(core): add a"]
        assert commits[0].body == "BREAKING CHANGE: b is required"
        assert commits[0].author == "Test"

    def test_all_commits(self, temp_git_repo: Path):
        """Without a tag the whole history is returned."""
        [commit] = GitRepository(temp_git_repo).get_commits()

        assert commit.subject == "chore: initial commit"
        assert len(commit.hash) == 40

    def test_commit_stages_files(self, temp_git_repo: Path, git):
        """commit() stages the given files."""
        (temp_git_repo / "package.json").write_text('{"version": "1.1.0"}\n')
        repo = GitRepository(temp_git_repo)

        repo.commit("chore(release): 1.1.0", ["package.json"])

        assert not repo.is_dirty()
        assert git(temp_git_repo, "log", "-1", "--pretty=%s") == "chore(release): 1.1.0"

    def test_failed_command_raises(self, temp_git_repo: Path):
        """A failing git command raises GitError with stderr."""
        repo = GitRepository(temp_git_repo)

        with pytest.raises(GitError, match="Git command failed") as excinfo:
            repo.create_tag("bad..name", "x")

        assert excinfo.value.stderr

    def test_current_branch(self, temp_git_repo: Path, git):
        """current_branch() matches git's own answer."""
        assert GitRepository(temp_git_repo).current_branch() == git(
            temp_git_repo, "rev-parse", "--abbrev-ref", "HEAD"
        )

    def test_init(self, tmp_path: Path):
        """init() turns a plain directory into a repository."""
        repo = GitRepository(tmp_path)

        repo.init()

        assert repo.is_repo()
        assert not repo.has_commits()

    def test_push_and_delete_remote_tag(self, temp_git_repo: Path, tmp_path_factory, git):
        """A single tag can be pushed to and removed from the remote."""
        remote = tmp_path_factory.mktemp("remote")
        git(remote, "init", "-q", "--bare")
        git(temp_git_repo, "remote", "add", "origin", str(remote))
        repo = GitRepository(temp_git_repo)
        repo.create_tag("v1.0.0", "Release 1.0.0")
        repo.create_tag("v0.9.0", "Release 0.9.0")

        repo.push_tag("v1.0.0")

        assert git(remote, "tag", "--list") == "v1.0.0"

        repo.delete_remote_tag("v1.0.0")

        assert git(remote, "tag", "--list") == ""
        assert repo.tag_exists("v1.0.0")
