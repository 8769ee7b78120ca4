"""Git operations.

A thin wrapper over the ``git`` command line. Commands are run as argument
lists without a shell; failures raise :class:`GitError` with git's stderr.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from shipmark.core.commits import RawCommit
from shipmark.exceptions import GitError

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
LOG_FORMAT = FIELD_SEPARATOR.join(["%H", "%h", "%s", "%b", "%an", "%ad"]) + RECORD_SEPARATOR

SSH_REMOTE_PATTERN = re.compile(r"^(?:ssh://)?git@([^:/]+)[:/](.+?)(?:\.git)?/?$")


class GitRepository:
    """A git working tree."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()

    def _run(self, *args: str) -> str:
        command = ["git", *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found", ["Install git and retry"]) from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"Git command failed: {' '.join(command)}",
                [e.stderr.strip()] if e.stderr else [],
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    def _run_safe(self, *args: str) -> str | None:
        try:
            return self._run(*args)
        except GitError:
            return None

    # -------------------------------------------------------------------------
    # Repository state
    # -------------------------------------------------------------------------

    def is_repo(self) -> bool:
        return self._run_safe("rev-parse", "--is-inside-work-tree") == "true"

    def init(self) -> None:
        self._run("init", "-q")

    def ensure_repo(self) -> None:
        """Raise GitError unless :attr:`path` is inside a git work tree."""
        if not self.is_repo():
            raise GitError(
                "Not a git repository",
                ["Make sure you are in a git repository", "Run: git init"],
            )

    def has_commits(self) -> bool:
        return self._run_safe("rev-parse", "HEAD") is not None

    def has_remote(self) -> bool:
        return bool(self._run_safe("remote"))

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD")

    def get_remote_url(self, remote: str = "origin") -> str | None:
        return self._run_safe("remote", "get-url", remote)

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain"))

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def get_tags(self) -> list[str]:
        """All tags, highest version first."""
        output = self._run_safe("tag", "--sort=-v:refname")
        return [tag for tag in output.splitlines() if tag] if output else []

    def get_latest_tag(self) -> str | None:
        """The most recent tag reachable from HEAD."""
        return self._run_safe("describe", "--tags", "--abbrev=0") or None

    def tag_exists(self, name: str) -> bool:
        return self._run_safe("rev-parse", "--verify", "--quiet", f"refs/tags/{name}") is not None

    def create_tag(self, name: str, message: str, sign: bool = False) -> None:
        self._run("tag", "-s" if sign else "-a", name, "-m", message)

    def delete_tag(self, name: str) -> None:
        self._run("tag", "-d", name)

    def push_tag(self, name: str, remote: str = "origin") -> None:
        self._run("push", remote, f"refs/tags/{name}")

    def delete_remote_tag(self, name: str, remote: str = "origin") -> None:
        self._run("push", remote, f":refs/tags/{name}")

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def count_commits_since(self, tag: str | None = None) -> int:
        revision = f"{tag}..HEAD" if tag else "HEAD"
        count = self._run_safe("rev-list", "--count", revision)
        return int(count) if count else 0

    def log(self, from_ref: str | None = None, to_ref: str = "HEAD") -> str:
        """Raw ``git log`` output between two refs, in :data:`LOG_FORMAT`."""
        revision = f"{from_ref}..{to_ref}" if from_ref else to_ref
        return self._run("log", revision, f"--pretty=format:{LOG_FORMAT}", "--date=short")

    def get_commits(self, from_ref: str | None = None, to_ref: str = "HEAD") -> list[RawCommit]:
        return parse_log_output(self.log(from_ref, to_ref))

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def commit(self, message: str, files: list[str] | None = None, sign: bool = False) -> None:
        if files:
            self._run("add", "--", *files)
        args = ["commit", "-m", message]
        if sign:
            args.insert(1, "-S")
        self._run(*args)

    def push(self, include_tags: bool = True) -> None:
        self._run("push")
        if include_tags:
            self._run("push", "--tags")


def parse_log_output(output: str) -> list[RawCommit]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
    commits = []
    for record in output.split(RECORD_SEPARATOR):
        record = record.strip()
        if not record:
            continue
        fields = record.split(FIELD_SEPARATOR)
        fields += [""] * (6 - len(fields))
        commit_hash, short_hash, subject, body, author, date = fields[:6]
        if not commit_hash:
            continue
        commits.append(
            RawCommit(
                hash=commit_hash,
                short_hash=short_hash,
                subject=subject,
                body=body.strip(),
                author=author,
                date=date,
            )
        )
    return commits


def normalize_remote_url(url: str | None) -> str | None:
    """Turn a git remote URL into a browsable https URL.

    ``git@github.com:owner/repo.git`` and ``https://github.com/owner/repo.git``
    both become ``https://github.com/owner/repo``.
    """
    if not url:
        return None
    url = url.strip()
    match = SSH_REMOTE_PATTERN.match(url)
    if match:
        host, repo_path = match.groups()
        return f"https://{host}/{repo_path}"
    url = url.removesuffix("/")
    return url.removesuffix(".git")
