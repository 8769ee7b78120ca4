"""Conventional commit parsing.

Turns raw commits from git into typed records and derives the version bump
they call for. Subjects follow ``type(scope)!: subject``; a ``!`` or a
``BREAKING CHANGE:`` line in the body marks a breaking change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shipmark.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

CONVENTIONAL_PATTERN = re.compile(r"^(\w+)(?:\(([^)]+)\))?(!)?:\s*(.+)$")
BREAKING_CHANGE_PATTERN = re.compile(r"^BREAKING[ -]?CHANGE:\s*(.+)$", re.IGNORECASE | re.MULTILINE)

OTHER_TYPE = "other"
BREAKING_GROUP = "breaking"

COMMIT_TYPES: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "docs": "Documentation",
    "style": "Styles",
    "refactor": "Code Refactoring",
    "perf": "Performance Improvements",
    "test": "Tests",
    "build": "Build System",
    "ci": "Continuous Integration",
    "chore": "Chores",
    "revert": "Reverts",
}

COMMIT_TYPE_ORDER = [
    BREAKING_GROUP,
    "feat",
    "fix",
    "perf",
    "refactor",
    "docs",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
]

# Types that never warrant a release on their own
INSIGNIFICANT_TYPES = frozenset({"chore", "ci", "build", "style"})


@dataclass(frozen=True)
class RawCommit:
    """A commit as reported by ``git log``."""

    hash: str
    short_hash: str
    subject: str
    body: str
    author: str
    date: str


@dataclass(frozen=True)
class ParsedCommit:
    """A commit classified by the conventional commit grammar."""

    hash: str
    short_hash: str
    type: str
    subject: str
    body: str
    author: str
    date: str
    scope: str | None = None
    breaking: bool = False
    breaking_note: str | None = None

    @property
    def is_conventional(self) -> bool:
        return self.type != OTHER_TYPE

    @classmethod
    def from_raw(
        cls,
        commit: RawCommit,
        known_types: Collection[str] | None = None,
    ) -> ParsedCommit:
        """Parse a raw commit.

        Commits whose subject does not follow the grammar get type ``other``
        and are never breaking. When ``known_types`` is given, a commit of
        any other type is treated the same way.
        """
        match = CONVENTIONAL_PATTERN.match(commit.subject)
        if match and known_types is not None and match.group(1).lower() not in known_types:
            match = None
        if not match:
            return cls(
                hash=commit.hash,
                short_hash=commit.short_hash,
                type=OTHER_TYPE,
                subject=commit.subject,
                body=commit.body,
                author=commit.author,
                date=commit.date,
            )

        commit_type, scope, bang, subject = match.groups()
        note_match = BREAKING_CHANGE_PATTERN.search(commit.body)
        breaking_note = note_match.group(1).strip() if note_match else None

        return cls(
            hash=commit.hash,
            short_hash=commit.short_hash,
            type=commit_type.lower(),
            subject=subject,
            body=commit.body,
            author=commit.author,
            date=commit.date,
            scope=scope or None,
            breaking=bool(bang) or breaking_note is not None,
            breaking_note=breaking_note,
        )


def parse_commits(
    commits: Iterable[RawCommit],
    known_types: Collection[str] | None = None,
) -> list[ParsedCommit]:
    return [ParsedCommit.from_raw(commit, known_types) for commit in commits]


def group_commits_by_type(
    commits: Iterable[ParsedCommit],
    type_labels: Mapping[str, str],
) -> dict[str, list[ParsedCommit]]:
    """Group commits under their type.

    Breaking commits additionally form a ``breaking`` group, which comes
    first. Commits whose type has no label are left out.
    """
    commits = list(commits)
    groups: dict[str, list[ParsedCommit]] = {}

    breaking = [commit for commit in commits if commit.breaking]
    if breaking:
        groups[BREAKING_GROUP] = breaking

    for commit in commits:
        if commit.type == OTHER_TYPE or commit.type not in type_labels:
            continue
        groups.setdefault(commit.type, []).append(commit)

    return groups


def sort_commit_groups(
    groups: Mapping[str, list[ParsedCommit]],
    order: Iterable[str],
) -> dict[str, list[ParsedCommit]]:
    """Order groups by ``order``; groups not listed keep their order at the end."""
    result: dict[str, list[ParsedCommit]] = {}
    for commit_type in order:
        if groups.get(commit_type):
            result[commit_type] = groups[commit_type]
    for commit_type, commits in groups.items():
        if commit_type not in result and commits:
            result[commit_type] = commits
    return result


def filter_significant_commits(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    """Drop housekeeping commits (chore, ci, build, style) unless breaking."""
    return [
        commit
        for commit in commits
        if commit.breaking or commit.type not in INSIGNIFICANT_TYPES
    ]


def calculate_bump(
    commits: Iterable[ParsedCommit],
    conventional: bool = True,
) -> BumpType | None:
    """Derive the bump the commits call for.

    Any breaking commit means a major bump, any ``feat`` a minor bump and
    any other conventional commit a patch bump. Returns None when no
    conventional commit is present.

    With ``conventional=False`` commit messages carry no meaning: any
    commit at all calls for a patch bump.
    """
    if not conventional:
        return BumpType.PATCH if any(True for _ in commits) else None

    bump: BumpType | None = None
    for commit in commits:
        if commit.breaking:
            return BumpType.MAJOR
        if commit.type == "feat":
            bump = BumpType.MINOR
        elif commit.is_conventional and bump is None:
            bump = BumpType.PATCH
    return bump
