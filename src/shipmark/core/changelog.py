"""Changelog generation from conventional commits.

Renders one markdown entry per release and splices it into an existing
CHANGELOG.md: an entry for the same version is replaced, otherwise the new
entry goes directly below the file header.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from shipmark.core.commits import (
    BREAKING_GROUP,
    COMMIT_TYPE_ORDER,
    COMMIT_TYPES,
    group_commits_by_type,
    sort_commit_groups,
)
from shipmark.exceptions import ChangelogError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from shipmark.config.models import ChangelogConfig
    from shipmark.core.commits import ParsedCommit

CHANGELOG_HEADER = (
    "# Changelog\n\nAll notable changes to this project will be documented in this file.\n\n"
)
BREAKING_TITLE = "⚠ BREAKING CHANGES"
ENTRY_HEADING = re.compile(r"^## \[?\d+\.\d+\.\d+", re.MULTILINE)


def generate_changelog_entry(
    version: str,
    date: str,
    commits: Iterable[ParsedCommit],
    config: ChangelogConfig,
    repo_url: str | None = None,
) -> str:
    """Render the changelog entry for one release.

    Args:
        version: Version being released, without tag prefix
        date: Release date (YYYY-MM-DD)
        commits: Parsed commits included in the release
        config: Changelog configuration
        repo_url: Browsable repository URL used for links, if known

    Returns:
        Markdown for the entry, ending with a blank line
    """
    heading = f"[{version}]({repo_url}/releases/tag/v{version})" if repo_url else version
    if config.include_date:
        heading = f"{heading} ({date})"
    lines = [f"## {heading}", ""]

    labels = type_labels(config)
    groups = sort_commit_groups(group_commits_by_type(commits, labels), COMMIT_TYPE_ORDER)

    for group, group_commits in groups.items():
        title = BREAKING_TITLE if group == BREAKING_GROUP else labels.get(group, group)
        lines.append(f"### {title}")
        lines.append("")
        lines.extend(_format_commit_line(commit, config, repo_url) for commit in group_commits)
        lines.append("")

    return "\n".join(lines) + "\n"


def _format_commit_line(
    commit: ParsedCommit,
    config: ChangelogConfig,
    repo_url: str | None,
) -> str:
    line = "- "
    if commit.scope:
        line += f"**{commit.scope}:** "
    line += commit.subject

    if config.include_hash and repo_url:
        line += f" ([{commit.short_hash}]({repo_url}/commit/{commit.hash}))"
    elif config.include_hash:
        line += f" ({commit.short_hash})"

    if config.include_author and commit.author:
        line += f" by {commit.author}"

    if commit.breaking and commit.breaking_note:
        line += f"\n  - {commit.breaking_note}"

    return line


def splice_changelog(existing: str, entry: str, version: str) -> str:
    """Insert ``entry`` into the existing changelog text.

    An existing entry for ``version`` is replaced in place. Otherwise the
    entry is inserted after the ``# Changelog`` header, above the newest
    release, or a new changelog is started when there is no header.
    """
    version_heading = re.compile(rf"^## \[?{re.escape(version)}(?:\]|\s|$)", re.MULTILINE)
    current = version_heading.search(existing)
    if current:
        start = current.start()
        following = ENTRY_HEADING.search(existing, current.end())
        if following:
            return existing[:start] + entry + existing[following.start() :]
        return existing[:start] + entry

    if existing.startswith("# Changelog"):
        newest = ENTRY_HEADING.search(existing)
        if newest:
            return existing[: newest.start()] + entry + existing[newest.start() :]
        return existing.rstrip("\n") + "\n\n" + entry

    return CHANGELOG_HEADER + entry


def update_changelog_file(path: Path, entry: str, version: str) -> None:
    """Write ``entry`` into the changelog at ``path``, creating the file if needed."""
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
        path.write_text(splice_changelog(existing, entry, version), encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Could not update {path.name}: {e}") from e


def preview_changelog(
    commits: Iterable[ParsedCommit],
    labels: Mapping[str, str],
) -> list[str]:
    """Plain-text summary of the entry, one line per group and commit."""
    groups = sort_commit_groups(group_commits_by_type(commits, labels), COMMIT_TYPE_ORDER)
    lines: list[str] = []
    for group, group_commits in groups.items():
        title = BREAKING_TITLE if group == BREAKING_GROUP else labels.get(group, group)
        lines.append(f"{title}:")
        for commit in group_commits:
            scope = f"({commit.scope}) " if commit.scope else ""
            lines.append(f"  - {scope}{commit.subject}")
    return lines


def type_labels(config: ChangelogConfig) -> dict[str, str]:
    """Section titles per commit type, with configured overrides applied."""
    return {**COMMIT_TYPES, **config.types}
