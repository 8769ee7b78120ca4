"""Core business logic for shipmark.

This module contains the fundamental building blocks:
- Semantic version parsing, comparison and bumping
- Conventional commit parsing and bump derivation
- Changelog rendering and splicing
"""

from __future__ import annotations

from shipmark.core.changelog import (
    generate_changelog_entry,
    preview_changelog,
    splice_changelog,
    update_changelog_file,
)
from shipmark.core.commits import (
    ParsedCommit,
    RawCommit,
    calculate_bump,
    group_commits_by_type,
    parse_commits,
)
from shipmark.core.version import (
    BumpOption,
    BumpType,
    PreRelease,
    PrereleaseChannel,
    Version,
    bump,
    clean,
    compare,
    format_version,
    get_bump_options,
    is_valid,
    parse,
)

__all__ = [
    # Version
    "BumpOption",
    "BumpType",
    # Commits
    "ParsedCommit",
    "PreRelease",
    "PrereleaseChannel",
    "RawCommit",
    "Version",
    "bump",
    "calculate_bump",
    "clean",
    "compare",
    "format_version",
    # Changelog
    "generate_changelog_entry",
    "get_bump_options",
    "group_commits_by_type",
    "is_valid",
    "parse",
    "parse_commits",
    "preview_changelog",
    "splice_changelog",
    "update_changelog_file",
]
