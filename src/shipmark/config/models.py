"""Configuration models.

Keys may be written in camelCase (``tagPrefix``) or snake_case
(``tag_prefix``). Every section is optional and missing keys take the
defaults below.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shipmark.core.commits import COMMIT_TYPES
from shipmark.core.version import PrereleaseChannel
from shipmark.handlers.base import FileConfig, normalize_file_config


class _Section(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ChangelogConfig(_Section):
    """Changelog generation settings."""

    file: Path = Path("CHANGELOG.md")
    types: dict[str, str] = Field(default_factory=lambda: dict(COMMIT_TYPES))
    include_hash: bool = True
    include_date: bool = True
    include_author: bool = False


class VersionConfig(_Section):
    """Version files, tag and release commit settings."""

    files: list[str | FileConfig] = Field(default_factory=lambda: ["package.json"])
    tag_prefix: str = "v"
    tag_message: str = "Release {version}"
    commit_message: str = "chore(release): {version}"
    prerelease_channel: PrereleaseChannel = PrereleaseChannel.ALPHA

    @property
    def file_entries(self) -> list[FileConfig]:
        """Configured version files, with bare paths expanded."""
        return [normalize_file_config(entry) for entry in self.files]

    def tag_name(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"


class CommitsConfig(_Section):
    """Commit parsing settings."""

    conventional: bool = True
    allow_custom_types: bool = True


class GitConfig(_Section):
    """Push and signing behaviour."""

    push: bool = True
    push_tags: bool = True
    sign_tags: bool = False
    sign_commits: bool = False


class ShipmarkConfig(_Section):
    """Root configuration."""

    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    git: GitConfig = Field(default_factory=GitConfig)
