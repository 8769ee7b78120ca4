"""Common types for version file handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict


class FileConfig(BaseModel):
    """One manifest whose version is kept in sync.

    ``key`` is a dotted path into a YAML document; ``prefix`` is prepended to
    the written version after stripping any leading ``v`` from it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    key: str | None = None
    prefix: str | None = None


VersionFileEntry: TypeAlias = str | FileConfig | Mapping[str, Any]


def normalize_file_config(entry: VersionFileEntry) -> FileConfig:
    """Turn a configured version file entry into a :class:`FileConfig`.

    A bare string is shorthand for ``{"path": entry}``.
    """
    if isinstance(entry, FileConfig):
        return entry
    if isinstance(entry, str):
        return FileConfig(path=entry)
    return FileConfig.model_validate(dict(entry))


@dataclass
class ReadResult:
    """Outcome of reading the version from one file."""

    filepath: str
    version: str | None
    handler: str
    error: str | None = None


@dataclass
class WriteResult:
    """Outcome of writing the version to one file."""

    filepath: str
    success: bool
    handler: str
    error: str | None = None


@dataclass
class SyncResult:
    """Whether all configured files carry the same version."""

    synced: bool
    versions: dict[str, str] = field(default_factory=dict)
    mismatches: list[str] = field(default_factory=list)


class VersionHandler(ABC):
    """Reads and writes the version field of one file format.

    Handlers own the parsing and serialization of their format. They never
    touch any file other than the one they are given.
    """

    name: str

    @abstractmethod
    def can_handle(self, filepath: str, config: FileConfig | None = None) -> bool:
        """Return True if this handler can process ``filepath``."""

    @abstractmethod
    def read(self, filepath: str, cwd: Path, config: FileConfig | None = None) -> str | None:
        """Return the version stored in the file, or None if there is none."""

    @abstractmethod
    def write(
        self,
        filepath: str,
        version: str,
        cwd: Path,
        config: FileConfig | None = None,
    ) -> None:
        """Store ``version`` in the file.

        Raises:
            VersionFileError: If the file cannot be updated
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
