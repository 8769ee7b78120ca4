"""Registry of version file handlers.

The registry resolves which handler owns a configured file and runs reads
and writes across many files. Failures are reported per file instead of
raised, so one bad file does not abort a batch.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from shipmark.core.version import clean
from shipmark.handlers.base import (
    FileConfig,
    ReadResult,
    SyncResult,
    VersionFileEntry,
    VersionHandler,
    WriteResult,
    normalize_file_config,
)
from shipmark.handlers.package_json import PackageJsonHandler
from shipmark.handlers.pyproject import PyprojectHandler
from shipmark.handlers.yaml_file import YamlHandler

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

NO_HANDLER = "none"


class HandlerRegistry:
    """Ordered collection of version handlers.

    Handlers registered later are tried first, so a custom handler can
    override a built-in one.
    """

    def __init__(self, handlers: Iterable[VersionHandler] = ()) -> None:
        self._handlers: list[VersionHandler] = []
        for handler in handlers:
            self.register(handler)

    def register(self, handler: VersionHandler) -> None:
        self._handlers.insert(0, handler)

    @property
    def handlers(self) -> list[VersionHandler]:
        return list(self._handlers)

    def find_handler(
        self, filepath: str, config: FileConfig | None = None
    ) -> VersionHandler | None:
        for handler in self._handlers:
            if handler.can_handle(filepath, config):
                return handler
        return None

    def read_version(
        self,
        filepath: str,
        cwd: Path | str,
        config: FileConfig | None = None,
    ) -> ReadResult:
        """Read the version from one file."""
        handler = self.find_handler(filepath, config)
        if handler is None:
            return ReadResult(
                filepath=filepath,
                version=None,
                handler=NO_HANDLER,
                error=f"No handler found for file: {filepath}",
            )

        try:
            version = handler.read(filepath, Path(cwd), config)
        except Exception as e:
            logger.debug("Reading %s with %s failed: %s", filepath, handler.name, e)
            return ReadResult(filepath=filepath, version=None, handler=handler.name, error=str(e))

        logger.debug("Read %r from %s with %s", version, filepath, handler.name)
        return ReadResult(filepath=filepath, version=version, handler=handler.name)

    def write_version(
        self,
        filepath: str,
        version: str,
        cwd: Path | str,
        config: FileConfig | None = None,
    ) -> WriteResult:
        """Write the version to one file."""
        handler = self.find_handler(filepath, config)
        if handler is None:
            return WriteResult(
                filepath=filepath,
                success=False,
                handler=NO_HANDLER,
                error=f"No handler found for file: {filepath}",
            )

        try:
            handler.write(filepath, version, Path(cwd), config)
        except Exception as e:
            logger.debug("Writing %s with %s failed: %s", filepath, handler.name, e)
            return WriteResult(filepath=filepath, success=False, handler=handler.name, error=str(e))

        return WriteResult(filepath=filepath, success=True, handler=handler.name)

    def read_version_from_files(
        self,
        entries: Iterable[VersionFileEntry],
        cwd: Path | str,
    ) -> tuple[str | None, list[ReadResult]]:
        """Read the version from every entry.

        Returns:
            The primary version (the first one found, in entry order) and
            the per-file results
        """
        primary: str | None = None
        results: list[ReadResult] = []

        for entry in entries:
            config = normalize_file_config(entry)
            result = self.read_version(config.path, cwd, config)
            results.append(result)
            if primary is None and result.version:
                primary = result.version

        return primary, results

    def write_version_to_files(
        self,
        entries: Iterable[VersionFileEntry],
        version: str,
        cwd: Path | str,
    ) -> list[WriteResult]:
        """Write ``version`` to every entry, continuing past failures.

        An entry with a ``prefix`` receives ``prefix`` followed by the
        version without its leading ``v``.
        """
        results: list[WriteResult] = []

        for entry in entries:
            config = normalize_file_config(entry)
            value = version
            if config.prefix is not None:
                value = config.prefix + clean(version)
            results.append(self.write_version(config.path, value, cwd, config))

        return results

    def validate_version_sync(
        self,
        entries: Iterable[VersionFileEntry],
        cwd: Path | str,
    ) -> SyncResult:
        """Check that every entry carries the same version.

        Versions are compared without a leading ``v``. The first version
        found is the baseline; entries without a version are skipped.
        """
        versions: dict[str, str] = {}
        mismatches: list[str] = []
        baseline: str | None = None

        for entry in entries:
            config = normalize_file_config(entry)
            result = self.read_version(config.path, cwd, config)
            if not result.version:
                continue

            versions[config.path] = result.version
            normalized = clean(result.version)
            if baseline is None:
                baseline = normalized
            elif normalized != baseline:
                mismatches.append(config.path)

        return SyncResult(synced=not mismatches, versions=versions, mismatches=mismatches)


def create_default_registry() -> HandlerRegistry:
    """Build a registry with the built-in handlers."""
    return HandlerRegistry([PackageJsonHandler(), PyprojectHandler(), YamlHandler()])


def get_version(
    entries: Iterable[VersionFileEntry],
    cwd: Path | str,
    registry: HandlerRegistry | None = None,
) -> str | None:
    """Return the primary version of the configured files."""
    registry = registry or create_default_registry()
    primary, _ = registry.read_version_from_files(entries, cwd)
    return primary


def set_version(
    entries: Iterable[VersionFileEntry],
    version: str,
    cwd: Path | str,
    registry: HandlerRegistry | None = None,
) -> list[WriteResult]:
    """Write ``version`` to all configured files."""
    registry = registry or create_default_registry()
    return registry.write_version_to_files(entries, version, cwd)


def validate_version_sync(
    entries: Iterable[VersionFileEntry],
    cwd: Path | str,
    registry: HandlerRegistry | None = None,
) -> SyncResult:
    """Check that all configured files carry the same version."""
    registry = registry or create_default_registry()
    return registry.validate_version_sync(entries, cwd)
