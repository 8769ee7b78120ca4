"""Version handler for pyproject.toml manifests.

The version may live in one of three places, checked in this order:

1. ``[project] version`` (PEP 621)
2. ``[tool.poetry] version``
3. ``[tool.setuptools] version``

When ``[project] dynamic`` lists ``"version"`` the version is computed at
build time by another tool, so it can be neither read nor written here.

The document is edited with tomlkit, which keeps comments, ordering and
whitespace of everything that is not changed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from shipmark.exceptions import DynamicVersionError, VersionFileError
from shipmark.handlers.base import FileConfig, VersionHandler

if TYPE_CHECKING:
    from pathlib import Path

    from tomlkit import TOMLDocument

logger = logging.getLogger(__name__)

VERSION_PATHS: tuple[tuple[str, ...], ...] = (
    ("project", "version"),
    ("tool", "poetry", "version"),
    ("tool", "setuptools", "version"),
)


class PyprojectHandler(VersionHandler):
    """Reads and writes the version of pyproject.toml."""

    name = "pyproject"
    filename = "pyproject.toml"

    def can_handle(self, filepath: str, config: FileConfig | None = None) -> bool:
        return PurePath(filepath).name == self.filename

    def read(self, filepath: str, cwd: Path, config: FileConfig | None = None) -> str | None:
        full_path = cwd / filepath
        if not full_path.is_file():
            return None

        doc = _load(full_path)
        if is_dynamic_version(doc):
            logger.debug("%s declares a dynamic version", filepath)
            return None

        for path in VERSION_PATHS:
            value = _get_nested(doc, path)
            if isinstance(value, str):
                return str(value)
        return None

    def write(
        self,
        filepath: str,
        version: str,
        cwd: Path,
        config: FileConfig | None = None,
    ) -> None:
        full_path = cwd / filepath
        if not full_path.is_file():
            raise VersionFileError(f"File not found: {filepath}")

        doc = _load(full_path)
        if is_dynamic_version(doc):
            raise DynamicVersionError(
                f"Cannot update dynamic version in {filepath}",
                ['Remove "version" from [project] dynamic to manage it here'],
            )

        for path in VERSION_PATHS:
            if _has_nested(doc, path):
                _get_nested(doc, path[:-1])[path[-1]] = version
                logger.debug("Updated %s in %s", ".".join(path), filepath)
                break
        else:
            project = doc.get("project")
            if project is None:
                project = tomlkit.table()
                doc["project"] = project
            elif not isinstance(project, MutableMapping):
                raise VersionFileError(f"[project] in {filepath} is not a table")
            project["version"] = version
            logger.debug("Created project.version in %s", filepath)

        full_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def is_dynamic_version(doc: Mapping[str, Any]) -> bool:
    """Return True if ``project.dynamic`` contains ``"version"``."""
    project = doc.get("project")
    if not isinstance(project, Mapping):
        return False
    dynamic = project.get("dynamic")
    return isinstance(dynamic, list) and "version" in dynamic


def _load(path: Path) -> TOMLDocument:
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except TOMLKitError as e:
        raise VersionFileError(f"Invalid TOML in {path.name}: {e}") from e


def _get_nested(data: Any, path: tuple[str, ...]) -> Any:
    current = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _has_nested(data: Any, path: tuple[str, ...]) -> bool:
    current = data
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return False
        current = current[key]
    return True
