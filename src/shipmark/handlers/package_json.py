"""Version handler for package.json manifests."""

from __future__ import annotations

import json
import logging
import re
from pathlib import PurePath
from typing import TYPE_CHECKING

from shipmark.exceptions import VersionFileError
from shipmark.handlers.base import FileConfig, VersionHandler

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

INDENT_PATTERN = re.compile(r"^[\t ]+", re.MULTILINE)


class PackageJsonHandler(VersionHandler):
    """Reads and writes the ``version`` field of package.json."""

    name = "package-json"
    filename = "package.json"

    def can_handle(self, filepath: str, config: FileConfig | None = None) -> bool:
        return PurePath(filepath).name == self.filename

    def read(self, filepath: str, cwd: Path, config: FileConfig | None = None) -> str | None:
        full_path = cwd / filepath
        if not full_path.is_file():
            return None

        data = _load(full_path)
        version = data.get("version")
        return version if isinstance(version, str) and version else None

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

        content = full_path.read_text(encoding="utf-8")
        data = _load(full_path, content)
        data["version"] = version

        indent = detect_indent(content)
        full_path.write_text(
            json.dumps(data, indent=indent, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        logger.debug("Wrote version %s to %s", version, full_path)


def detect_indent(content: str) -> int | str:
    """Detect the indentation of a JSON document.

    The first indented line decides: a leading tab means tab indentation,
    otherwise the number of leading spaces. Defaults to 2 spaces.
    """
    match = INDENT_PATTERN.search(content)
    if match:
        indent = match.group(0)
        if indent.startswith("\t"):
            return "\t"
        return len(indent)
    return 2


def _load(path: Path, content: str | None = None) -> dict:
    if content is None:
        content = path.read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise VersionFileError(f"Invalid JSON in {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise VersionFileError(f"Expected a JSON object in {path.name}")
    return data
