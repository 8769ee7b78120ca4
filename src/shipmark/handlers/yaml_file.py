"""Version handler for YAML files addressed by a dotted key path.

Helm charts, Kubernetes manifests and similar files keep the version at an
arbitrary location, so a YAML file is only handled when its entry names the
key path explicitly::

    version:
      files:
        - path: charts/app/Chart.yaml
          key: appVersion
        - path: charts/app/values.yaml
          key: image.tag

Writes keep comments, quoting, the mapping indent and the sequence dash
offset of the original file. Other layout details are left to ruamel.yaml:
the body of a block scalar (``|`` or ``>-``) is re-emitted at the detected
mapping indent, so a block body indented differently from its mapping is
rewritten even though its value does not change.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML

from shipmark.exceptions import KeyPathError, VersionFileError
from shipmark.handlers.base import FileConfig, VersionHandler
from shipmark.handlers.paths import get_path, set_path

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")


def _round_trip_yaml() -> YAML:
    yaml = YAML(typ="rt")
    yaml.preserve_quotes = True
    yaml.width = 4096
    return yaml


class YamlHandler(VersionHandler):
    """Reads and writes a version at a configured key path of a YAML file."""

    name = "yaml"

    def can_handle(self, filepath: str, config: FileConfig | None = None) -> bool:
        has_key = config is not None and config.key is not None
        return filepath.endswith(YAML_EXTENSIONS) and has_key

    def read(self, filepath: str, cwd: Path, config: FileConfig | None = None) -> str | None:
        if config is None or not config.key:
            return None

        try:
            doc = _round_trip_yaml().load((cwd / filepath).read_text(encoding="utf-8"))
        except Exception as e:
            logger.debug("Could not read %s: %s", filepath, e)
            return None

        return _scalar_to_version(get_path(doc, config.key))

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
        if config is None or not config.key:
            raise KeyPathError("YAML handler requires a key path")

        content = full_path.read_text(encoding="utf-8")
        yaml = _round_trip_yaml()
        yaml.explicit_start = content.lstrip().startswith("---")
        mapping, offset = detect_layout(content)
        yaml.indent(mapping=mapping, sequence=offset + 2, offset=offset)
        doc = yaml.load(content)
        set_path(doc, config.key, version)

        stream = io.StringIO()
        yaml.dump(doc, stream)
        full_path.write_text(stream.getvalue(), encoding="utf-8")
        logger.debug("Wrote %s=%s to %s", config.key, version, filepath)


def detect_layout(content: str) -> tuple[int, int]:
    """Guess the block layout of a YAML document.

    Returns:
        The mapping indent and the offset of sequence dashes below their
        parent key, defaulting to ``(2, 0)``
    """
    mapping: int | None = None
    offset: int | None = None
    parent: tuple[int, str] | None = None

    for line in content.splitlines():
        stripped = line.lstrip(" ")
        if not stripped or stripped.startswith(("#", "---")):
            continue
        indent = len(line) - len(stripped)

        if parent is not None and indent >= parent[0]:
            parent_indent, parent_text = parent
            if parent_text.endswith(":") and not parent_text.startswith("-"):
                step = indent - parent_indent
                if stripped.startswith("-"):
                    offset = step if offset is None else offset
                elif mapping is None and step > 0:
                    mapping = step

        if mapping is not None and offset is not None:
            break
        parent = (indent, stripped.split(" #", 1)[0].rstrip())

    return mapping or 2, offset or 0


def _scalar_to_version(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int | float):
        return str(value)
    return None
