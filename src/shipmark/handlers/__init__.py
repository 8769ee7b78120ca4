"""Version file handlers.

Each handler reads and writes the version of one manifest format; the
:class:`HandlerRegistry` picks the handler for a configured file and runs
batch reads and writes.
"""

from __future__ import annotations

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
from shipmark.handlers.registry import (
    HandlerRegistry,
    create_default_registry,
    get_version,
    set_version,
    validate_version_sync,
)
from shipmark.handlers.yaml_file import YamlHandler

__all__ = [
    "FileConfig",
    "HandlerRegistry",
    "PackageJsonHandler",
    "PyprojectHandler",
    "ReadResult",
    "SyncResult",
    "VersionFileEntry",
    "VersionHandler",
    "WriteResult",
    "YamlHandler",
    "create_default_registry",
    "get_version",
    "normalize_file_config",
    "set_version",
    "validate_version_sync",
]
