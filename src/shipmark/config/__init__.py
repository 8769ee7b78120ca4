"""Configuration management for shipmark."""

from __future__ import annotations

from shipmark.config.loader import find_config_file, load_config, save_config
from shipmark.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitConfig,
    ShipmarkConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "GitConfig",
    "ShipmarkConfig",
    "VersionConfig",
    "find_config_file",
    "load_config",
    "save_config",
]
