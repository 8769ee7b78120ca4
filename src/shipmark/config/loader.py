"""Configuration loading.

Configuration is read from the first file found in the project directory:

1. ``.shipmarkrc.yml``
2. ``.shipmarkrc.yaml``
3. ``.shipmarkrc.json``
4. ``[tool.shipmark]`` in ``pyproject.toml``

User values are overlaid on the defaults section by section.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import pydantic
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from shipmark.config.models import ShipmarkConfig
from shipmark.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_FILES = (".shipmarkrc.yml", ".shipmarkrc.yaml", ".shipmarkrc.json")
DEFAULT_CONFIG_FILE = ".shipmarkrc.yml"
PYPROJECT_TOOL_KEY = "shipmark"


def find_config_file(cwd: Path | None = None) -> Path | None:
    """Return the first shipmark config file in ``cwd``, if any."""
    directory = cwd or Path.cwd()
    for name in CONFIG_FILES:
        path = directory / name
        if path.is_file():
            return path
    return None


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Load and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"pyproject.toml not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}", [str(e)]) from e


def extract_shipmark_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.shipmark]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(PYPROJECT_TOOL_KEY, {})


def load_config(cwd: Path | None = None) -> ShipmarkConfig:
    """Load the shipmark configuration for a project.

    Args:
        cwd: Project directory (defaults to the current directory)

    Returns:
        Configuration with user values overlaid on the defaults

    Raises:
        ConfigError: If a config file cannot be parsed
        ConfigValidationError: If config values are invalid
    """
    directory = cwd or Path.cwd()
    config_path = find_config_file(directory)

    if config_path is not None:
        data = _read_config_file(config_path)
        source = config_path
    else:
        pyproject_path = directory / "pyproject.toml"
        if not pyproject_path.is_file():
            return ShipmarkConfig()
        data = extract_shipmark_config(load_pyproject_toml(pyproject_path))
        source = pyproject_path

    logger.debug("Loaded configuration from %s", source)
    try:
        return ShipmarkConfig.model_validate(data or {})
    except pydantic.ValidationError as e:
        raise ConfigValidationError(
            f"Invalid configuration in {source.name}",
            [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()],
        ) from e


def save_config(config: ShipmarkConfig, cwd: Path | None = None) -> Path:
    """Write ``config`` to ``.shipmarkrc.yml`` in ``cwd``."""
    path = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    yaml = YAML()
    yaml.default_flow_style = False
    try:
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
    except OSError as e:
        raise ConfigError(f"Failed to write config to {path}", [str(e)]) from e
    logger.debug("Wrote config to %s", path)
    return path


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = YAML(typ="safe").load(content)
    except (OSError, json.JSONDecodeError, YAMLError) as e:
        raise ConfigError(f"Failed to load config from {path}", [str(e)]) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data
