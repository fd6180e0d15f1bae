"""
Configuration loader — reads markergen.yml into a typed config.

The file is optional. When present it supplies option tokens that are
applied before the command line ones, so the command line always wins.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from markergen.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "markergen.yml"


class MarkergenConfig(BaseModel):
    """Contents of markergen.yml."""

    model_config = ConfigDict(extra="forbid")

    options: list[str] = Field(default_factory=list)
    log_level: str | None = None

    _path: Path | None = PrivateAttr(default=None)

    @property
    def project_dir(self) -> Path | None:
        """Directory of the file this config was read from, if any.

        Relative paths in ``options`` are relative to it.
        """
        return self._path.parent.resolve() if self._path else None


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for markergen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to markergen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> MarkergenConfig:
    """Load markergen.yml.

    Args:
        path: Explicit path. If None, searches upward; no file found
            yields an empty config.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            return MarkergenConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = MarkergenConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    config._path = path
    logger.info("Loaded %d option(s) from %s", len(config.options), path)
    return config
