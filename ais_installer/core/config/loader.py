"""
Configuration loader — reads an installer YAML file into InstallerSettings.

The file is optional: without one every default applies. With one, any
subset of keys overrides the defaults and the result is validated
against the pydantic schema.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ais_installer.core.config.settings import InstallerSettings

logger = logging.getLogger(__name__)

# Environment variable naming a settings file when --config is absent
CONFIG_ENV_VAR = "AIS_INSTALL_CONFIG"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or missing."""


def resolve_config_path(path: Path | None = None) -> Path | None:
    """Pick the settings file: explicit path first, then the env var."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else None


def load_settings(path: Path | None = None) -> InstallerSettings:
    """Load and validate installer settings.

    Args:
        path: Explicit settings file. If None, ``AIS_INSTALL_CONFIG`` is
            consulted; if that is unset too, defaults are returned.

    Returns:
        Validated, frozen InstallerSettings.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = resolve_config_path(path)
    if path is None:
        logger.debug("No settings file — using defaults")
        return InstallerSettings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer settings from %s", path)

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

    # Allow everything to sit under an "installer" key
    if "installer" in data and isinstance(data["installer"], dict):
        data = data["installer"]

    try:
        settings = InstallerSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info(
        "Loaded settings from %s (%d dependencies)", path, len(settings.dependencies)
    )
    return settings
