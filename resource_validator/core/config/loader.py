"""
Configuration loader — reads the config directory into domain models.

The config directory holds:

    config.yaml                     abort flag coordinates, exemption label,
                                    freshness threshold
    allowlist.yaml                  pre-approved pods / owners
    readinesslist.yaml              resources that must be ready
    additionalResourceTypes.yaml    extra kinds to fetch
    privilegedlist.yaml             pre-approved privileged pods (optional)

Each file is read with PyYAML and validated against Pydantic schemas.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from resource_validator.core.models.resource import GroupVersionResource
from resource_validator.core.models.settings import IdentityEntry, Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("/config/")
CONFIG_DIR_ENV = "CONFIG_DIR"

CONFIG_FILE = "config.yaml"
ALLOWLIST_FILE = "allowlist.yaml"
READINESSLIST_FILE = "readinesslist.yaml"
ADDITIONAL_RESOURCE_TYPES_FILE = "additionalResourceTypes.yaml"
PRIVILEGEDLIST_FILE = "privilegedlist.yaml"


class ConfigError(Exception):
    """Raised when a config file is missing (where required) or invalid."""


def resolve_config_dir(override: Path | str | None = None) -> Path:
    """Config directory: explicit override > $CONFIG_DIR > /config/."""
    if override:
        return Path(override)
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return DEFAULT_CONFIG_DIR


def _read_yaml(path: Path) -> Any:
    """Read and parse one YAML file.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def load_settings(config_dir: Path) -> Settings:
    """Load config.yaml, falling back to defaults when the file is absent.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    path = config_dir / CONFIG_FILE
    if not path.is_file():
        logger.debug("No %s in %s, using defaults", CONFIG_FILE, config_dir)
        return Settings()

    data = _read_yaml(path)
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug("Loaded settings from %s", path)
    return settings


def load_identity_list(path: Path) -> list[IdentityEntry]:
    """Load a ``[{name, namespace, kind}, ...]`` file (allowlist, readiness list).

    Raises:
        ConfigError: If the file is missing, unparseable, or malformed.
    """
    if not path.is_file():
        raise ConfigError(f"List file not found: {path}")

    data = _read_yaml(path)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigError(f"Expected a YAML sequence in {path}, got {type(data).__name__}")

    try:
        entries = [IdentityEntry.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigError(f"Invalid entry in {path}: {e}") from e

    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries


def load_additional_resource_types(config_dir: Path) -> list[GroupVersionResource]:
    """Load additionalResourceTypes.yaml; an absent file means no extra kinds.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    path = config_dir / ADDITIONAL_RESOURCE_TYPES_FILE
    if not path.is_file():
        logger.info("No additional resource types file at %s", path)
        return []

    data = _read_yaml(path)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigError(f"Expected a YAML sequence in {path}, got {type(data).__name__}")

    try:
        return [GroupVersionResource.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigError(f"Invalid resource type in {path}: {e}") from e
