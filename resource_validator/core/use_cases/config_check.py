"""
Config check use case — load every file of the config directory and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from resource_validator.core.config.loader import (
    ALLOWLIST_FILE,
    CONFIG_FILE,
    PRIVILEGEDLIST_FILE,
    READINESSLIST_FILE,
    ConfigError,
    load_additional_resource_types,
    load_identity_list,
    load_settings,
)
from resource_validator.core.models.settings import Settings


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    config_dir: Path
    settings: Settings | None = None
    allowlist_entries: int | None = None
    readinesslist_entries: int | None = None
    privilegedlist_entries: int | None = None
    additional_resource_types: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_dir": str(self.config_dir),
            "settings": self.settings.model_dump(by_alias=True) if self.settings else None,
            "allowlist_entries": self.allowlist_entries,
            "readinesslist_entries": self.readinesslist_entries,
            "privilegedlist_entries": self.privilegedlist_entries,
            "additional_resource_types": self.additional_resource_types,
            "errors": self.errors,
            "warnings": self.warnings,
        }


def check_config(config_dir: Path) -> ConfigCheckResult:
    """Validate the config directory.

    Missing allowlist / readiness list are warnings here: the validators
    that need them will fail at run time, but other validators still work.
    """
    result = ConfigCheckResult(config_dir=config_dir)

    if not config_dir.is_dir():
        result.errors.append(f"Config directory not found: {config_dir}")
        return result

    if not (config_dir / CONFIG_FILE).is_file():
        result.warnings.append(f"No {CONFIG_FILE}; using defaults.")
    try:
        result.settings = load_settings(config_dir)
    except ConfigError as e:
        result.errors.append(str(e))

    for filename, attr in (
        (ALLOWLIST_FILE, "allowlist_entries"),
        (READINESSLIST_FILE, "readinesslist_entries"),
        (PRIVILEGEDLIST_FILE, "privilegedlist_entries"),
    ):
        path = config_dir / filename
        if not path.is_file():
            if filename != PRIVILEGEDLIST_FILE:
                result.warnings.append(f"No {filename}; its validator will fail.")
            continue
        try:
            setattr(result, attr, len(load_identity_list(path)))
        except ConfigError as e:
            result.errors.append(str(e))

    try:
        result.additional_resource_types = len(load_additional_resource_types(config_dir))
    except ConfigError as e:
        result.errors.append(str(e))

    return result
