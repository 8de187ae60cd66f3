"""
Validator registry — name-keyed collection of validator instances.

The CLI builds a registry of the built-in validators and picks the
ones the user asked for. Library callers can register their own
validators next to the built-ins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from resource_validator.core.config.loader import (
    PRIVILEGEDLIST_FILE,
    load_identity_list,
)
from resource_validator.core.models.settings import Settings
from resource_validator.validators.allowed_pods import AllowedPodsValidator
from resource_validator.validators.base import Validator
from resource_validator.validators.freshness import FreshnessValidator
from resource_validator.validators.privileged_pods import PrivilegedPodsValidator
from resource_validator.validators.readiness import ReadinessValidator

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Registry of validators, kept in registration order."""

    def __init__(self) -> None:
        self._validators: dict[str, Validator] = {}

    def register(self, validator: Validator) -> None:
        name = validator.name
        if name in self._validators:
            logger.warning("Overwriting existing validator: %s", name)
        self._validators[name] = validator
        logger.debug("Registered validator: %s", name)

    def unregister(self, name: str) -> None:
        self._validators.pop(name, None)

    def get(self, name: str) -> Validator | None:
        return self._validators.get(name)

    def list_validators(self) -> list[str]:
        return list(self._validators.keys())

    def select(self, names: Iterable[str] | None = None) -> list[Validator]:
        """Validators by name, in the order given; all of them if names is None.

        Short names without the ``built-in:`` prefix are accepted.

        Raises:
            KeyError: If a name is not registered.
        """
        if names is None:
            return list(self._validators.values())

        selected: list[Validator] = []
        for name in names:
            validator = self._validators.get(name) or self._validators.get(f"built-in:{name}")
            if validator is None:
                raise KeyError(name)
            selected.append(validator)
        return selected


def build_default_registry(
    settings: Settings,
    config_dir: Path,
    ignore_missing_resources: bool = False,
) -> ValidatorRegistry:
    """Registry with the built-in validators wired from settings.

    Order: readiness, freshness, allowed-pods, privileged-pods.

    Raises:
        ConfigError: If privilegedlist.yaml exists but is invalid.
    """
    registry = ValidatorRegistry()
    registry.register(ReadinessValidator(config_dir, ignore_missing_resources))
    registry.register(
        FreshnessValidator(settings.freshness.threshold, exemption=settings.exempt)
    )
    registry.register(AllowedPodsValidator(config_dir, exemption=settings.exempt))

    privileged = PrivilegedPodsValidator(exemption=settings.exempt)
    privilegedlist = config_dir / PRIVILEGEDLIST_FILE
    if privilegedlist.is_file():
        privileged.set_pre_approved_pods(load_identity_list(privilegedlist))
    registry.register(privileged)

    return registry
