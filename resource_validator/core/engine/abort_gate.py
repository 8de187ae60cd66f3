"""
Abort gate — decide once per run whether validation should proceed.

Default policy reads one field of one configmap. The gate fails open:
if the configmap or the field is missing, or the lookup itself fails,
validation proceeds. Only the literal value ``"true"`` aborts.

This is useful while cluster resources are in transition (e.g. during
a deployment), when violations would be noise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from resource_validator.core.models.settings import AbortSettings
from resource_validator.core.services.providers import ResourceProvider

logger = logging.getLogger(__name__)

ABORT_VALUE = "true"

# Caller-supplied replacement for the configmap check.
AbortPredicate = Callable[[], bool]


@dataclass
class AbortDecision:
    """Outcome of the gate, with a human-readable reason for the log."""

    abort: bool
    reason: str


class ConfigMapAbortGate:
    """Abort flag stored in a configmap field."""

    def __init__(
        self,
        provider: ResourceProvider,
        settings: AbortSettings | None = None,
        timeout: float | None = None,
    ):
        self._provider = provider
        self._settings = settings or AbortSettings()
        self._timeout = timeout

    def check(self) -> AbortDecision:
        s = self._settings
        try:
            data = self._provider.get_config_map(
                s.config_map_namespace, s.config_map_name, timeout=self._timeout,
            )
        except Exception as e:
            # Any lookup failure fails open
            logger.warning("Abort configMap lookup failed (%s): Resuming validation", e)
            return AbortDecision(False, f"Abort configMap {s.config_map_name} unreadable: Resuming validation")

        if data is None:
            return AbortDecision(
                False, f"Abort configMap {s.config_map_name} not found: Resuming validation",
            )

        if s.config_map_field not in data:
            return AbortDecision(
                False,
                f"Field {s.config_map_field} not found in abort configMap: Resuming validation",
            )

        if data[s.config_map_field] == ABORT_VALUE:
            return AbortDecision(
                True, f'Abort configMap {s.config_map_name} set to "true": Aborting validation',
            )

        return AbortDecision(
            False,
            f"Abort configMap {s.config_map_name} found, but field {s.config_map_field} "
            f'is NOT set to "true": Resuming validation',
        )

    def should_abort(self) -> bool:
        decision = self.check()
        logger.info(decision.reason)
        return decision.abort
