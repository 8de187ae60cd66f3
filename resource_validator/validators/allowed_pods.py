"""
Allowed-pods validator — every Pod must be allowlisted, directly or via an owner.

A Pod complies if it, or any ancestor reachable through owner references
(ReplicaSet → Deployment, Job → CronJob, ...), matches an allowlist entry
by (kind, name, namespace). Pods carrying the exemption label are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path

from resource_validator.core.config.loader import ALLOWLIST_FILE, ConfigError, load_identity_list
from resource_validator.core.engine.ownership import OwnershipResolver
from resource_validator.core.models.resource import Resource, ResourceIdentity, get_pods
from resource_validator.core.models.settings import Exemption
from resource_validator.validators.base import ValidationOutcome, Validator

logger = logging.getLogger(__name__)

ALLOWED_PODS_VALIDATOR_NAME = "built-in:allowed-pods"


class AllowedPodsValidator(Validator):
    """Flags Pods not covered by the allowlist."""

    def __init__(self, config_dir: Path, exemption: Exemption | None = None):
        self._allowlist_path = Path(config_dir) / ALLOWLIST_FILE
        self._exemption = exemption or Exemption()
        self._allowlist: frozenset[ResourceIdentity] | None = None
        self._load_error: ConfigError | None = None
        self._loaded = False
        self.allowed_pods: list[Resource] = []

    @property
    def name(self) -> str:
        return ALLOWED_PODS_VALIDATOR_NAME

    def _load_allowlist(self) -> frozenset[ResourceIdentity] | None:
        """Read the allowlist once per instance; a failure is remembered too."""
        if not self._loaded:
            self._loaded = True
            try:
                entries = load_identity_list(self._allowlist_path)
                self._allowlist = frozenset(e.identity for e in entries)
            except ConfigError as e:
                logger.error("Couldn't load allowlist file: %s", e)
                self._load_error = e
        return self._allowlist

    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        allowlist = self._load_allowlist()
        if allowlist is None:
            return [], self.failure(str(self._load_error))

        resolver = OwnershipResolver(resources)
        self.allowed_pods = []
        violations = []

        for pod in get_pods(resources):
            if self._exemption.applies_to(pod):
                logger.debug("Is exempt: %s/%s", pod.namespace, pod.name)
                continue

            if resolver.is_allowed(pod, allowlist):
                logger.debug("Found in allowlist: %s/%s", pod.namespace, pod.name)
                self.allowed_pods.append(pod)
                continue

            violations.append(self.violation(pod, "NOT found in allowlist"))

        return violations, None
