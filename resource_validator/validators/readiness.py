"""
Readiness validator — listed resources must exist and report ready.

A resource is ready if its status has a condition ``{type: Ready,
status: "True"}`` or a boolean ``status.ready`` that is true.
"""

from __future__ import annotations

import logging
from pathlib import Path

from resource_validator.core.config.loader import (
    READINESSLIST_FILE,
    ConfigError,
    load_identity_list,
)
from resource_validator.core.models.resource import Resource, ResourceIdentity
from resource_validator.core.models.settings import IdentityEntry
from resource_validator.validators.base import ValidationOutcome, Validator

logger = logging.getLogger(__name__)

READINESS_VALIDATOR_NAME = "built-in:readiness"


class ReadinessUndetermined(ValueError):
    """The status block is malformed; readiness cannot be decided."""


def is_resource_ready(resource: Resource) -> bool:
    """Decide readiness from a resource's status.

    Raises:
        ReadinessUndetermined: If conditions / ready have an unexpected shape.
    """
    status = resource.status
    conditions = status.get("conditions")
    if conditions is not None:
        if not isinstance(conditions, list):
            raise ReadinessUndetermined("status.conditions is not a list")
        for condition in conditions:
            if not isinstance(condition, dict):
                raise ReadinessUndetermined("status.conditions entry is not a mapping")
            if condition.get("type") == "Ready" and condition.get("status") == "True":
                return True

    ready = status.get("ready")
    if ready is None:
        return False
    if not isinstance(ready, bool):
        raise ReadinessUndetermined("status.ready is not a boolean")
    return ready


class ReadinessValidator(Validator):
    """Flags listed resources that are missing or not ready."""

    def __init__(self, config_dir: Path, ignore_missing_resources: bool = False):
        self._readinesslist_path = Path(config_dir) / READINESSLIST_FILE
        self._ignore_missing_resources = ignore_missing_resources
        self._readinesslist: list[IdentityEntry] | None = None
        self._load_error: ConfigError | None = None
        self._loaded = False

    @property
    def name(self) -> str:
        return READINESS_VALIDATOR_NAME

    def _load_readinesslist(self) -> list[IdentityEntry] | None:
        if not self._loaded:
            self._loaded = True
            try:
                self._readinesslist = load_identity_list(self._readinesslist_path)
            except ConfigError as e:
                logger.error("Couldn't load readinesslist file: %s", e)
                self._load_error = e
        return self._readinesslist

    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        readinesslist = self._load_readinesslist()
        if readinesslist is None:
            return [], self.failure(str(self._load_error))

        index: dict[ResourceIdentity, Resource] = {}
        for resource in resources:
            index.setdefault(resource.identity, resource)

        violations = []
        for entry in readinesslist:
            resource = index.get(entry.identity)
            if resource is None:
                if self._ignore_missing_resources:
                    logger.debug("Could not find %s %s/%s, but set to ignore",
                                 entry.kind, entry.namespace, entry.name)
                    continue
                placeholder = Resource(kind=entry.kind, name=entry.name, namespace=entry.namespace)
                violations.append(self.violation(placeholder, "readiness violation"))
                continue

            try:
                ready = is_resource_ready(resource)
            except ReadinessUndetermined as e:
                logger.error(
                    "Could not determine readiness of resource Kind: %s Name: %s Namespace: %s: %s",
                    resource.kind, resource.name, resource.namespace, e,
                )
                continue

            if ready:
                logger.debug("Resource Kind: %s Name: %s Namespace: %s is ready",
                             resource.kind, resource.name, resource.namespace)
            else:
                violations.append(self.violation(resource, "readiness violation"))

        return violations, None
