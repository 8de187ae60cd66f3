"""
Freshness validator — Pods must have been (re)created within a threshold.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable

from resource_validator.core.models.resource import Resource, get_pods
from resource_validator.core.models.settings import DEFAULT_FRESHNESS_HOURS, Exemption
from resource_validator.validators.base import ValidationOutcome, Validator

logger = logging.getLogger(__name__)

FRESHNESS_VALIDATOR_NAME = "built-in:freshness"


def _now() -> datetime:
    return datetime.now(UTC)


def is_pod_stale(pod: Resource, threshold: timedelta, now: datetime) -> bool:
    """Older than ``threshold``; Pods without a creation timestamp count as fresh."""
    created = pod.creation_timestamp
    if created is None:
        return False
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    return now - created > threshold


class FreshnessValidator(Validator):
    """Flags Pods that have been running longer than the threshold."""

    def __init__(
        self,
        threshold: timedelta = timedelta(hours=DEFAULT_FRESHNESS_HOURS),
        exemption: Exemption | None = None,
        clock: Callable[[], datetime] = _now,
    ):
        self._threshold = threshold
        self._exemption = exemption or Exemption()
        self._clock = clock

    @property
    def name(self) -> str:
        return FRESHNESS_VALIDATOR_NAME

    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        now = self._clock()
        violations = []

        for pod in get_pods(resources):
            if self._exemption.applies_to(pod):
                logger.debug("Is exempt from checking for freshness: %s/%s", pod.namespace, pod.name)
                continue

            if is_pod_stale(pod, self._threshold, now):
                violations.append(self.violation(pod, "Pod is stale"))
            else:
                logger.debug("Pod is fresh: %s/%s", pod.namespace, pod.name)

        return violations, None
