"""
Privileged-pods validator — flag containers that can escape their sandbox.

A Pod violates if any of its init, regular or ephemeral containers has a
security context that:

    - sets ``procMount: Unmasked``
    - sets ``allowPrivilegeEscalation: true``
    - sets ``privileged: true``
    - adds the CAP_SYS_ADMIN capability

Pre-approved Pods (matched by kind, name, namespace) and exempt Pods
are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Iterable

from resource_validator.core.models.resource import Resource, ResourceIdentity, get_pods
from resource_validator.core.models.settings import Exemption, IdentityEntry
from resource_validator.validators.base import ValidationOutcome, Validator

logger = logging.getLogger(__name__)

PRIVILEGED_PODS_VALIDATOR_NAME = "built-in:privileged-pods"

# Both the kernel spelling and the Kubernetes spelling are accepted.
EXCESSIVE_CAPABILITIES = frozenset({"CAP_SYS_ADMIN", "SYS_ADMIN"})


class MalformedPodSpec(ValueError):
    """A Pod's container lists do not have the expected shape."""


class ContainerKind(StrEnum):
    INIT = "initContainers"
    REGULAR = "containers"
    EPHEMERAL = "ephemeralContainers"


@dataclass(frozen=True)
class ContainerSpec:
    """One container of any kind; all kinds share the securityContext shape."""

    kind: ContainerKind
    name: str
    security_context: dict[str, Any] | None


def iter_containers(pod: Resource) -> list[ContainerSpec]:
    """All containers of a Pod: init first, then regular, then ephemeral.

    Raises:
        MalformedPodSpec: If a container list or entry has the wrong type.
    """
    containers: list[ContainerSpec] = []
    for kind in ContainerKind:
        entries = pod.spec.get(kind.value)
        if entries is None:
            continue
        if not isinstance(entries, list):
            raise MalformedPodSpec(f"spec.{kind.value} is not a list")
        for entry in entries:
            if not isinstance(entry, dict):
                raise MalformedPodSpec(f"spec.{kind.value} entry is not a mapping")
            security_context = entry.get("securityContext")
            if security_context is not None and not isinstance(security_context, dict):
                raise MalformedPodSpec(f"securityContext of {entry.get('name', '?')} is not a mapping")
            containers.append(ContainerSpec(kind, entry.get("name", ""), security_context))
    return containers


def privileged_reason(security_context: dict[str, Any] | None) -> str:
    """Why a security context is privileged; empty string if it is not."""
    if not security_context:
        return ""

    if security_context.get("procMount") == "Unmasked":
        return "securityContext ProcMount value is Unmasked"

    if security_context.get("allowPrivilegeEscalation") is True:
        return "securityContext AllowPrivilegeEscalation value is true"

    if security_context.get("privileged") is True:
        return "securityContext Privileged value is true"

    capabilities = security_context.get("capabilities") or {}
    for capability in capabilities.get("add") or []:
        if capability in EXCESSIVE_CAPABILITIES:
            return f"securityContext capabilities value is {capability}"

    return ""


def find_privileged_container(pod: Resource) -> str:
    """Reason for the first privileged container of a Pod, or empty string.

    Raises:
        MalformedPodSpec: If the Pod spec cannot be read.
    """
    for container in iter_containers(pod):
        reason = privileged_reason(container.security_context)
        if reason:
            return f"{container.kind.value}/{container.name}: {reason}"
    return ""


class PrivilegedPodsValidator(Validator):
    """Flags Pods running privileged containers."""

    def __init__(
        self,
        exemption: Exemption | None = None,
        pre_approved: Iterable[IdentityEntry] = (),
    ):
        self._exemption = exemption or Exemption()
        self._pre_approved: frozenset[ResourceIdentity] = frozenset(e.identity for e in pre_approved)

    @property
    def name(self) -> str:
        return PRIVILEGED_PODS_VALIDATOR_NAME

    def set_pre_approved_pods(self, pods: Iterable[IdentityEntry]) -> None:
        """Replace the list of Pods allowed to run privileged."""
        self._pre_approved = frozenset(e.identity for e in pods)

    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        violations = []

        for pod in get_pods(resources):
            if self._exemption.applies_to(pod) or pod.identity in self._pre_approved:
                logger.debug("Is exempt: %s/%s", pod.namespace, pod.name)
                continue

            try:
                reason = find_privileged_container(pod)
            except MalformedPodSpec as e:
                return [], self.failure(f"cannot read pod {pod.namespace}/{pod.name}: {e}")

            if reason:
                logger.debug("Privileged pod %s/%s: %s", pod.namespace, pod.name, reason)
                violations.append(self.violation(pod, "found privileged pod"))

        return violations, None
