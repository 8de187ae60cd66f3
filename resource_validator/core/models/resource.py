"""
Resource model — the typed view of a fetched cluster object.

Resources are built from raw Kubernetes objects (the JSON that
``kubectl get -o json`` returns) and are frozen for the lifetime of a
validation run. Validators only ever read them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

KIND_POD = "Pod"
KIND_REPLICATION_CONTROLLER = "ReplicationController"
KIND_DEPLOYMENT = "Deployment"
KIND_REPLICA_SET = "ReplicaSet"
KIND_DAEMON_SET = "DaemonSet"
KIND_STATEFUL_SET = "StatefulSet"
KIND_JOB = "Job"
KIND_CRON_JOB = "CronJob"


class ResourceIdentity(NamedTuple):
    """(kind, name, namespace) — unique within one snapshot."""

    kind: str
    name: str
    namespace: str


class ResourceTarget(NamedTuple):
    """Identity plus API group — the key violations are grouped by."""

    kind: str
    name: str
    namespace: str
    group: str


class OwnerReference(BaseModel):
    """Back-link to a controlling resource.

    Owner references never carry a namespace: the owner always lives in
    the namespace of the resource that points at it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: str
    name: str
    api_version: str = Field(default="", alias="apiVersion")
    uid: str = ""


class GroupVersionResource(BaseModel):
    """One fetchable resource type, e.g. ``apps/v1 deployments``."""

    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str = "v1"
    resource: str

    @property
    def kubectl_name(self) -> str:
        """Fully-qualified name kubectl accepts (``deployments.v1.apps``)."""
        if self.group:
            return f"{self.resource}.{self.version}.{self.group}"
        return self.resource


class Resource(BaseModel):
    """A cluster object as seen by validators."""

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str
    namespace: str = ""
    api_version: str = "v1"
    labels: dict[str, str] = Field(default_factory=dict)
    owner_references: tuple[OwnerReference, ...] = ()
    creation_timestamp: datetime | None = None
    spec: dict[str, Any] = Field(default_factory=dict)
    status: dict[str, Any] = Field(default_factory=dict)

    @property
    def api_group(self) -> str:
        """API group from apiVersion: ``apps/v1`` → ``apps``, ``v1`` → ``""``."""
        if "/" in self.api_version:
            return self.api_version.split("/", 1)[0]
        return ""

    @property
    def identity(self) -> ResourceIdentity:
        return ResourceIdentity(self.kind, self.name, self.namespace)

    @property
    def target(self) -> ResourceTarget:
        return ResourceTarget(self.kind, self.name, self.namespace, self.api_group)

    def has_label(self, name: str, value: str) -> bool:
        """Whether the label ``name`` is set to exactly ``value``."""
        return self.labels.get(name) == value

    def describe(self) -> str:
        """Short human-readable form used in log lines."""
        return f"name: {self.name}; namespace: {self.namespace}, kind: {self.kind}"

    @classmethod
    def from_manifest(cls, obj: dict[str, Any]) -> Resource:
        """Build a Resource from a raw Kubernetes object dict.

        Raises:
            ValueError: If the object or one of its sections has the wrong shape.
        """
        if not isinstance(obj, dict):
            raise ValueError(f"object must be a mapping, got {type(obj).__name__}")
        metadata = _section(obj, "metadata", dict)
        labels = _section(metadata, "labels", dict)
        owners = tuple(
            OwnerReference.model_validate(ref)
            for ref in _section(metadata, "ownerReferences", list)
            if isinstance(ref, dict) and ref.get("kind") and ref.get("name")
        )
        created = metadata.get("creationTimestamp")
        return cls(
            kind=obj.get("kind", ""),
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace") or "",
            api_version=obj.get("apiVersion", "v1"),
            labels={str(k): str(v) for k, v in labels.items()},
            owner_references=owners,
            creation_timestamp=_parse_timestamp(created),
            spec=_section(obj, "spec", dict),
            status=_section(obj, "status", dict),
        )


def _section(obj: dict[str, Any], key: str, expected: type) -> Any:
    """``obj[key]`` checked against ``expected``; missing or null gives an empty one."""
    value = obj.get(key)
    if value is None:
        return expected()
    if not isinstance(value, expected):
        shape = "mapping" if expected is dict else "list"
        raise ValueError(f"{key} must be a {shape}, got {type(value).__name__}")
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp (``2026-01-01T00:00:00Z``)."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def get_pods(resources: list[Resource]) -> list[Resource]:
    """Filter a snapshot down to its Pods."""
    return [r for r in resources if r.kind == KIND_POD]


DEFAULT_RESOURCE_TYPES: tuple[GroupVersionResource, ...] = (
    GroupVersionResource(group="", version="v1", resource="pods"),
    GroupVersionResource(group="apps", version="v1", resource="deployments"),
    GroupVersionResource(group="apps", version="v1", resource="replicasets"),
    GroupVersionResource(group="apps", version="v1", resource="statefulsets"),
    GroupVersionResource(group="", version="v1", resource="replicationcontrollers"),
    GroupVersionResource(group="apps", version="v1", resource="daemonsets"),
    GroupVersionResource(group="batch", version="v1", resource="jobs"),
    GroupVersionResource(group="batch", version="v1", resource="cronjobs"),
)
