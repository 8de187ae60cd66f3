"""
Resource providers — where the validation snapshot comes from.

The orchestrator only talks to the ``ResourceProvider`` protocol:

    fetch(resource_types)            → list[Resource]
    get_config_map(namespace, name)  → data dict, or None if absent

Two implementations ship here:

    KubectlResourceProvider   live cluster, via kubectl + JSON output
    StaticResourceProvider    manifest files / in-memory objects (offline, tests)
"""

from __future__ import annotations

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

import yaml

from resource_validator.core.models.resource import GroupVersionResource, Resource
from resource_validator.core.services.k8s_common import (
    _is_not_found,
    _kubectl_available,
    _parse_k8s_yaml,
    _run_kubectl,
)

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The provider cannot reach its source at all (fatal for a run)."""


class FetchError(ProviderError):
    """Every requested resource type failed to load (fatal for a run)."""


class ResourceProvider(ABC):
    """Abstract source of cluster resources."""

    @abstractmethod
    def fetch(
        self,
        resource_types: Iterable[GroupVersionResource],
        timeout: float | None = None,
    ) -> list[Resource]:
        """Fetch every resource of the given types.

        A failure for one type is logged and that type contributes
        nothing. If every type fails, raises FetchError.
        """

    @abstractmethod
    def get_config_map(
        self,
        namespace: str,
        name: str,
        timeout: float | None = None,
    ) -> dict[str, str] | None:
        """Return a configmap's ``data``, or None if it does not exist.

        Raises:
            ProviderError: If the lookup itself failed.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


# ═══════════════════════════════════════════════════════════════════
#  kubectl
# ═══════════════════════════════════════════════════════════════════


class KubectlResourceProvider(ResourceProvider):
    """Live cluster provider backed by the kubectl CLI."""

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        timeout: float | None = 30,
    ):
        self._kubeconfig = kubeconfig
        self._context = context
        self._timeout = timeout

    @classmethod
    def connect(
        cls,
        kubeconfig: str | None = None,
        context: str | None = None,
        timeout: float | None = 30,
    ) -> KubectlResourceProvider:
        """Build a provider and verify the cluster answers.

        Raises:
            ProviderError: If kubectl is missing or the API server is unreachable.
        """
        kubectl = _kubectl_available()
        if not kubectl.get("available"):
            raise ProviderError("kubectl not available")

        provider = cls(kubeconfig=kubeconfig, context=context, timeout=timeout)
        try:
            result = provider._kubectl("get", "--raw", "/version", timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise ProviderError(f"Timed out connecting to cluster: {e}") from e

        if result.returncode != 0:
            raise ProviderError(f"Unable to connect to cluster: {result.stderr.strip()}")

        logger.debug("Connected to cluster (kubectl %s)", kubectl.get("version"))
        return provider

    def _kubectl(self, *args: str, timeout: float | None = None) -> subprocess.CompletedProcess[str]:
        return _run_kubectl(
            *args,
            timeout=timeout if timeout is not None else self._timeout,
            kubeconfig=self._kubeconfig,
            context=self._context,
        )

    def _fetch_kind(
        self, gvr: GroupVersionResource, timeout: float | None,
    ) -> list[Resource] | None:
        """List one resource type across all namespaces; None on failure."""
        try:
            result = self._kubectl(
                "get", gvr.kubectl_name, "--all-namespaces", "-o", "json",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error("Timed out listing %s", gvr.kubectl_name)
            return None

        if result.returncode != 0:
            logger.error("Failed to list %s: %s", gvr.kubectl_name, result.stderr.strip())
            return None

        try:
            items = json.loads(result.stdout).get("items", [])
            resources = [Resource.from_manifest(item) for item in items]
        except (ValueError, AttributeError) as e:
            logger.error("Unreadable kubectl output for %s: %s", gvr.kubectl_name, e)
            return None

        logger.info("There are %d %s in the cluster", len(resources), gvr.resource)
        return resources

    def fetch(
        self,
        resource_types: Iterable[GroupVersionResource],
        timeout: float | None = None,
    ) -> list[Resource]:
        types = list(resource_types)
        all_resources: list[Resource] = []
        failed = 0

        for gvr in types:
            resources = self._fetch_kind(gvr, timeout)
            if resources is None:
                failed += 1
                continue
            all_resources.extend(resources)

        if types and failed == len(types):
            raise FetchError(f"Failed to list all {len(types)} resource types")

        return all_resources

    def get_config_map(
        self,
        namespace: str,
        name: str,
        timeout: float | None = None,
    ) -> dict[str, str] | None:
        try:
            result = self._kubectl(
                "get", "configmap", name, "-n", namespace, "-o", "json",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProviderError(f"Timed out reading configmap {namespace}/{name}") from e

        if result.returncode != 0:
            if _is_not_found(result.stderr):
                return None
            raise ProviderError(
                f"Cannot read configmap {namespace}/{name}: {result.stderr.strip()}"
            )

        try:
            data = json.loads(result.stdout).get("data") or {}
        except (ValueError, AttributeError) as e:
            raise ProviderError(f"Unreadable configmap {namespace}/{name}: {e}") from e
        return {str(k): str(v) for k, v in data.items()}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} context={self._context!r}>"


# ═══════════════════════════════════════════════════════════════════
#  Static (manifest files / in-memory)
# ═══════════════════════════════════════════════════════════════════


def _plural(kind: str) -> str:
    """Lower-case plural resource name for a kind (Ingress → ingresses, Gateway → gateways)."""
    lower = kind.lower()
    if lower.endswith("s"):
        return lower + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return lower[:-1] + "ies"
    return lower + "s"


class StaticResourceProvider(ResourceProvider):
    """Serves a fixed set of raw Kubernetes objects.

    ConfigMaps among the objects back ``get_config_map``, so the abort
    gate works offline too.
    """

    def __init__(self, objects: Iterable[dict[str, Any]] = ()):
        self._objects = [o for o in objects if isinstance(o, dict)]

    @classmethod
    def from_paths(cls, paths: Iterable[Path]) -> StaticResourceProvider:
        """Load objects from manifest files or directories of them.

        Raises:
            ProviderError: If a file cannot be read or parsed.
        """
        objects: list[dict[str, Any]] = []
        for path in paths:
            files = sorted(path.rglob("*.y*ml")) if path.is_dir() else [path]
            for file in files:
                try:
                    objects.extend(_parse_k8s_yaml(file))
                except (OSError, yaml.YAMLError) as e:
                    raise ProviderError(f"Cannot load manifests from {file}: {e}") from e
        logger.debug("Loaded %d objects from manifests", len(objects))
        return cls(objects)

    def fetch(
        self,
        resource_types: Iterable[GroupVersionResource],
        timeout: float | None = None,
    ) -> list[Resource]:
        wanted = {(gvr.group, gvr.resource) for gvr in resource_types}
        resources: list[Resource] = []
        for obj in self._objects:
            try:
                resource = Resource.from_manifest(obj)
            except (ValueError, TypeError) as e:
                logger.error("Skipping unreadable object %s: %s", obj.get("kind", "?"), e)
                continue
            if (resource.api_group, _plural(resource.kind)) in wanted:
                resources.append(resource)
        return resources

    def get_config_map(
        self,
        namespace: str,
        name: str,
        timeout: float | None = None,
    ) -> dict[str, str] | None:
        for obj in self._objects:
            metadata = obj.get("metadata") or {}
            if (
                obj.get("kind") == "ConfigMap"
                and metadata.get("name") == name
                and (metadata.get("namespace") or "") == namespace
            ):
                return {str(k): str(v) for k, v in (obj.get("data") or {}).items()}
        return None
