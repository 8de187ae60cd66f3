"""
K8s shared low-level helpers.

Imported by the resource providers. Must NOT import from any sibling
provider module to avoid circular imports.
"""

from __future__ import annotations

import json
import logging
import math
import subprocess
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def _run_kubectl(
    *args: str,
    timeout: float | None = 15,
    kubeconfig: str | None = None,
    context: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a kubectl command and return the result.

    kubectl resolves credentials itself: in-cluster service account,
    then $KUBECONFIG, then ~/.kube/config.
    """
    cmd = ["kubectl"]
    if kubeconfig:
        cmd += ["--kubeconfig", kubeconfig]
    if context:
        cmd += ["--context", context]
    if timeout:
        cmd += [f"--request-timeout={max(1, math.ceil(timeout))}s"]
    cmd += list(args)
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def _kubectl_available() -> dict:
    """Check if kubectl is installed.

    Uses ``kubectl version --client -o json`` (the ``--short`` flag
    was removed in kubectl v1.28+).
    """
    try:
        result = subprocess.run(
            ["kubectl", "version", "--client", "-o", "json"],
            capture_output=True,
            text=True,
            timeout=15,
        )
        if result.returncode == 0:
            try:
                data = json.loads(result.stdout)
                version = data.get("clientVersion", {}).get("gitVersion", "")
            except (ValueError, AttributeError):
                version = result.stdout.strip()
            return {"available": True, "version": version}
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return {"available": False, "version": None}


def _is_not_found(stderr: str) -> bool:
    """Whether kubectl stderr reports a missing object."""
    return "NotFound" in stderr or "not found" in stderr


def _parse_k8s_yaml(path: Path) -> list[dict[str, Any]]:
    """Parse a (multi-document) YAML file and return K8s object dicts.

    ``kind: List`` documents are flattened into their items.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
    """
    content = path.read_text(encoding="utf-8")

    objects: list[dict[str, Any]] = []
    for doc in yaml.safe_load_all(content):
        if not doc or not isinstance(doc, dict):
            continue
        if doc.get("kind") == "List" or (doc.get("kind", "").endswith("List") and "items" in doc):
            objects.extend(i for i in doc.get("items") or [] if isinstance(i, dict))
        elif "kind" in doc and "apiVersion" in doc:
            objects.append(doc)

    return objects
