"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from datetime import datetime
from pathlib import Path

import pytest

from resource_validator.core.models.resource import OwnerReference, Resource

# Written verbatim into <config_dir>/<name> by the config_dir fixture.
DEFAULT_CONFIG_FILES = {
    "config.yaml": """\
        abort:
          configMapNamespace: center
          configMapName: landscape-state
          configMapField: deploying
        exempt:
          labelName: resources.gardener.cloud/managed-by
          labelValue: gardener
        freshness:
          thresholdInHours: 1
        """,
    "allowlist.yaml": """\
        - name: web
          namespace: default
          kind: Deployment
        - name: standalone
          namespace: default
          kind: Pod
        """,
    "readinesslist.yaml": """\
        - name: web
          namespace: default
          kind: Deployment
        """,
}


def write_config(config_dir: Path, files: dict[str, str]) -> Path:
    config_dir.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (config_dir / name).write_text(textwrap.dedent(content), encoding="utf-8")
    return config_dir


def make_pod(
    name: str,
    namespace: str = "default",
    owners: list[tuple[str, str]] | None = None,
    labels: dict[str, str] | None = None,
    created: datetime | None = None,
    spec: dict | None = None,
    status: dict | None = None,
) -> Resource:
    """Build a Pod resource; owners are (kind, name) pairs."""
    return Resource(
        kind="Pod",
        name=name,
        namespace=namespace,
        labels=labels or {},
        owner_references=tuple(OwnerReference(kind=k, name=n) for k, n in owners or []),
        creation_timestamp=created,
        spec=spec or {},
        status=status or {},
    )


def make_resource(
    kind: str,
    name: str,
    namespace: str = "default",
    api_version: str = "apps/v1",
    owners: list[tuple[str, str]] | None = None,
    status: dict | None = None,
) -> Resource:
    return Resource(
        kind=kind,
        name=name,
        namespace=namespace,
        api_version=api_version,
        owner_references=tuple(OwnerReference(kind=k, name=n) for k, n in owners or []),
        status=status or {},
    )


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A config directory with config.yaml, allowlist.yaml and readinesslist.yaml."""
    return write_config(tmp_path / "config", DEFAULT_CONFIG_FILES)


@pytest.fixture
def empty_config_dir(tmp_path: Path) -> Path:
    path = tmp_path / "empty"
    path.mkdir()
    return path


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
