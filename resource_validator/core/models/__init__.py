"""
Domain models — Pydantic types for the resource validator.

All models are re-exported here for convenient access:

    from resource_validator.core.models import Resource, Violation, Settings
"""

from resource_validator.core.models.resource import (
    DEFAULT_RESOURCE_TYPES,
    GroupVersionResource,
    OwnerReference,
    Resource,
    ResourceIdentity,
    ResourceTarget,
    get_pods,
)
from resource_validator.core.models.settings import (
    AbortSettings,
    Exemption,
    FreshnessSettings,
    IdentityEntry,
    Settings,
)
from resource_validator.core.models.violation import Violation

__all__ = [
    # resource.py
    "DEFAULT_RESOURCE_TYPES",
    "GroupVersionResource",
    "OwnerReference",
    "Resource",
    "ResourceIdentity",
    "ResourceTarget",
    "get_pods",
    # settings.py
    "AbortSettings",
    "Exemption",
    "FreshnessSettings",
    "IdentityEntry",
    "Settings",
    # violation.py
    "Violation",
]
