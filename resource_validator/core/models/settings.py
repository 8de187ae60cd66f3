"""
Settings models — the typed shape of config.yaml and the list files.

config.yaml uses camelCase keys; the models accept both camelCase
aliases and snake_case field names.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from resource_validator.core.models.resource import Resource, ResourceIdentity

DEFAULT_EXEMPT_LABEL_NAME = "resources.gardener.cloud/managed-by"
DEFAULT_EXEMPT_LABEL_VALUE = "gardener"

DEFAULT_FRESHNESS_HOURS = 24 * 28  # 4 weeks


class _ConfigSection(BaseModel):
    """A config.yaml section. Empty strings and zero mean "not set": the field default applies."""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _unset_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (not isinstance(value, bool) and value in ("", 0)):
            return cls.model_fields[info.field_name].default
        return value


class AbortSettings(_ConfigSection):
    """Where the abort flag lives: configmap namespace/name and data field."""

    config_map_namespace: str = Field(default="center", alias="configMapNamespace")
    config_map_name: str = Field(default="landscape-state", alias="configMapName")
    config_map_field: str = Field(default="deploying", alias="configMapField")


class Exemption(_ConfigSection):
    """Label name/value pair that exempts a resource from validation.

    Passed explicitly to every exemption-aware validator.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label_name: str = Field(default=DEFAULT_EXEMPT_LABEL_NAME, alias="labelName")
    label_value: str = Field(default=DEFAULT_EXEMPT_LABEL_VALUE, alias="labelValue")

    def applies_to(self, resource: Resource) -> bool:
        return resource.has_label(self.label_name, self.label_value)


class FreshnessSettings(_ConfigSection):
    threshold_in_hours: int = Field(
        default=DEFAULT_FRESHNESS_HOURS, alias="thresholdInHours", gt=0,
    )

    @property
    def threshold(self) -> timedelta:
        return timedelta(hours=self.threshold_in_hours)


class Settings(BaseModel):
    """Root of config.yaml. Every section is optional."""

    abort: AbortSettings = Field(default_factory=AbortSettings)
    exempt: Exemption = Field(default_factory=Exemption)
    freshness: FreshnessSettings = Field(default_factory=FreshnessSettings)


class IdentityEntry(BaseModel):
    """One ``{name, namespace, kind}`` record of an allowlist or readiness list."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str = ""
    kind: str

    @property
    def identity(self) -> ResourceIdentity:
        return ResourceIdentity(self.kind, self.name, self.namespace)
