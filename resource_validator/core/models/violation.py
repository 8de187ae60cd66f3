"""
Violation model — the output contract of every validator.

Validators produce Violations; they are never mutated afterwards. The
aggregation stage builds new escalated Violations instead of editing
existing ones.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from resource_validator.core.models.resource import Resource

# Level 0 is the most severe.
LEVEL_CRITICAL = 0
LEVEL_DEFAULT = 1


class Violation(BaseModel):
    """A single policy finding against one resource."""

    model_config = ConfigDict(frozen=True)

    resource: Resource
    message: str
    level: int = LEVEL_DEFAULT
    validator_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.resource.kind,
            "name": self.resource.name,
            "namespace": self.resource.namespace,
            "group": self.resource.api_group,
            "message": self.message,
            "level": self.level,
            "validator": self.validator_name,
        }
