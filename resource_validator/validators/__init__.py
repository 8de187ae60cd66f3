"""Validators — pluggable policy checks.

Public re-exports for convenient access.
"""

from resource_validator.validators.allowed_pods import (
    ALLOWED_PODS_VALIDATOR_NAME,
    AllowedPodsValidator,
)
from resource_validator.validators.base import ValidationOutcome, Validator, ValidatorError
from resource_validator.validators.fake import FAKE_VALIDATOR_NAME, FakeValidator
from resource_validator.validators.freshness import FRESHNESS_VALIDATOR_NAME, FreshnessValidator
from resource_validator.validators.privileged_pods import (
    PRIVILEGED_PODS_VALIDATOR_NAME,
    PrivilegedPodsValidator,
)
from resource_validator.validators.readiness import READINESS_VALIDATOR_NAME, ReadinessValidator
from resource_validator.validators.registry import ValidatorRegistry, build_default_registry

__all__ = [
    "ALLOWED_PODS_VALIDATOR_NAME",
    "AllowedPodsValidator",
    "FAKE_VALIDATOR_NAME",
    "FRESHNESS_VALIDATOR_NAME",
    "FakeValidator",
    "FreshnessValidator",
    "PRIVILEGED_PODS_VALIDATOR_NAME",
    "PrivilegedPodsValidator",
    "READINESS_VALIDATOR_NAME",
    "ReadinessValidator",
    "ValidationOutcome",
    "Validator",
    "ValidatorError",
    "ValidatorRegistry",
    "build_default_registry",
]
