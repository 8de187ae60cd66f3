"""
Validator base — the plugin contract between the engine and policy checks.

Every policy check implements this interface. The engine only talks to
validators through it, which keeps the set of checks open: external
code adds a policy by subclassing ``Validator``.

Contract:
    name        stable identifier, used in logs and for aggregation
    validate    (resources) → (violations, error)

A non-None error means the validator could not complete (e.g. its
config file is missing) and its result is void for this run. An empty
violation list with no error means every resource complies. Validators
must never mutate the resources they are given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from resource_validator.core.models.resource import Resource
from resource_validator.core.models.violation import LEVEL_DEFAULT, Violation


class ValidatorError(Exception):
    """A validator could not complete its run."""

    def __init__(self, validator_name: str, message: str):
        super().__init__(f"{validator_name}: {message}")
        self.validator_name = validator_name


ValidationOutcome = tuple[list[Violation], ValidatorError | None]


class Validator(ABC):
    """Abstract base class for all validators.

    To create a new validator:
        1. Subclass Validator
        2. Implement name and validate
        3. Pass it to Validation.validate (or register it in a ValidatorRegistry)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The validator identifier (e.g. 'built-in:freshness')."""

    @abstractmethod
    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        """Check the snapshot and return (violations, error).

        Should not raise: failures are returned as a ValidatorError.
        """

    def violation(self, resource: Resource, message: str, level: int = LEVEL_DEFAULT) -> Violation:
        """Build a Violation attributed to this validator."""
        return Violation(
            resource=resource,
            message=message,
            level=level,
            validator_name=self.name,
        )

    def failure(self, message: str) -> ValidatorError:
        """Build a ValidatorError attributed to this validator."""
        return ValidatorError(self.name, message)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
