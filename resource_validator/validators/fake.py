"""
Fake validator — test double for orchestration.

Produces a configurable number of synthetic violations, or fails with
an error. Records every snapshot it was called with.
"""

from __future__ import annotations

from resource_validator.core.models.resource import Resource
from resource_validator.validators.base import ValidationOutcome, Validator

FAKE_VALIDATOR_NAME = "built-in:fake"


class FakeValidator(Validator):
    """Universal fake validator for testing."""

    def __init__(
        self,
        number_of_violations: int = 0,
        should_fail: bool = False,
        validator_name: str = FAKE_VALIDATOR_NAME,
    ):
        self._name = validator_name
        self._number_of_violations = number_of_violations
        self._should_fail = should_fail
        self._call_log: list[list[Resource]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[list[Resource]]:
        """Every snapshot this fake has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def validate(self, resources: list[Resource]) -> ValidationOutcome:
        self._call_log.append(resources)

        if self._should_fail:
            return [], self.failure("fake error")

        violations = [
            self.violation(
                Resource(kind="Fake", name=str(i), namespace="fake"),
                "Fake resource violation",
            )
            for i in range(self._number_of_violations)
        ]
        return violations, None

    def reset(self) -> None:
        self._call_log.clear()
