"""
Violation aggregator — optional post-processing of a run's violations.

Violations are grouped by target resource (kind, name, namespace, API
group), in the order resources are first seen:

    one violation      → passed through, unless its validator is in
                         ``suppress_solo`` (privileged-pods by default:
                         uncorroborated privileged findings are noise)
    several violations → one escalated violation at the most severe
                         level, validators joined with "+"
"""

from __future__ import annotations

from typing import Callable, Iterable

from resource_validator.core.models.resource import ResourceTarget
from resource_validator.core.models.violation import LEVEL_CRITICAL, Violation
from resource_validator.validators.privileged_pods import PRIVILEGED_PODS_VALIDATOR_NAME

AGGREGATED_MESSAGE = "aggregated violation"

DEFAULT_SUPPRESS_SOLO = frozenset({PRIVILEGED_PODS_VALIDATOR_NAME})

# Signature of any post-processing stage applied to a run's violations.
PostProcessor = Callable[[list[Violation]], list[Violation]]


def group_violations_by_resource(violations: Iterable[Violation]) -> list[list[Violation]]:
    """Group violations per target resource, preserving encounter order."""
    groups: dict[ResourceTarget, list[Violation]] = {}
    for violation in violations:
        groups.setdefault(violation.resource.target, []).append(violation)
    return list(groups.values())


def escalate(group: list[Violation]) -> Violation:
    """Merge several violations of one resource into a single level-0 violation."""
    return Violation(
        resource=group[0].resource,
        message=AGGREGATED_MESSAGE,
        level=LEVEL_CRITICAL,
        validator_name="+".join(v.validator_name for v in group),
    )


def aggregate_violations(
    violations: Iterable[Violation],
    suppress_solo: frozenset[str] = DEFAULT_SUPPRESS_SOLO,
) -> list[Violation]:
    """Group, suppress and escalate violations (see module docstring)."""
    result: list[Violation] = []
    for group in group_violations_by_resource(violations):
        if len(group) == 1:
            if group[0].validator_name not in suppress_solo:
                result.append(group[0])
        else:
            result.append(escalate(group))
    return result
