"""
Violation log — hand a run's violations to the logging sink.

Violations at or below ``threshold`` are errors; the rest are info.
Each channel gets one grouped record, which keeps traffic low when the
log handler ships to a remote service.

Levels:
    ERROR   "error violations"        level <= threshold
    INFO    "info violations"         level >  threshold
    INFO    "all resources are valid" nothing found
"""

from __future__ import annotations

import logging

from resource_validator.core.models.violation import Violation

LOGGER_NAME = "resource_validator.violations"


def format_violation(violation: Violation) -> str:
    return (
        f"resource: {violation.resource.describe()}; "
        f"validator: {violation.validator_name}; message: {violation.message}"
    )


def split_by_threshold(
    violations: list[Violation], threshold: int,
) -> tuple[list[Violation], list[Violation]]:
    """(errors, infos) — errors are violations with level <= threshold."""
    errors = [v for v in violations if v.level <= threshold]
    infos = [v for v in violations if v.level > threshold]
    return errors, infos


def log_violations(
    violations: list[Violation],
    threshold: int = 0,
    logger: logging.Logger | None = None,
) -> None:
    """Write violations to the log, grouped by error/info channel."""
    logger = logger or logging.getLogger(LOGGER_NAME)

    if not violations:
        logger.info("all resources are valid")
        return

    errors, infos = split_by_threshold(violations, threshold)

    if errors:
        logger.error(
            "error violations (%d):\n  %s",
            len(errors),
            "\n  ".join(format_violation(v) for v in errors),
        )
    if infos:
        logger.info(
            "info violations (%d):\n  %s",
            len(infos),
            "\n  ".join(format_violation(v) for v in infos),
        )
