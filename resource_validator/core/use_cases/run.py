"""
Run use case — one complete validation: validators, engine, post-processing.

This is what the CLI calls. Library callers can use it too, or drive
``Validation`` directly for finer control.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from resource_validator.core.config.loader import ConfigError, load_settings
from resource_validator.core.engine.aggregator import PostProcessor, aggregate_violations
from resource_validator.core.engine.validation import (
    ProviderFactory,
    RunState,
    Validation,
    ValidationReport,
)
from resource_validator.core.services.providers import ResourceProvider
from resource_validator.validators.registry import build_default_registry

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Knobs of one validation run."""

    config_dir: Path
    validators: list[str] | None = None       # None = all built-ins
    ignore_missing_resources: bool = False
    aggregate: bool = True
    fetch_timeout: float | None = None
    max_workers: int = 1
    extra_post_processors: list[PostProcessor] = field(default_factory=list)


def run_validation(
    options: RunOptions,
    provider: ResourceProvider | None = None,
    provider_factory: ProviderFactory | None = None,
) -> ValidationReport:
    """Build validators from config, run them, and post-process violations.

    Never raises: config and selection problems come back as a failed
    report.
    """
    try:
        settings = load_settings(options.config_dir)
        registry = build_default_registry(
            settings, options.config_dir, options.ignore_missing_resources,
        )
        validators = registry.select(options.validators)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return ValidationReport(state=RunState.FAILED, setup_error=e)
    except KeyError as e:
        err = ConfigError(f"Unknown validator: {e.args[0]}")
        return ValidationReport(state=RunState.FAILED, setup_error=err)

    validation = Validation(
        provider,
        provider_factory=provider_factory,
        settings=settings,
        config_dir=options.config_dir,
        fetch_timeout=options.fetch_timeout,
        max_workers=options.max_workers,
    )
    report = validation.validate(validators)

    violations = report.violations
    if options.aggregate:
        violations = aggregate_violations(violations)
    for post_process in options.extra_post_processors:
        violations = post_process(violations)

    return report.with_violations(violations)
