"""
Validation engine — the central orchestration of a validation run.

Flow:
    acquire provider → read extra resource types → fetch snapshot
    → abort gate → validators (in order) → collect violations + failures

States:
    uninitialized → prevalidated → completed | aborted | failed

Prevalidation (provider, fetch, abort gate) happens at most once per
Validation instance: later ``validate`` calls reuse the snapshot and
the abort decision. A failed prevalidation is retried on the next call.

``validate`` never raises. Setup failures, aborts and validator errors
are all reported in the returned ValidationReport.
"""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Callable

from resource_validator.core.config.loader import (
    ConfigError,
    load_additional_resource_types,
    load_settings,
    resolve_config_dir,
)
from resource_validator.core.engine.abort_gate import AbortPredicate, ConfigMapAbortGate
from resource_validator.core.models.resource import DEFAULT_RESOURCE_TYPES, Resource
from resource_validator.core.models.settings import Settings
from resource_validator.core.models.violation import Violation
from resource_validator.core.services.providers import (
    KubectlResourceProvider,
    ProviderError,
    ResourceProvider,
)
from resource_validator.validators.base import ValidationOutcome, Validator, ValidatorError

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], ResourceProvider]


class RunState(StrEnum):
    """Lifecycle of a Validation instance."""

    UNINITIALIZED = "uninitialized"
    PREVALIDATED = "prevalidated"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class ValidatorFailure:
    """A validator that could not complete; its result is void for the run."""

    validator: str
    error: Exception

    def to_dict(self) -> dict:
        return {"validator": self.validator, "error": str(self.error)}


@dataclass
class ValidationReport:
    """Result of one ``Validation.validate`` call."""

    state: RunState
    violations: list[Violation] = field(default_factory=list)
    failures: list[ValidatorFailure] = field(default_factory=list)
    setup_error: Exception | None = None
    resources_checked: int = 0
    validators_run: list[str] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.state == RunState.ABORTED

    @property
    def failed(self) -> bool:
        return self.state == RunState.FAILED

    @property
    def error(self) -> Exception | None:
        """Combined error value: the setup error, or all validator errors."""
        if self.setup_error is not None:
            return self.setup_error
        if not self.failures:
            return None
        return ExceptionGroup(
            f"{len(self.failures)} validator(s) failed",
            [f.error for f in self.failures],
        )

    @property
    def ok(self) -> bool:
        """No setup error, no validator failure, no violations."""
        return self.error is None and not self.violations

    def with_violations(self, violations: list[Violation]) -> ValidationReport:
        """Copy of this report with post-processed violations."""
        return dataclasses.replace(self, violations=list(violations))

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "resources_checked": self.resources_checked,
            "validators_run": self.validators_run,
            "violations": [v.to_dict() for v in self.violations],
            "failures": [f.to_dict() for f in self.failures],
            "setup_error": str(self.setup_error) if self.setup_error else None,
        }


class Validation:
    """One validation instance: a snapshot plus the validators run against it.

    Args:
        provider: Resource source. If None, ``provider_factory`` is called
            lazily (once) to build one.
        provider_factory: Builds the provider; defaults to connecting kubectl.
        settings: Parsed config.yaml. Loaded from ``config_dir`` if None.
        config_dir: Config directory (default: $CONFIG_DIR or /config/).
        abort_predicate: Replaces the configmap abort check entirely.
        fetch_timeout: Deadline in seconds for each provider call.
        max_workers: Run validators in a thread pool when > 1.
    """

    def __init__(
        self,
        provider: ResourceProvider | None = None,
        *,
        provider_factory: ProviderFactory | None = None,
        settings: Settings | None = None,
        config_dir: Path | str | None = None,
        abort_predicate: AbortPredicate | None = None,
        fetch_timeout: float | None = None,
        max_workers: int = 1,
    ):
        self._provider = provider
        self._provider_factory = provider_factory or KubectlResourceProvider.connect
        self._settings = settings
        self._config_dir = resolve_config_dir(config_dir)
        self._abort_predicate = abort_predicate
        self._fetch_timeout = fetch_timeout
        self._max_workers = max(1, max_workers)

        self._resources: tuple[Resource, ...] = ()
        self._state = RunState.UNINITIALIZED
        self._prevalidated = False
        self._aborted = False

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def resources(self) -> tuple[Resource, ...]:
        """The fetched snapshot (empty before prevalidation)."""
        return self._resources

    @property
    def settings(self) -> Settings | None:
        return self._settings

    def set_abort_predicate(self, predicate: AbortPredicate | None) -> None:
        """Replace the configmap abort check (None restores the default)."""
        self._abort_predicate = predicate

    # ── Prevalidation ────────────────────────────────────────────

    def _acquire_provider(self) -> ResourceProvider:
        if self._provider is None:
            self._provider = self._provider_factory()
        return self._provider

    def _should_abort(self, provider: ResourceProvider, settings: Settings) -> bool:
        if self._abort_predicate is not None:
            try:
                return bool(self._abort_predicate())
            except Exception as e:
                logger.warning("Abort predicate raised, resuming validation: %s", e)
                return False

        gate = ConfigMapAbortGate(provider, settings.abort, timeout=self._fetch_timeout)
        return gate.should_abort()

    def _prevalidate(self) -> None:
        """Fetch the snapshot and evaluate the abort gate.

        Raises:
            ProviderError: Provider cannot be built or every fetch failed.
            ConfigError: A config file is invalid.
        """
        settings = self._settings if self._settings is not None else load_settings(self._config_dir)
        self._settings = settings

        provider = self._acquire_provider()
        resource_types = [
            *DEFAULT_RESOURCE_TYPES,
            *load_additional_resource_types(self._config_dir),
        ]

        self._resources = tuple(provider.fetch(resource_types, timeout=self._fetch_timeout))
        logger.info("Fetched %d resources", len(self._resources))

        self._aborted = self._should_abort(provider, settings)
        self._prevalidated = True
        self._state = RunState.PREVALIDATED

    # ── Validation ───────────────────────────────────────────────

    def _run_validator(self, validator: Validator) -> ValidationOutcome:
        """Run one validator on a private copy of the snapshot list."""
        try:
            violations, error = validator.validate(list(self._resources))
        except Exception as e:
            # Validators should never raise, but third-party ones might
            logger.error("Validator %s raised: %s", validator.name, e)
            return [], ValidatorError(validator.name, f"unexpected error: {e}")
        return list(violations or []), error

    def _setup_failed(self, error: Exception) -> ValidationReport:
        logger.error("Validation setup failed: %s", error)
        self._state = RunState.FAILED
        return ValidationReport(state=RunState.FAILED, setup_error=error)

    def validate(self, validators: list[Validator] | None) -> ValidationReport:
        """Run validators against the snapshot.

        Args:
            validators: Validators to run, in order. None or empty is allowed.

        Returns:
            ValidationReport; never raises.
        """
        validators = list(validators or [])

        if not self._prevalidated:
            try:
                self._prevalidate()
            except (ProviderError, ConfigError) as e:
                return self._setup_failed(e)
            except Exception as e:
                # Providers from outside this package may raise anything
                err = ProviderError(f"unexpected provider failure: {e!r}")
                err.__cause__ = e
                return self._setup_failed(err)

        if self._aborted:
            self._state = RunState.ABORTED
            return ValidationReport(
                state=RunState.ABORTED, resources_checked=len(self._resources),
            )

        if self._max_workers > 1 and len(validators) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                # map() yields in input order, not completion order
                outcomes = list(pool.map(self._run_validator, validators))
        else:
            outcomes = [self._run_validator(v) for v in validators]

        report = ValidationReport(
            state=RunState.COMPLETED,
            resources_checked=len(self._resources),
            validators_run=[v.name for v in validators],
        )
        for validator, (violations, error) in zip(validators, outcomes):
            if error is not None:
                logger.error("%s: %s", validator.name, error)
                report.failures.append(ValidatorFailure(validator.name, error))
            else:
                report.violations.extend(violations)
            logger.info(
                "%s %s → %d violation(s)",
                "✗" if error is not None else "✓",
                validator.name,
                len(violations),
            )

        self._state = RunState.COMPLETED
        return report
