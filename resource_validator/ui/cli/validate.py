"""
CLI commands for running validations.

Thin wrappers over ``resource_validator.core.use_cases.run``.
"""

from __future__ import annotations

import functools
import json
import sys
from pathlib import Path

import click


@click.command("validate")
@click.option(
    "--validator", "-V", "validator_names", multiple=True,
    help="Validator to run (repeatable; default: all built-ins).",
)
@click.option(
    "--from-file", "-f", "paths", multiple=True,
    type=click.Path(exists=True, path_type=Path),
    help="Validate manifest files/directories instead of a live cluster.",
)
@click.option("--kubeconfig", default=None, help="Path to kubeconfig.")
@click.option("--context", "kube_context", default=None, help="kubectl context to use.")
@click.option("--timeout", type=float, default=None, help="Deadline (seconds) per cluster call.")
@click.option("--workers", type=click.IntRange(min=1), default=1, help="Run validators in parallel.")
@click.option(
    "--threshold", type=int, default=0, show_default=True,
    help="Violations at or below this level are errors.",
)
@click.option("--no-aggregate", is_flag=True, help="Keep one violation per validator.")
@click.option(
    "--ignore-missing", is_flag=True,
    help="Don't report readiness-list entries missing from the cluster.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def validate(
    ctx: click.Context,
    validator_names: tuple[str, ...],
    paths: tuple[Path, ...],
    kubeconfig: str | None,
    kube_context: str | None,
    timeout: float | None,
    workers: int,
    threshold: int,
    no_aggregate: bool,
    ignore_missing: bool,
    as_json: bool,
) -> None:
    """Validate cluster resources against the configured policy.

    Exit code 1 on setup failure, validator failure, or any violation
    at or below --threshold.
    """
    from resource_validator.core.observability.violation_log import (
        format_violation,
        log_violations,
        split_by_threshold,
    )
    from resource_validator.core.services.providers import (
        KubectlResourceProvider,
        ProviderError,
        StaticResourceProvider,
    )
    from resource_validator.core.use_cases.run import RunOptions, run_validation

    options = RunOptions(
        config_dir=ctx.obj["config_dir"],
        validators=list(validator_names) or None,
        ignore_missing_resources=ignore_missing,
        aggregate=not no_aggregate,
        fetch_timeout=timeout,
        max_workers=workers,
    )

    provider = None
    if paths:
        try:
            provider = StaticResourceProvider.from_paths(paths)
        except ProviderError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

    factory = functools.partial(
        KubectlResourceProvider.connect,
        kubeconfig=kubeconfig,
        context=kube_context,
    )
    report = run_validation(options, provider=provider, provider_factory=factory)
    errors, infos = split_by_threshold(report.violations, threshold)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(1 if report.error is not None or errors else 0)

    if report.failed:
        click.secho(f"❌ Validation could not run: {report.setup_error}", fg="red")
        sys.exit(1)

    if report.aborted:
        click.secho("⏸️  Validation aborted: cluster is being deployed", fg="yellow")
        return

    log_violations(report.violations, threshold)

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        click.secho(
            f"🔍 Checked {report.resources_checked} resources "
            f"with {len(report.validators_run)} validator(s)",
            fg="cyan", bold=True,
        )

    for failure in report.failures:
        click.secho(f"   ✗ {failure.validator}: {failure.error}", fg="red")

    if errors:
        click.secho(f"\n   ❌ Errors ({len(errors)}):", fg="red", bold=True)
        for v in errors:
            click.echo(f"      • {format_violation(v)}")
    if infos and not quiet:
        click.secho(f"\n   ℹ️  Info ({len(infos)}):", fg="yellow")
        for v in infos:
            click.echo(f"      • {format_violation(v)}")

    if not report.violations and not report.failures:
        click.secho("✅ All resources are valid", fg="green", bold=True)

    if report.failures or errors:
        click.echo()
        sys.exit(1)

    click.echo()


@click.command("validators")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def validators(ctx: click.Context, as_json: bool) -> None:
    """List the built-in validators."""
    from resource_validator.core.config.loader import ConfigError, load_settings
    from resource_validator.validators.registry import build_default_registry

    config_dir = ctx.obj["config_dir"]
    try:
        registry = build_default_registry(load_settings(config_dir), config_dir)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    names = registry.list_validators()
    if as_json:
        click.echo(json.dumps({"validators": names}, indent=2))
        return

    click.secho("🧩 Validators:", fg="cyan", bold=True)
    for name in names:
        click.echo(f"   • {name}")
