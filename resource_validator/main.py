"""
Kubernetes Resource Validator — CLI entrypoint.

Usage:
    resource-validator --help
    resource-validator validate
    resource-validator validate --from-file manifests/ --validator readiness
    resource-validator validators
    resource-validator config check
"""

from __future__ import annotations

import json
import os
import sys

import click

from resource_validator import __version__
from resource_validator.core.config.loader import resolve_config_dir
from resource_validator.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="resource-validator")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config-dir",
    "-c",
    "config_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Config directory (default: $CONFIG_DIR or /config/).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_dir: str | None,
) -> None:
    """Kubernetes Resource Validator — check a cluster against policy."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_dir"] = resolve_config_dir(config_dir)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


@cli.group()
def config() -> None:
    """Configuration directory commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate every file of the config directory."""
    from resource_validator.core.use_cases.config_check import check_config

    result = check_config(ctx.obj["config_dir"])

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    settings = result.settings
    if not result.valid or settings is None:
        click.secho(f"❌ {result.config_dir}: {len(result.errors)} problem(s)", fg="red", bold=True)
        _bullets(result.errors)
        _bullets(result.warnings, title="⚠️  Warnings:")
        click.echo()
        sys.exit(1)

    abort, exempt = settings.abort, settings.exempt
    click.secho(f"✅ {result.config_dir} is valid", fg="green", bold=True)
    click.echo(f"   Abort flag: {abort.config_map_namespace}/{abort.config_map_name}[{abort.config_map_field}]")
    click.echo(f"   Exempt label: {exempt.label_name}={exempt.label_value}")
    click.echo(f"   Freshness: {settings.freshness.threshold_in_hours}h")
    for label, count in (
        ("Allowlist", result.allowlist_entries),
        ("Readiness list", result.readinesslist_entries),
        ("Privileged list", result.privilegedlist_entries),
    ):
        if count is not None:
            click.echo(f"   {label}: {count} entries")
    click.echo(f"   Additional resource types: {result.additional_resource_types}")
    _bullets(result.warnings, title="⚠️  Warnings:")
    click.echo()


def _bullets(items: list[str], title: str | None = None) -> None:
    if not items:
        return
    if title:
        click.echo()
        click.secho(title, fg="yellow")
    for item in items:
        click.echo(f"   • {item}")


# ── Register sub-commands from resource_validator/ui/cli/ ──────────

from resource_validator.ui.cli.validate import validate, validators

cli.add_command(validate)
cli.add_command(validators)


if __name__ == "__main__":
    cli()
