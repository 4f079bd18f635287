"""Main CLI entry point for SecretSync.

SecretSync keeps the values of annotated secrets populated and rotated. The
CLI validates operator configuration, runs a single reconciliation cycle
against a secret manifest on disk, and inspects maintenance-window state.
Generated values are never printed.
"""

from datetime import datetime
from typing import Optional

import click

from secretsync import __version__
from secretsync.utils.errors import ErrorHandler, SecretSyncError, format_validation_errors
from secretsync.utils.logging import setup_logging


def _parse_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC3339 --now/--at option."""
    if value is None:
        return None

    from secretsync.secrets.resolver import parse_timestamp

    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise click.BadParameter(f"expected an RFC3339 timestamp: {e}") from e


def _load_config(ctx: click.Context):
    from secretsync.config import ConfigManager

    return ConfigManager(ctx.obj["config_path"]).load_config()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to file in addition to console")
@click.option("--config", "config_path", envvar="SECRETSYNC_CONFIG", help="Operator configuration file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_file: Optional[str], config_path: Optional[str]) -> None:
    """SecretSync CLI - keep annotated secrets generated and rotated.

    Args:
        ctx: Click context object containing shared state
        verbose: Enable verbose output for detailed logging
        log_file: Optional path to log file for additional logging
        config_path: Optional operator configuration file
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


@cli.command("validate-config")
@click.argument("path", required=False)
@click.pass_context
def validate_config(ctx: click.Context, path: Optional[str]) -> None:
    """Validate an operator configuration file.

    Exits with status 1 and lists every problem when the file is invalid.
    """
    from secretsync.config import ConfigValidator

    path = path or ctx.obj["config_path"] or "secretsync.yaml"
    errors = ConfigValidator().validate_config_file(path)

    if errors:
        click.echo(f"✗ {path} is invalid", err=True)
        click.echo(format_validation_errors(errors), err=True)
        ctx.exit(1)

    click.echo(f"✓ {path} is valid")


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--now", "now_value", help="Evaluate at this RFC3339 instant instead of the system time")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing the manifest")
@click.pass_context
def reconcile(ctx: click.Context, manifest: str, now_value: Optional[str], dry_run: bool) -> None:
    """Run one reconciliation cycle against a Secret manifest.

    Prints the decision for every field, the events raised and the delay
    before the secret needs to be reconciled again.
    """
    try:
        from secretsync.config.settings import format_duration
        from secretsync.secrets import EventLog, ManifestSecretStore, SecretEngine, SecretReconciler
        from secretsync.utils.clock import FixedClock, SystemClock

        config = _load_config(ctx)
        now = _parse_instant(now_value)
        clock = FixedClock(now) if now is not None else SystemClock()

        store = ManifestSecretStore(manifest)
        recorder = EventLog()
        reconciler = SecretReconciler(store, SecretEngine(config), clock=clock, recorder=recorder)

        secret = store.load()
        result = reconciler.reconcile_secret(secret, dry_run=dry_run)

        if not result.decisions:
            click.echo(f"{secret.key}: nothing to do")
            return

        prefix = "DRY RUN: " if dry_run else ""
        for decision in result.decisions:
            status = "failed" if decision.failed else decision.action.value
            click.echo(f"{prefix}{decision.field}: {status} ({decision.reason})")

        for event in result.events:
            click.echo(f"{prefix}{event.type} {event.reason}: {event.message}")

        if result.changed:
            verb = "Would update" if dry_run else "Updated"
            click.echo(f"{verb} {secret.key}")

        if result.requeue_after is not None:
            click.echo(f"Requeue after: {format_duration(result.requeue_after)}")
        else:
            click.echo("Requeue after: never")

    except click.ClickException:
        raise
    except (SecretSyncError, FileNotFoundError) as e:
        ctx.obj["error_handler"].exit_with_error(e, context=f"reconciling {manifest}")


@cli.command()
@click.option("--at", "at_value", help="Instant to check (RFC3339), defaults to now")
@click.pass_context
def windows(ctx: click.Context, at_value: Optional[str]) -> None:
    """Show maintenance-window state for an instant."""
    try:
        from secretsync.config.settings import format_duration
        from secretsync.utils.clock import SystemClock

        config = _load_config(ctx)
        at = _parse_instant(at_value) or SystemClock().now()
        maintenance = config.maintenance_windows

        if not maintenance.enabled:
            click.echo("Maintenance windows: disabled (rotation always allowed)")
            return

        click.echo(f"Maintenance windows: {len(maintenance.windows)} configured")
        active = maintenance.get_active_window(at)
        if active is not None:
            click.echo(f"Active window: {active.describe()}")
            return

        click.echo("Active window: none")
        next_start = maintenance.next_window_start(at)
        if next_start is not None:
            click.echo(f"Next window starts: {next_start.isoformat()}")
            click.echo(f"Wait: {format_duration(maintenance.duration_until_next_window(at))}")

    except click.ClickException:
        raise
    except (SecretSyncError, FileNotFoundError) as e:
        ctx.obj["error_handler"].exit_with_error(e, context="checking maintenance windows")


if __name__ == "__main__":
    cli()
