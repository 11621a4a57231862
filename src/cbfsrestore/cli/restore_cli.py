"""
CLI commands for restoring a store from a backup archive.

Focuses on argument parsing and reporting; the restore pipeline itself lives
in cbfsrestore.restore.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cbfsrestore.core.config import RestoreSettings, get_settings
from cbfsrestore.core.errors import FatalRestoreError
from cbfsrestore.restore.supervisor import run_restore
from cbfsrestore.schemas.records import RunSummary

logger = logging.getLogger(__name__)
console = Console()


def configure_logging(log_level: str, verbose: bool = False):
    level_name = "DEBUG" if verbose else log_level.upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        typer.echo(f"Error: Invalid log level: {log_level}", err=True)
        raise typer.Exit(2)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def restore_cmd(
    archive_path: Path = typer.Argument(
        ..., help="Path to the gzip-compressed backup archive"
    ),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Base URL of the store to restore into"
    ),
    match: Optional[str] = typer.Option(
        None, "--match", help="Regex for paths to match"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Number of restore workers"
    ),
    queue_size: Optional[int] = typer.Option(
        None, "--queue-size", help="Records buffered between the archive reader and the workers"
    ),
    dry_run: Optional[bool] = typer.Option(
        None, "--dry-run/--no-dry-run", "-n", help="Read and filter the archive without restoring anything"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
):
    """
    Restore files recorded in a backup archive.
    """
    settings = _load_settings()
    configure_logging(log_level or settings.log_level, verbose)

    try:
        config = settings.to_config(
            base_url=url,
            match=match,
            workers=workers,
            queue_size=queue_size,
            dry_run=dry_run,
            request_timeout=timeout,
        )
        logger.debug(f"Restore configuration: {config!r}")
        if config.dry_run:
            typer.echo("Dry run: no files will be sent to the store")
        summary = run_restore(config, archive_path)
    except FatalRestoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _print_summary(summary)


def settings_cmd():
    """
    Show the effective restore settings.
    """
    settings = _load_settings()
    table = Table(title="Restore Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


def _load_settings() -> RestoreSettings:
    try:
        return get_settings()
    except FatalRestoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _print_summary(summary: RunSummary):
    table = Table(title="Restore Summary")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Records read", str(summary.records_read))
    table.add_row("Matched", str(summary.matched))
    table.add_row("Dispatched", str(summary.dispatched))
    table.add_row("Elapsed", f"{summary.elapsed:.3f}s")
    if summary.dry_run:
        table.add_row("Mode", "dry run")
    console.print(table)
    typer.echo(summary.describe())
