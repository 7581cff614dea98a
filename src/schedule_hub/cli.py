"""Schedule Hub command line.

Usage:
    schedule-hub sync          Run one ingestion pass and print a summary
    schedule-hub wipe          Delete the local database
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from schedule_hub.config import get_settings
from schedule_hub.container import build_services
from schedule_hub.ingestion.pipeline import SyncResult
from schedule_hub.logging_config import configure_logging
from schedule_hub.notifications.delivery import LoggingDelivery
from schedule_hub.store.errors import StoreError

app = typer.Typer(
    name="schedule-hub",
    help="Slack meeting notices to local schedules",
    no_args_is_help=True,
)

console = Console()

# SQLite keeps these next to the database file in WAL mode
_SIDECAR_SUFFIXES = ("-wal", "-shm")


def database_files(database_path: Path) -> list[Path]:
    """The database file and its WAL sidecars, whether or not they exist."""
    path = database_path.expanduser()
    return [path] + [path.with_name(path.name + suffix) for suffix in _SIDECAR_SUFFIXES]


def format_sync_result(result: SyncResult) -> Table:
    table = Table(title="Sync summary")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    table.add_row("Messages fetched", str(result.fetched_messages))
    table.add_row("Schedules found", str(result.schedules))
    table.add_row("Saved", str(result.saved))
    table.add_row("Already stored", str(result.skipped_existing))
    table.add_row("Previously deleted", str(result.skipped_deleted))
    table.add_row("Failed workspaces", str(len(result.failed_workspaces)))
    return table


@app.command()
def sync():
    """Fetch every enabled workspace once and store new schedules."""
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        services = build_services(settings, delivery=LoggingDelivery())
    except StoreError as exc:
        console.print(f"[red]Cannot open database:[/red] {exc}")
        raise typer.Exit(1)

    try:
        if not services.store.has_any_workspace():
            console.print("[yellow]No workspace configured.[/yellow]")
            return
        result = asyncio.run(services.pipeline.sync())
    finally:
        services.store.dispose()

    console.print(format_sync_result(result))
    if result.failed_workspaces:
        console.print(
            f"[yellow]{len(result.failed_workspaces)} workspace(s) failed; see logs.[/yellow]"
        )


@app.command()
def wipe(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete the local database. It is recreated on next start."""
    settings = get_settings()
    existing = [p for p in database_files(settings.database_path) if p.exists()]
    if not existing:
        console.print(f"[yellow]Database not found:[/yellow] {settings.database_path}")
        return

    if not yes:
        typer.confirm(f"Delete all data in {existing[0]}?", abort=True)

    for path in existing:
        path.unlink()
        console.print(f"[green]Deleted[/green] {path}")
    console.print("All data cleared. The database will be recreated on next launch.")
