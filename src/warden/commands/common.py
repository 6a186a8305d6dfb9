"""Shared helpers for warden CLI commands."""

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from sqlalchemy.ext.asyncio import AsyncSession

from warden.config import Settings
from warden.core.database import create_engine, create_session_factory, session_scope
from warden.core.logging import configure_logging
from warden.sync.report import SyncAction, SyncReport


console = Console()

T = TypeVar("T")

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Roles configuration file (default: $WARDEN_ROLES_FILE or roles.yaml)",
)
DatabaseUrlOption = typer.Option(
    None, "--database-url", help="Database URL (default: $WARDEN_DATABASE_URL)"
)
JsonOption = typer.Option(False, "--json", help="Print the report as JSON")

_ACTION_STYLES: dict[SyncAction, tuple[str, str]] = {
    SyncAction.ADDED: ("[green]+[/green]", "Added"),
    SyncAction.UPDATED: ("[cyan]~[/cyan]", "Updated"),
    SyncAction.RESTORED: ("[cyan]↺[/cyan]", "Restored"),
    SyncAction.UNCHANGED: ("[dim]✓[/dim]", "Exists"),
    SyncAction.ATTACHED: ("[green]↳[/green]", "Attached"),
    SyncAction.DETACHED: ("[yellow]↲[/yellow]", "Detached"),
    SyncAction.DELETED: ("[red]-[/red]", "Removed"),
    SyncAction.SKIPPED: ("[yellow]![/yellow]", "Skipped"),
}


def build_settings(config: Path | None = None, database_url: str | None = None) -> Settings:
    """Build settings for one invocation and configure logging from them.

    Command-line options take priority over environment variables.
    """
    overrides: dict[str, object] = {}
    if config is not None:
        overrides["roles_file"] = config
    if database_url is not None:
        overrides["database_url"] = database_url

    settings = Settings(**overrides)  # type: ignore[arg-type]
    configure_logging(settings.log_level, settings.json_logs or settings.is_production)
    return settings


async def run_in_session(
    settings: Settings, work: Callable[[AsyncSession], Awaitable[T]]
) -> T:
    """Run ``work`` inside a single transaction on a fresh engine."""
    engine = create_engine(settings)
    try:
        async with session_scope(create_session_factory(engine)) as session:
            return await work(session)
    finally:
        await engine.dispose()


def print_report(report: SyncReport, as_json: bool = False) -> None:
    """Print a sync report as per-item lines plus a summary, or as JSON."""
    if as_json:
        typer.echo(report.model_dump_json())
        return

    for event in report.events:
        symbol, verb = _ACTION_STYLES[event.action]
        label = escape(f"{event.name} ({event.slug})" if event.name else event.slug)
        if event.role:
            console.print(f"  {symbol} {verb} {event.kind}: {label} -> {event.role}")
        else:
            console.print(f"  {symbol} {verb} {event.kind}: {label}")

    console.print()
    console.print(f"[bold green]✓[/bold green] {report.command} completed")
    kinds = [("permissions", report.permissions)]
    if report.command.startswith("roles:"):
        kinds.insert(0, ("roles", report.roles))
    for kind, counts in kinds:
        console.print(
            f"  - Added: {counts.added} {kind}, Updated: {counts.updated}, "
            f"Restored: {counts.restored}"
        )
    if report.attached or report.detached:
        console.print(f"  - Attached: {report.attached}")
        console.print(f"  - Detached: {report.detached}")
    if report.command.endswith(":sync"):
        console.print(f"  - Synced: {report.synced}")
        for kind, counts in kinds:
            console.print(f"  - Removed: {counts.deleted} {kind}")
