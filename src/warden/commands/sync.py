"""Commands: warden roles:seed / roles:sync / permissions:seed / permissions:sync."""

import asyncio
from pathlib import Path

import structlog
import typer
from rich.markup import escape
from sqlalchemy.ext.asyncio import AsyncSession

from warden.commands.common import (
    ConfigOption,
    DatabaseUrlOption,
    JsonOption,
    build_settings,
    console,
    print_report,
    run_in_session,
)
from warden.core.errors import ConfigurationEmptyError
from warden.sync import ConfigSynchronizer, RolesConfig, SyncReport, load_roles_config


logger = structlog.get_logger()


async def _synchronize(
    session: AsyncSession, roles_config: RolesConfig, command: str, purge: bool
) -> SyncReport:
    synchronizer = ConfigSynchronizer(session, roles_config)
    match command:
        case "roles:seed":
            return await synchronizer.seed_roles()
        case "roles:sync":
            return await synchronizer.sync_roles(purge=purge)
        case "permissions:seed":
            return await synchronizer.seed_permissions()
        case _:
            return await synchronizer.sync_permissions(purge=purge)


def _run(
    command: str,
    config: Path | None,
    database_url: str | None,
    as_json: bool,
    purge: bool = False,
) -> None:
    """Load the configuration, run one synchronizer command, and report."""
    settings = build_settings(config, database_url)
    destructive = command.endswith(":sync")

    if not as_json:
        console.print(
            f"[bold cyan]Running {command}[/bold cyan] "
            f"({escape(str(settings.roles_file))})"
        )

    try:
        roles_config = load_roles_config(settings.roles_file)
        report = asyncio.run(
            run_in_session(
                settings,
                lambda session: _synchronize(session, roles_config, command, purge),
            )
        )
    except ConfigurationEmptyError as e:
        logger.warning("sync_aborted", command=command, reason=e.message)
        console.print(
            f"[yellow]Warning:[/yellow] {escape(e.message)} "
            f"Please check {escape(str(settings.roles_file))}."
        )
        raise typer.Exit(1) from None
    except Exception as e:
        if destructive:
            logger.exception("sync_failed", command=command)
        else:
            logger.error("sync_failed", command=command, error=str(e))
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    print_report(report, as_json)


def roles_seed(
    config: Path | None = ConfigOption,
    database_url: str | None = DatabaseUrlOption,
    as_json: bool = JsonOption,
) -> None:
    """Create or update the configured roles and their permissions.

    Safe to run repeatedly: roles and permissions missing from the
    configuration are left in place.
    """
    _run("roles:seed", config, database_url, as_json)


def roles_sync(
    config: Path | None = ConfigOption,
    database_url: str | None = DatabaseUrlOption,
    as_json: bool = JsonOption,
    purge: bool = typer.Option(
        False, "--purge", help="Hard delete removed permissions instead of soft deleting"
    ),
) -> None:
    """Make the stored roles and permissions match the configuration exactly.

    Roles missing from the configuration are deleted together with their
    user assignments.
    """
    _run("roles:sync", config, database_url, as_json, purge=purge)


def permissions_seed(
    config: Path | None = ConfigOption,
    database_url: str | None = DatabaseUrlOption,
    as_json: bool = JsonOption,
) -> None:
    """Create, restore, or update the configured permissions only."""
    _run("permissions:seed", config, database_url, as_json)


def permissions_sync(
    config: Path | None = ConfigOption,
    database_url: str | None = DatabaseUrlOption,
    as_json: bool = JsonOption,
    purge: bool = typer.Option(
        False, "--purge", help="Hard delete removed permissions instead of soft deleting"
    ),
) -> None:
    """Seed permissions, then remove every permission not in the configuration."""
    _run("permissions:sync", config, database_url, as_json, purge=purge)
