"""Commands: warden roles:list / roles:assign / roles:revoke."""

import asyncio
import json

import typer
from rich.markup import escape
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession

from warden.commands.common import (
    DatabaseUrlOption,
    JsonOption,
    build_settings,
    console,
    run_in_session,
)
from warden.core.errors import AppException
from warden.rbac.repos import RoleAssignmentRepository, RoleRepository
from warden.rbac.services import RoleAssignmentService


async def _collect_roles(session: AsyncSession) -> list[dict[str, object]]:
    assignments = RoleAssignmentRepository(session)
    return [
        {
            "slug": role.slug,
            "name": role.name,
            "permissions": sorted(role.permission_slugs),
            "users": await assignments.count_for_role(role),
        }
        for role in await RoleRepository(session).list_all()
    ]


def list_roles(
    database_url: str | None = DatabaseUrlOption,
    as_json: bool = JsonOption,
) -> None:
    """List stored roles with their permissions and user counts."""
    settings = build_settings(database_url=database_url)
    try:
        roles = asyncio.run(run_in_session(settings, _collect_roles))
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    if as_json:
        typer.echo(json.dumps(roles))
        return

    if not roles:
        console.print("[yellow]No roles found.[/yellow] Run 'warden roles:seed' first.")
        return

    table = Table(title="Roles", show_header=True)
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Permissions")
    table.add_column("Users", style="green", justify="right")

    for role in roles:
        table.add_row(
            str(role["slug"]),
            str(role["name"]),
            ", ".join(role["permissions"]),  # type: ignore[arg-type]
            str(role["users"]),
        )

    console.print()
    console.print(table)
    console.print()


def assign(
    user_id: str = typer.Argument(..., help="Identifier of the user"),
    role: str = typer.Argument(..., help="Slug of the role to give"),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Give a user a role, replacing the role they held before."""
    settings = build_settings(database_url=database_url)
    try:
        asyncio.run(
            run_in_session(
                settings,
                lambda session: RoleAssignmentService(session).give_role(user_id, role),
            )
        )
    except AppException as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from None
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    console.print(f"[green]✓[/green] User {user_id} now has role [cyan]{role}[/cyan]")


def revoke(
    user_id: str = typer.Argument(..., help="Identifier of the user"),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Remove the role held by a user."""
    settings = build_settings(database_url=database_url)
    try:
        removed = asyncio.run(
            run_in_session(
                settings,
                lambda session: RoleAssignmentService(session).remove_role(user_id),
            )
        )
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    if removed:
        console.print(f"[green]✓[/green] Removed role from user {user_id}")
    else:
        console.print(f"[yellow]User {user_id} has no role.[/yellow]")
