"""Main warden CLI application."""

import typer
from rich.console import Console

from warden import __version__
from warden.commands import db, roles, sync


console = Console()

app = typer.Typer(
    name="warden",
    help="Seed and sync roles and permissions, and manage role assignments.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
app.command(name="roles:seed")(sync.roles_seed)
app.command(name="roles:sync")(sync.roles_sync)
app.command(name="permissions:seed")(sync.permissions_seed)
app.command(name="permissions:sync")(sync.permissions_sync)
app.command(name="roles:list")(roles.list_roles)
app.command(name="roles:assign")(roles.assign)
app.command(name="roles:revoke")(roles.revoke)
app.command(name="db:init")(db.init)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """warden CLI - Seed and sync roles and permissions."""
    if version:
        console.print(f"[bold cyan]warden[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
