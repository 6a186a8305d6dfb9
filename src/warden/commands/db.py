"""Command: warden db:init - Create the roles and permissions tables."""

import asyncio

import typer
from rich.markup import escape

from warden.commands.common import DatabaseUrlOption, build_settings, console
from warden.config import Settings
from warden.core.database import create_engine, create_tables


async def _init(settings: Settings) -> None:
    engine = create_engine(settings)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()


def init(database_url: str | None = DatabaseUrlOption) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    settings = build_settings(database_url=database_url)
    try:
        asyncio.run(_init(settings))
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    console.print("[green]✓[/green] Tables are ready")
