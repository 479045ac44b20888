"""Capacities space selection and connection checks."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from src.domain.errors import CapacitiesError, PreferenceWriteError
from src.infrastructure.cli import context

app = typer.Typer(help="List and select Capacities spaces")
console = Console()


def _icon_text(icon: dict | None) -> str:
    if not icon:
        return ""
    return str(icon.get("val", "")) if icon.get("type") == "emoji" else ""


@app.command("list")
def list_spaces(ctx: typer.Context) -> None:
    """List the spaces visible to the configured API token."""
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    client = context.build_client(settings, preferences)

    try:
        spaces = client.get_spaces()
    except CapacitiesError as e:
        console.print(f"[red]Failed to load spaces: {e}[/red]")
        raise typer.Exit(code=1)

    if not spaces:
        console.print("[yellow]No spaces found[/yellow]")
        return

    selected = preferences.get("spaceId", "")
    table = Table(title="Capacities Spaces", show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Selected", justify="center")

    for index, space in enumerate(spaces, start=1):
        title = f"{_icon_text(space.icon)} {space.title}".strip()
        table.add_row(str(index), title, space.id, "✓" if space.id == selected else "")

    console.print(table)


@app.command("test")
def test_connection(ctx: typer.Context) -> None:
    """Check that the API token can reach Capacities."""
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    client = context.build_client(settings, preferences)

    if client.test_connection():
        console.print("[green]✓ Connection successful[/green]")
        return

    console.print("[red]✗ Connection failed. Check your API token.[/red]")
    raise typer.Exit(code=1)


@app.command("select")
def select_space(
    ctx: typer.Context,
    index: int = typer.Argument(..., help="Space number as shown by 'zotcap spaces list'"),
) -> None:
    """Store the chosen space as the sync target."""
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    client = context.build_client(settings, preferences)

    try:
        spaces = client.get_spaces()
    except CapacitiesError as e:
        console.print(f"[red]Failed to load spaces: {e}[/red]")
        raise typer.Exit(code=1)

    if not 1 <= index <= len(spaces):
        console.print(f"[red]Invalid space number {index} (1-{len(spaces)})[/red]")
        raise typer.Exit(code=1)

    space = spaces[index - 1]
    try:
        preferences.set("spaceId", space.id)
    except PreferenceWriteError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Selected space '{space.title}' ({space.id})[/green]")
