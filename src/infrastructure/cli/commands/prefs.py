"""Preference inspection and editing."""

from __future__ import annotations

from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from src.application.ports.preference_store import DEFAULT_PREFERENCES
from src.domain.errors import PreferenceWriteError
from src.infrastructure.cli import context
from src.infrastructure.config.environment import parse_bool

app = typer.Typer(help="Show and edit preferences")
console = Console()

# Managed through dedicated commands (status/undo/clear)
READ_ONLY_KEYS = {"processedItems"}


def mask_secret(value: str) -> str:
    """Show only the last four characters of a secret."""
    if not value:
        return ""
    if len(value) <= 4:
        return "****"
    return "*" * (len(value) - 4) + value[-4:]


def coerce_value(key: str, raw: str) -> Any:
    """
    Convert CLI text to the type of the preference's default.

    Raises:
        typer.BadParameter: If a boolean preference receives an unrecognized value
    """
    if isinstance(DEFAULT_PREFERENCES.get(key), bool):
        normalized = raw.strip().lower()
        if normalized not in ("true", "false", "1", "0", "yes", "no", "on", "off"):
            raise typer.BadParameter(f"'{raw}' is not a boolean (use true/false)")
        return parse_bool(normalized)
    return raw


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Show all preferences (the API token is masked)."""
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)

    table = Table(title=f"Preferences ({preferences.path})", show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key, value in preferences.as_dict().items():
        if key in READ_ONLY_KEYS:
            continue
        shown = mask_secret(str(value)) if key == "apiToken" else str(value)
        table.add_row(key, shown)

    console.print(table)


@app.command("set")
def set_preference(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Preference key, e.g. apiToken, spaceId, includeTags"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one preference."""
    if key not in DEFAULT_PREFERENCES or key in READ_ONLY_KEYS:
        editable = ", ".join(k for k in DEFAULT_PREFERENCES if k not in READ_ONLY_KEYS)
        console.print(f"[red]Unknown preference '{key}'. Editable keys: {editable}[/red]")
        raise typer.Exit(code=1)

    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    try:
        preferences.set(key, coerce_value(key, value))
    except PreferenceWriteError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    shown = mask_secret(value) if key == "apiToken" else value
    console.print(f"[green]✓ {key} = {shown}[/green]")
