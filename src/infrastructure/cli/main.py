import logging
from pathlib import Path

import typer
from rich.console import Console

from src.application.services.processed_items import ProcessedItemsStore
from src.domain.errors import PreferenceWriteError

from ..logging import configure_logging
from . import context
from .commands import (
    prefs as prefs_cmd,
    spaces as spaces_cmd,
    sync as sync_cmd,
)

app = typer.Typer(help="Sync Zotero PDF annotations to Capacities")
console = Console()

app.add_typer(sync_cmd.app, name="sync")
app.add_typer(spaces_cmd.app, name="spaces")
app.add_typer(prefs_cmd.app, name="prefs")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to zotero-capacities.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging, including HTTP requests"),
) -> None:
    """Sync Zotero PDF annotations to Capacities."""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING, verbose=verbose)
    ctx.obj = context.CliState(config_path=config, verbose=verbose)


def _processed_items(ctx: typer.Context) -> ProcessedItemsStore:
    settings = context.load_settings(ctx)
    return ProcessedItemsStore(context.build_preferences(settings))


@app.command()
def status(
    ctx: typer.Context,
    item_key: str = typer.Argument(..., help="Zotero item key"),
) -> None:
    """Show whether an item has been synced."""
    if _processed_items(ctx).is_processed(item_key):
        console.print(f"[green]✓ {item_key} has been synced to Capacities[/green]")
    else:
        console.print(f"[yellow]{item_key} has not been synced[/yellow]")


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show how many items have been synced."""
    sync_stats = _processed_items(ctx).stats()
    console.print(f"Items synced to Capacities: [cyan]{sync_stats.processed_count}[/cyan]")


@app.command()
def undo(
    ctx: typer.Context,
    item_key: str = typer.Argument(..., help="Zotero item key"),
) -> None:
    """Forget that an item was synced so a normal sync sends it again."""
    try:
        _processed_items(ctx).remove(item_key)
    except PreferenceWriteError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ {item_key} removed from synced items[/green]")


@app.command()
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Forget all synced items."""
    if not yes:
        typer.confirm("Clear the sync history of all items?", abort=True)
    try:
        _processed_items(ctx).clear()
    except PreferenceWriteError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Sync history cleared[/green]")


if __name__ == "__main__":
    app()
