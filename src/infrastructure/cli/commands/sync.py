"""Commands syncing Zotero annotations to Capacities."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

import typer
from rich.console import Console

from src.application.dto.sync import BatchSummary
from src.application.ports.zotero_library import ZoteroLibraryPort
from src.application.services.auto_sync_queue import AutoSyncQueue
from src.application.services.cancellation import CancellationToken
from src.application.use_cases.auto_sync import ChangeCursor, process_due_changes, record_annotation_changes
from src.application.use_cases.sync_items import sync_selected_items
from src.domain.errors import ZoteroAPIError, ZoteroLibraryReadError
from src.domain.models.library_item import LibraryItem
from src.infrastructure.cli import context

app = typer.Typer(help="Sync item annotations to Capacities")
console = Console()
logger = logging.getLogger(__name__)


def _load_item(library: ZoteroLibraryPort, item_key: str) -> LibraryItem:
    try:
        item = library.get_item(item_key)
    except (ZoteroLibraryReadError, ZoteroAPIError) as e:
        console.print(f"[red]Failed to read item {item_key}: {e}[/red]")
        raise typer.Exit(code=1)
    if item is None:
        console.print(f"[red]Item not found: {item_key}[/red]")
        raise typer.Exit(code=1)
    return item


@app.command("item")
def sync_item(
    ctx: typer.Context,
    item_key: str = typer.Argument(..., help="Zotero item key"),
    force: bool = typer.Option(False, "--force", "-f", help="Re-sync even if already synced"),
) -> None:
    """
    Sync the annotations of one item.

    Examples:
        zotcap sync item ABCD1234
        zotcap sync item ABCD1234 --force
    """
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    library = context.build_library(settings)
    service = context.build_service(settings, preferences, library)

    result = service.sync_item(_load_item(library, item_key), force=force)
    if result.success:
        console.print(f"[green]✓ Synced '{result.item_title}' to Capacities[/green]")
        if result.capacities_id:
            console.print(f"[dim]Capacities ID: {result.capacities_id}[/dim]")
        return

    console.print(f"[red]✗ {result.item_title}: {result.error}[/red]")
    raise typer.Exit(code=1)


@app.command("selected")
def sync_selected(
    ctx: typer.Context,
    item_keys: list[str] = typer.Argument(..., help="Zotero item keys, synced in the given order"),
    force: bool = typer.Option(False, "--force", "-f", help="Re-sync items already synced"),
) -> None:
    """
    Sync several items, pacing requests to respect the Capacities rate limit.

    Child items (attachments, annotations, notes) are ignored. Press Ctrl-C to
    stop after the current item.

    Examples:
        zotcap sync selected ABCD1234 EFGH5678
    """
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    library = context.build_library(settings)
    service = context.build_service(settings, preferences, library)

    items = [_load_item(library, key) for key in item_keys]
    top_level = [item for item in items if item.is_top_level]
    if not top_level:
        console.print("[yellow]No syncable items selected[/yellow]")
        raise typer.Exit(code=1)

    reporter = context.build_reporter()
    progress = reporter.start_batch(len(top_level))
    cancel_token = CancellationToken()

    try:
        results = sync_selected_items(
            service,
            items,
            force=force,
            on_progress=progress.update,
            cancel_token=cancel_token,
            pacing_delay=settings.sync.pacing_delay_seconds,
        )
    except KeyboardInterrupt:
        cancel_token.cancel()
        console.print("[yellow]Sync interrupted[/yellow]")
        raise typer.Exit(code=130)

    summary = BatchSummary.from_results(results)
    progress.finish(summary.succeeded, summary.failed)
    reporter.display_summary(results)
    if summary.failed:
        raise typer.Exit(code=1)


@app.command("daily-note")
def daily_note(
    ctx: typer.Context,
    item_key: str = typer.Argument(..., help="Zotero item key"),
) -> None:
    """Append the annotations of an item to today's daily note."""
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    library = context.build_library(settings)
    service = context.build_service(settings, preferences, library)

    result = service.send_to_daily_note(_load_item(library, item_key))
    if result.success:
        console.print(f"[green]✓ Added '{result.item_title}' to today's daily note[/green]")
        return

    console.print(f"[red]✗ {result.item_title}: {result.error}[/red]")
    raise typer.Exit(code=1)


@app.command("watch")
def watch(ctx: typer.Context) -> None:
    """
    Re-sync items whenever their annotations change (Ctrl-C to stop).

    Requires the syncOnItemChange preference.
    """
    settings = context.load_settings(ctx)
    preferences = context.build_preferences(settings)
    if not preferences.get_bool("syncOnItemChange", False):
        console.print("[yellow]Auto-sync is disabled. Enable it with: zotcap prefs set syncOnItemChange true[/yellow]")
        raise typer.Exit(code=1)

    library = context.build_library(settings)
    service = context.build_service(settings, preferences, library)
    queue = AutoSyncQueue(debounce_seconds=settings.sync.debounce_seconds)
    cursor = ChangeCursor(datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"))

    console.print(f"[cyan]Watching for annotation changes every {settings.sync.poll_interval_seconds:g}s...[/cyan]")
    try:
        while True:
            try:
                changes = cursor.advance(library.list_annotation_changes(cursor.since))
            except (ZoteroLibraryReadError, ZoteroAPIError) as e:
                logger.warning(f"Failed to poll annotation changes: {e}")
                changes = []
            if changes:
                record_annotation_changes(changes, library, queue, time.monotonic())

            for result in process_due_changes(service, library, queue, time.monotonic()):
                if result.success:
                    console.print(f"[green]✓ Auto-synced '{result.item_title}'[/green]")
                else:
                    console.print(f"[red]✗ {result.item_title}: {result.error}[/red]")

            time.sleep(settings.sync.poll_interval_seconds)
    except KeyboardInterrupt:
        console.print("[yellow]Stopped watching[/yellow]")
