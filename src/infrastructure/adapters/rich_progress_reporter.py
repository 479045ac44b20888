"""Rich-based progress reporter adapter for batch sync."""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ...application.dto.sync import BatchSummary
from ...application.ports.progress_reporter import ProgressContext, ProgressReporterPort

if TYPE_CHECKING:
    from ...application.dto.sync import SyncProgress
    from ...domain.models.sync_result import SyncResult

logger = logging.getLogger(__name__)


class RichProgressContext:
    """Batch progress bar; each update marks the previous item done and shows the next title."""

    def __init__(self, progress: Progress, task_id: TaskID, total_items: int, description: str) -> None:
        self.progress = progress
        self.task_id = task_id
        self.total_items = total_items
        self.description = description

    def update(self, progress: SyncProgress) -> None:
        title = progress.current_item or "Unknown"
        self.progress.update(
            self.task_id,
            completed=progress.current - 1,
            total=progress.total,
            description=f"{self.description} [cyan]{title}[/cyan]",
        )

    def finish(self, succeeded: int, failed: int) -> None:
        self.progress.update(
            self.task_id,
            completed=self.total_items,
            description=f"{self.description} - {succeeded} synced, {failed} failed",
        )
        self.progress.stop()


class LoggingProgressContext:
    """Fallback progress context for non-interactive mode using logging."""

    def __init__(self, total_items: int, description: str) -> None:
        self.total_items = total_items
        self.description = description
        self.start_time = time.time()
        logger.info(f"Starting: {description} ({total_items} items)")

    def update(self, progress: SyncProgress) -> None:
        elapsed = time.time() - self.start_time
        logger.info(
            f"Progress: {progress.current}/{progress.total} ({progress.percent}%) - "
            f"{progress.current_item or 'Unknown'} - Elapsed: {elapsed:.1f}s"
        )

    def finish(self, succeeded: int, failed: int) -> None:
        elapsed = time.time() - self.start_time
        logger.info(f"Completed: {self.description} - {succeeded} synced, {failed} failed in {elapsed:.1f}s")


class RichProgressReporterAdapter(ProgressReporterPort):
    """Progress bar on a TTY, structured log lines otherwise."""

    def __init__(self, console: Console | None = None, interactive: bool | None = None) -> None:
        self.is_interactive = sys.stdout.isatty() if interactive is None else interactive
        self.console = console or Console(file=sys.stdout if self.is_interactive else sys.stderr)

        if not self.is_interactive:
            logger.info("Non-interactive mode detected - using structured logging for progress")

    def start_batch(
        self,
        total_items: int,
        description: str = "Syncing to Capacities",
    ) -> ProgressContext:
        if not self.is_interactive:
            return LoggingProgressContext(total_items=total_items, description=description)

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        progress.start()
        task_id = progress.add_task(description, total=total_items)
        return RichProgressContext(
            progress=progress,
            task_id=task_id,
            total_items=total_items,
            description=description,
        )

    def display_summary(self, results: list[SyncResult]) -> BatchSummary:
        """Print one row per result and the final counts."""
        table = Table(title="Sync Results", show_header=True, header_style="bold")
        table.add_column("Item", style="cyan")
        table.add_column("Title")
        table.add_column("Status")
        table.add_column("Details", style="dim")

        for result in results:
            if result.success:
                table.add_row(result.item_key, result.item_title, "[green]synced[/green]", result.capacities_id or "")
            else:
                table.add_row(result.item_key, result.item_title, "[red]failed[/red]", result.error or "")

        summary = BatchSummary.from_results(results)
        self.console.print(table)
        self.console.print(f"Complete: {summary.succeeded} synced, {summary.failed} failed")
        return summary
