"""Use case: sync a selection of Zotero items to Capacities, one at a time."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Sequence

from ...domain.models.sync_result import SyncResult
from ..dto.sync import BatchSummary, SyncProgress

if TYPE_CHECKING:
    from ...domain.models.library_item import LibraryItem
    from ..services.cancellation import CancellationToken
    from ..services.capacities_sync import CapacitiesSyncService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SyncProgress], None]

# Capacities allows 10 requests per 60 s; a fixed pause keeps interactive batches moving
DEFAULT_PACING_DELAY = 1.0


def sync_items_to_capacities(
    service: CapacitiesSyncService,
    items: Sequence[LibraryItem],
    force: bool = False,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    pacing_delay: float = DEFAULT_PACING_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> list[SyncResult]:
    """
    Sync items sequentially, in the given order.

    A failing item never aborts the batch. Progress is reported before each
    attempt and a pacing delay separates consecutive attempts.

    Args:
        service: Sync service for single items
        items: Items in caller order (typically the current selection)
        force: Re-sync items already marked as processed
        on_progress: Called with SyncProgress(current, total, current_item) before each item
        cancel_token: Checked before each item and after each delay; stops the batch when set
        pacing_delay: Seconds to wait between items
        sleep: Sleep function (injectable for tests)

    Returns:
        One SyncResult per attempted item, in order
    """
    results: list[SyncResult] = []
    total = len(items)

    for index, item in enumerate(items):
        if cancel_token is not None and cancel_token.cancelled:
            logger.info(
                f"Sync cancelled after {index}/{total} items",
                extra={"attempted": index, "total": total},
            )
            break

        if on_progress is not None:
            on_progress(SyncProgress(current=index + 1, total=total, current_item=item.title))

        try:
            result = service.sync_item(item, force=force)
        except Exception as e:
            logger.error(
                f"Unexpected error syncing item {item.key}: {e}",
                exc_info=True,
                extra={"item_key": item.key},
            )
            result = SyncResult.failed(item.key, item.title, str(e))
        results.append(result)

        if index < total - 1:
            sleep(pacing_delay)

    summary = BatchSummary.from_results(results)
    logger.info(
        f"Complete: {summary.succeeded} synced, {summary.failed} failed",
        extra={"succeeded": summary.succeeded, "failed": summary.failed, "total": total},
    )
    return results


def sync_selected_items(
    service: CapacitiesSyncService,
    selected_items: Sequence[LibraryItem],
    force: bool = False,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    pacing_delay: float = DEFAULT_PACING_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> list[SyncResult]:
    """
    Sync the current selection: only top-level items are syncable.

    Returns:
        SyncResults for the top-level items of the selection (empty for an empty selection)
    """
    if not selected_items:
        return []

    top_level_items = [item for item in selected_items if item.is_top_level]
    skipped = len(selected_items) - len(top_level_items)
    if skipped:
        logger.debug(f"Ignoring {skipped} selected child items (attachments/annotations/notes)")

    return sync_items_to_capacities(
        service,
        top_level_items,
        force=force,
        on_progress=on_progress,
        cancel_token=cancel_token,
        pacing_delay=pacing_delay,
        sleep=sleep,
    )
