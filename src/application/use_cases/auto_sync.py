"""Use case: turn library annotation changes into forced re-syncs of their items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.errors import ZoteroAPIError, ZoteroLibraryReadError

if TYPE_CHECKING:
    from ...domain.models.library_item import AnnotationChange
    from ...domain.models.sync_result import SyncResult
    from ..ports.zotero_library import ZoteroLibraryPort
    from ..services.auto_sync_queue import AutoSyncQueue
    from ..services.capacities_sync import CapacitiesSyncService

logger = logging.getLogger(__name__)


class ChangeCursor:
    """
    Polling position in the annotation change feed.

    `since` is the newest dateModified seen so far. Changes listed again at that
    same second are remembered by (key, dateModified) and dropped, while another
    annotation edited within that second is still reported.
    """

    def __init__(self, since: str) -> None:
        self.since = since
        self._seen: set[tuple[str, str]] = set()

    def advance(self, changes: list[AnnotationChange]) -> list[AnnotationChange]:
        """
        Move past `changes` and return the ones not reported before.

        Args:
            changes: Result of list_annotation_changes(self.since)

        Returns:
            New changes, in the given order
        """
        fresh = [c for c in changes if (c.annotation_key, c.date_modified) not in self._seen]
        if changes:
            self.since = max(self.since, max(c.date_modified for c in changes))
        self._seen.update((c.annotation_key, c.date_modified) for c in fresh)
        # Only the current second can be listed again
        self._seen = {seen for seen in self._seen if seen[1] >= self.since}
        return fresh


def record_annotation_changes(
    changes: list[AnnotationChange],
    library: ZoteroLibraryPort,
    queue: AutoSyncQueue,
    now: float,
) -> int:
    """
    Queue the top-level items owning changed annotations.

    Only annotations whose attachment is a PDF with a parent item are queued.

    Returns:
        Number of changes queued (merged changes count once per call)
    """
    queued: set[str] = set()
    for change in changes:
        if not change.attachment_key:
            continue
        try:
            attachment = library.get_item(change.attachment_key)
        except (ZoteroLibraryReadError, ZoteroAPIError) as e:
            logger.warning(
                f"Cannot resolve attachment {change.attachment_key} of changed annotation: {e}",
                extra={"annotation_key": change.annotation_key},
            )
            continue
        if attachment is None or not attachment.is_pdf_attachment or attachment.parent_key is None:
            continue
        queue.record_change(attachment.parent_key, now)
        queued.add(attachment.parent_key)
    return len(queued)


def process_due_changes(
    service: CapacitiesSyncService,
    library: ZoteroLibraryPort,
    queue: AutoSyncQueue,
    now: float,
) -> list[SyncResult]:
    """
    Force-sync every item whose coalescing window has elapsed.

    Returns:
        SyncResults for the items that still exist in the library
    """
    results: list[SyncResult] = []
    for item_key in queue.pop_due(now):
        try:
            item = library.get_item(item_key)
        except (ZoteroLibraryReadError, ZoteroAPIError) as e:
            logger.warning(f"Cannot load item {item_key} for auto-sync: {e}", extra={"item_key": item_key})
            continue
        if item is None:
            logger.debug(f"Item {item_key} disappeared before auto-sync", extra={"item_key": item_key})
            continue
        results.append(service.sync_item(item, force=True))
    return results
