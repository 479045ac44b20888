"""Application service syncing the annotations of one Zotero item to Capacities."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.errors import CapacitiesError
from ...domain.models.sync_result import SyncResult
from ...domain.policy.sync_policy import DEFAULT_SYNC_POLICY, SyncPolicy
from ...domain.services.links import best_url_for_item
from ...domain.services.markdown_formatter import (
    MarkdownOptions,
    build_description,
    format_annotations_to_markdown,
)
from ..ports.capacities_api import SaveWeblinkRequest

if TYPE_CHECKING:
    from ...domain.models.annotation import ItemAnnotationData
    from ...domain.models.library_item import LibraryItem
    from ..dto.sync import SyncStats
    from ..ports.capacities_api import CapacitiesApiPort
    from .annotation_extractor import AnnotationExtractor
    from .processed_items import ProcessedItemsStore

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Capacities API not configured. Please set API token and Space ID."
ALREADY_SYNCED = "Item already synced. Use force sync to re-sync."
NO_PDF = "No PDF attachments or annotations found."
NO_ANNOTATIONS = "No annotations found in PDF."
UNKNOWN_ERROR = "Unknown error occurred"
UNKNOWN_TITLE = "Unknown"

BASE_TAGS = ("zotero", "annotations")
DOI_TAG = "research"


def build_tags(data: ItemAnnotationData) -> list[str]:
    tags = list(BASE_TAGS)
    if data.item_doi:
        tags.append(DOI_TAG)
    return tags


class CapacitiesSyncService:
    """
    Sync one item at a time: dedup check, extract, format, submit, record.

    The only state change is adding the item key to the processed-items store
    after a successful submission; nothing is written before the remote call
    succeeds, so a failed attempt can simply be retried.
    """

    def __init__(
        self,
        extractor: AnnotationExtractor,
        client: CapacitiesApiPort,
        processed_items: ProcessedItemsStore,
        markdown_options: MarkdownOptions | None = None,
        policy: SyncPolicy = DEFAULT_SYNC_POLICY,
    ) -> None:
        """
        Initialize sync service.

        Args:
            extractor: Annotation extractor bound to a Zotero library
            client: Capacities API client (reads credentials per call)
            processed_items: Dedup store
            markdown_options: Formatting toggles (defaults: all enabled)
            policy: Submission limits
        """
        self.extractor = extractor
        self.client = client
        self.processed_items = processed_items
        self.markdown_options = markdown_options or MarkdownOptions()
        self.policy = policy

    def sync_item(
        self,
        item: LibraryItem,
        force: bool = False,
        skip_processed_check: bool = False,
    ) -> SyncResult:
        """
        Sync the annotations of an item to Capacities as a weblink.

        Args:
            item: Item to sync (annotations/attachments resolve to their top-level item)
            force: Re-sync even if the item was already synced
            skip_processed_check: Skip the dedup check without implying a re-sync

        Returns:
            SyncResult describing success or the reason for failure
        """
        title = item.title or UNKNOWN_TITLE

        if not self.client.is_configured():
            return self._fail(item.key, title, NOT_CONFIGURED)

        if not force and not skip_processed_check and self.processed_items.is_processed(item.key):
            return self._fail(item.key, title, ALREADY_SYNCED)

        data = self.extractor.extract_from_item(item)
        if data is None:
            return self._fail(item.key, title, NO_PDF)

        data_title = data.item_title or UNKNOWN_TITLE
        if not data.annotations:
            return self._fail(data.item_key, data_title, NO_ANNOTATIONS)

        request = SaveWeblinkRequest(
            url=best_url_for_item(data),
            title_overwrite=data.item_title,
            description_overwrite=build_description(data, self.policy.max_description_length),
            tags=build_tags(data),
            md_text=format_annotations_to_markdown(data, self.markdown_options),
        )

        try:
            response = self.client.save_weblink(request)
        except CapacitiesError as e:
            message = str(e) or UNKNOWN_ERROR
            return self._fail(data.item_key, data_title, message)

        self.processed_items.add(data.item_key)
        logger.info(
            f"Synced '{data_title}' to Capacities ({len(data.annotations)} annotations)",
            extra={"item_key": data.item_key, "capacities_id": response.id},
        )
        return SyncResult(
            item_key=data.item_key,
            item_title=data_title,
            success=True,
            capacities_id=response.id,
            structure_id=response.structure_id,
        )

    def send_to_daily_note(self, item: LibraryItem) -> SyncResult:
        """
        Append the formatted annotations of an item to today's daily note.

        Daily note entries are not tracked in the processed-items store.
        """
        title = item.title or UNKNOWN_TITLE

        if not self.client.is_configured():
            return self._fail(item.key, title, NOT_CONFIGURED)

        data = self.extractor.extract_from_item(item)
        if data is None:
            return self._fail(item.key, title, NO_PDF)

        data_title = data.item_title or UNKNOWN_TITLE
        if not data.annotations:
            return self._fail(data.item_key, data_title, NO_ANNOTATIONS)

        md_text = f"### {data_title}\n\n{format_annotations_to_markdown(data, self.markdown_options)}"
        try:
            self.client.save_to_daily_note(md_text)
        except CapacitiesError as e:
            return self._fail(data.item_key, data_title, str(e) or UNKNOWN_ERROR)

        logger.info(f"Added '{data_title}' to the daily note", extra={"item_key": data.item_key})
        return SyncResult(item_key=data.item_key, item_title=data_title, success=True)

    def _fail(self, item_key: str, title: str, error: str) -> SyncResult:
        logger.warning(f"Sync failed for '{title}': {error}", extra={"item_key": item_key})
        return SyncResult.failed(item_key, title, error)

    def is_item_processed(self, item_key: str) -> bool:
        return self.processed_items.is_processed(item_key)

    def remove_processed_item(self, item_key: str) -> None:
        self.processed_items.remove(item_key)

    def clear_processed_items(self) -> None:
        self.processed_items.clear()

    def get_sync_stats(self) -> SyncStats:
        return self.processed_items.stats()
