"""Adapter reading items and annotations through the Zotero Web API (pyzotero)."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, TypeVar

from pyzotero import zotero, zotero_errors

from ...application.ports.zotero_library import ZoteroLibraryPort
from ...domain.errors import ZoteroAPIError, ZoteroConnectionError, ZoteroRateLimitError
from ...domain.models.library_item import AnnotationChange, Creator, LibraryItem
from .zotero_local_db import normalize_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Page size used when scanning recently modified annotations
CHANGES_PAGE_SIZE = 100


def item_from_api(entry: dict[str, Any]) -> LibraryItem:
    """Build a LibraryItem from a Web API item entry ({'key', 'library', 'data', ...})."""
    data = entry.get("data", {})
    creators = tuple(
        Creator(
            first_name=c.get("firstName", ""),
            last_name=c.get("lastName") or c.get("name", ""),
        )
        for c in data.get("creators", [])
    )
    library = entry.get("library") or {}
    return LibraryItem(
        key=data.get("key") or entry["key"],
        item_type=data.get("itemType", ""),
        title=data.get("title", "") or "",
        parent_key=data.get("parentItem") or None,
        library_type=library.get("type", "user"),
        url=data.get("url") or None,
        doi=data.get("DOI") or None,
        date=data.get("date") or None,
        creators=creators,
        content_type=data.get("contentType") or None,
        link_mode=data.get("linkMode") or None,
    )


class ZoteroWebLibraryAdapter(ZoteroLibraryPort):
    """
    Read-only access to a Zotero library through api.zotero.org.

    Requests are spaced by at least MIN_REQUEST_INTERVAL and retried with
    exponential backoff and jitter.
    """

    MIN_REQUEST_INTERVAL = 0.5  # seconds

    def __init__(
        self,
        library_id: str,
        api_key: str,
        library_type: str = "user",
        client: Any | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the Web API client.

        Args:
            library_id: Zotero user or group ID
            api_key: Zotero API key
            library_type: 'user' or 'group'
            client: Preconfigured pyzotero client (tests)
            sleep: Sleep function used for rate limiting and backoff

        Raises:
            ZoteroConnectionError: If credentials are missing or the client cannot be created
        """
        self._sleep = sleep
        self._last_request_time = 0.0

        if client is not None:
            self.zot = client
            return

        if not library_id:
            raise ZoteroConnectionError(
                "Zotero library_id not configured",
                reason="set ZOTERO_LIBRARY_ID or [zotero] library_id",
            )
        if not api_key:
            raise ZoteroConnectionError(
                "Zotero API key not configured",
                reason="set ZOTERO_API_KEY or [zotero.web] api_key",
            )

        try:
            self.zot = zotero.Zotero(library_id, library_type, api_key)
        except zotero_errors.PyZoteroError as e:
            raise ZoteroConnectionError("Failed to initialize Zotero client", reason=str(e)) from e

        logger.info(
            "Zotero client initialized for remote access",
            extra={"library_id": library_id, "library_type": library_type},
        )

    def _rate_limit(self) -> None:
        """Keep at least MIN_REQUEST_INTERVAL between requests."""
        time_since_last = time.monotonic() - self._last_request_time
        if time_since_last < self.MIN_REQUEST_INTERVAL:
            self._sleep(self.MIN_REQUEST_INTERVAL - time_since_last)
        self._last_request_time = time.monotonic()

    def _retry_with_backoff(
        self,
        func: Callable[[], T],
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> T:
        """
        Call `func` with rate limiting, retrying transient failures.

        ResourceNotFoundError is not retried and propagates to the caller. Any other
        failure (pyzotero errors, transport errors from its HTTP client) is retried
        and finally wrapped in a Zotero error.

        Raises:
            ZoteroRateLimitError: If the API still answers 429 after all retries
            ZoteroAPIError: If all retries fail
        """
        last_error: Exception | None = None

        for attempt in range(max_retries):
            self._rate_limit()
            try:
                return func()
            except zotero_errors.ResourceNotFoundError:
                raise
            except Exception as e:
                last_error = e

            if attempt < max_retries - 1:
                delay = min(base_delay * (2**attempt), max_delay)
                # ±25% jitter
                delay = max(0.0, delay + delay * 0.25 * (2 * random.random() - 1))
                logger.warning(
                    f"Attempt {attempt + 1}/{max_retries} failed, retrying in {delay:.2f}s: {last_error}",
                    extra={"attempt": attempt + 1, "max_retries": max_retries},
                )
                self._sleep(delay)

        logger.error(f"All {max_retries} attempts failed: {last_error}", extra={"max_retries": max_retries})
        if isinstance(last_error, zotero_errors.TooManyRequestsError):
            raise ZoteroRateLimitError(f"Zotero API rate limit exceeded: {last_error}") from last_error
        raise ZoteroAPIError(
            f"Operation failed after {max_retries} attempts: {last_error}",
            details={"max_retries": max_retries, "last_error": str(last_error)},
        ) from last_error

    def get_item(self, item_key: str) -> LibraryItem | None:
        try:
            entry = self._retry_with_backoff(lambda: self.zot.item(item_key))
        except zotero_errors.ResourceNotFoundError:
            return None
        return item_from_api(entry)

    def get_attachments(self, item_key: str) -> list[LibraryItem]:
        try:
            children = self._retry_with_backoff(lambda: self.zot.children(item_key, itemType="attachment"))
        except zotero_errors.ResourceNotFoundError:
            return []
        return [item_from_api(child) for child in children]

    def get_annotations(self, attachment_key: str) -> list[dict[str, Any]]:
        try:
            children = self._retry_with_backoff(lambda: self.zot.children(attachment_key, itemType="annotation"))
        except zotero_errors.ResourceNotFoundError:
            return []
        return [dict(child.get("data", {})) for child in children]

    def list_annotation_changes(self, since: str) -> list[AnnotationChange]:
        """
        Scan annotations newest-first until one is older than `since`.
        """
        threshold = normalize_timestamp(since)
        changes: list[AnnotationChange] = []
        start = 0

        while True:
            page = self._retry_with_backoff(
                lambda: self.zot.items(
                    itemType="annotation",
                    sort="dateModified",
                    direction="desc",
                    limit=CHANGES_PAGE_SIZE,
                    start=start,
                )
            )
            for entry in page:
                data = entry.get("data", {})
                modified = normalize_timestamp(data.get("dateModified", ""))
                if modified < threshold:
                    changes.reverse()
                    return changes
                changes.append(
                    AnnotationChange(
                        annotation_key=data.get("key") or entry["key"],
                        attachment_key=data.get("parentItem"),
                        date_modified=modified,
                    )
                )
            if len(page) < CHANGES_PAGE_SIZE:
                break
            start += CHANGES_PAGE_SIZE

        changes.reverse()
        return changes
