"""Dedup store: the persisted set of item keys already synced to Capacities."""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING

from ..dto.sync import SyncStats

if TYPE_CHECKING:
    from ..ports.preference_store import PreferenceStorePort

logger = logging.getLogger(__name__)

PROCESSED_ITEMS_KEY = "processedItems"


def parse_processed_items(value: object) -> list[str]:
    """
    Decode the serialized key list.

    Returns:
        Item keys in stored order; an empty list for a missing, corrupt or
        non-array value
    """
    if not isinstance(value, str) or not value.strip():
        return []
    try:
        decoded = json.loads(value)
    except ValueError:
        logger.warning("Stored processed items are not valid JSON, treating as empty")
        return []
    if not isinstance(decoded, list):
        return []
    return [key for key in decoded if isinstance(key, str)]


class ProcessedItemsStore:
    """
    Set of processed item keys kept in one preference value (a JSON array string).

    Entries are only added after a successful submission and only removed by
    explicit user action. Read-modify-write cycles are serialized with a lock.
    """

    def __init__(self, preferences: PreferenceStorePort, key: str = PROCESSED_ITEMS_KEY) -> None:
        self._preferences = preferences
        self._key = key
        self._lock = threading.Lock()

    def _load(self) -> list[str]:
        return parse_processed_items(self._preferences.get(self._key, "[]"))

    def _save(self, keys: list[str]) -> None:
        self._preferences.set(self._key, json.dumps(keys))

    def is_processed(self, item_key: str) -> bool:
        return item_key in self._load()

    def add(self, item_key: str) -> None:
        with self._lock:
            keys = self._load()
            if item_key in keys:
                return
            keys.append(item_key)
            self._save(keys)
        logger.debug(f"Marked item {item_key} as processed", extra={"item_key": item_key})

    def remove(self, item_key: str) -> None:
        with self._lock:
            keys = self._load()
            if item_key not in keys:
                return
            keys.remove(item_key)
            self._save(keys)
        logger.info(f"Removed item {item_key} from processed items", extra={"item_key": item_key})

    def clear(self) -> None:
        with self._lock:
            self._save([])
        logger.info("Cleared processed items")

    def stats(self) -> SyncStats:
        return SyncStats(processed_count=len(set(self._load())))
