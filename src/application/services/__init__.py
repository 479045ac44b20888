"""Application services for orchestrating domain logic."""

from .annotation_extractor import AnnotationExtractor
from .auto_sync_queue import AutoSyncQueue
from .cancellation import CancellationToken
from .capacities_sync import CapacitiesSyncService
from .processed_items import ProcessedItemsStore

__all__ = [
    "AnnotationExtractor",
    "AutoSyncQueue",
    "CancellationToken",
    "CapacitiesSyncService",
    "ProcessedItemsStore",
]
