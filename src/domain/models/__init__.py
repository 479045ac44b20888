"""Domain models for annotation extraction and sync."""

from .annotation import DEFAULT_ANNOTATION_COLOR, FormattedAnnotation, ItemAnnotationData, RawAnnotation
from .library_item import AnnotationChange, Creator, LibraryItem
from .sync_result import SyncResult

__all__ = [
    "AnnotationChange",
    "Creator",
    "DEFAULT_ANNOTATION_COLOR",
    "FormattedAnnotation",
    "ItemAnnotationData",
    "LibraryItem",
    "RawAnnotation",
    "SyncResult",
]
