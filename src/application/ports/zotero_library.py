"""Port interface for reading items and annotations from a Zotero library."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any

    from ...domain.models.library_item import AnnotationChange, LibraryItem


class ZoteroLibraryPort(ABC):
    """Read-only port onto the Zotero item/attachment/annotation store."""

    @abstractmethod
    def get_item(self, item_key: str) -> LibraryItem | None:
        """
        Get a single item by key.

        Args:
            item_key: Zotero item key (regular item, attachment or annotation)

        Returns:
            LibraryItem, or None if the key does not exist
        """
        pass

    @abstractmethod
    def get_attachments(self, item_key: str) -> list[LibraryItem]:
        """
        Get all child attachments of an item (any content type).

        Args:
            item_key: Parent item key

        Returns:
            Attachments in library order
        """
        pass

    @abstractmethod
    def get_annotations(self, attachment_key: str) -> list[dict[str, Any]]:
        """
        Get raw annotation records of an attachment.

        Records use the Zotero Web API field names: 'key', 'annotationType',
        'annotationText', 'annotationComment', 'annotationColor',
        'annotationPageLabel', 'annotationSortIndex', 'annotationPosition'
        (JSON string or mapping), 'dateAdded', 'dateModified', 'tags' ([{'tag': ...}]).

        Args:
            attachment_key: PDF attachment key

        Returns:
            Raw annotation records (empty list when there are none)
        """
        pass

    @abstractmethod
    def list_annotation_changes(self, since: str) -> list[AnnotationChange]:
        """
        List annotations modified at or after a timestamp.

        Zotero timestamps have one-second resolution, so the same change can be
        listed by consecutive calls; ChangeCursor drops the repeats.

        Args:
            since: Timestamp in Zotero format ('YYYY-MM-DD HH:MM:SS' or ISO 8601)

        Returns:
            Changes ordered by modification time
        """
        pass
