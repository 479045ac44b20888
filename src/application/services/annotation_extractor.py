"""Application service extracting and aggregating PDF annotations of a Zotero item."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ...domain.errors import ZoteroAPIError, ZoteroDatabaseNotFoundError, ZoteroLibraryReadError
from ...domain.models.annotation import (
    DEFAULT_ANNOTATION_COLOR,
    FormattedAnnotation,
    ItemAnnotationData,
    RawAnnotation,
)
from ...domain.services.color_classifier import color_to_emoji, resolve_color
from ...domain.services.links import annotation_deep_link, doi_url, is_pdf_url, select_item_uri
from ...domain.types import AnnotationPosition

if TYPE_CHECKING:
    from ...domain.models.library_item import LibraryItem
    from ...domain.types import AnnotationKind
    from ..ports.zotero_library import ZoteroLibraryPort

logger = logging.getLogger(__name__)

TEXT_KINDS = frozenset({"highlight", "underline", "note"})

# Zotero stores freehand drawings as 'ink'
KIND_ALIASES: dict[str, AnnotationKind] = {
    "highlight": "highlight",
    "underline": "underline",
    "note": "note",
    "image": "image",
    "ink": "freehand",
    "freehand": "freehand",
}

LIBRARY_ERRORS = (ZoteroLibraryReadError, ZoteroAPIError, ZoteroDatabaseNotFoundError)


def parse_position(value: Any) -> AnnotationPosition | None:
    """
    Parse an annotation position payload (JSON string or mapping).

    Returns:
        AnnotationPosition with the zero-based page index, or None when the
        payload is absent, malformed, or has no integer 'pageIndex'
    """
    if value is None or value == "":
        return None
    data = value
    if isinstance(value, str):
        try:
            data = json.loads(value)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    page_index = data.get("pageIndex")
    if isinstance(page_index, bool) or not isinstance(page_index, int):
        return None
    return AnnotationPosition(page_index=page_index)


def _tag_names(tags: Any) -> tuple[str, ...]:
    names: list[str] = []
    for tag in tags or []:
        name = tag.get("tag", "") if isinstance(tag, dict) else str(tag)
        if name:
            names.append(name)
    return tuple(names)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class AnnotationExtractor:
    """
    Extracts annotations from every PDF attachment of a top-level item.

    Never raises for library problems: read failures are logged and reported
    as "nothing to extract" so batch syncs keep going.
    """

    def __init__(self, library: ZoteroLibraryPort) -> None:
        self._library = library

    def extract_from_attachment(self, attachment: LibraryItem) -> list[RawAnnotation]:
        """
        Read and normalize the annotations of one attachment.

        Args:
            attachment: Attachment item

        Returns:
            RawAnnotation list, empty when the attachment is not a PDF or has none
        """
        if not attachment.is_pdf_attachment:
            return []

        records = self._library.get_annotations(attachment.key)
        if not records:
            return []

        annotations: list[RawAnnotation] = []
        for record in records:
            raw_kind = str(record.get("annotationType", ""))
            kind = KIND_ALIASES.get(raw_kind)
            if kind is None:
                logger.debug(
                    f"Skipping annotation of unsupported type '{raw_kind}'",
                    extra={"annotation_key": record.get("key"), "attachment_key": attachment.key},
                )
                continue
            annotations.append(
                RawAnnotation(
                    key=str(record.get("key", "")),
                    attachment_key=attachment.key,
                    kind=kind,
                    text=_optional_str(record.get("annotationText")),
                    comment=_optional_str(record.get("annotationComment")),
                    color=_optional_str(record.get("annotationColor")),
                    page_label=_optional_str(record.get("annotationPageLabel")),
                    sort_index=_optional_str(record.get("annotationSortIndex")),
                    position=parse_position(record.get("annotationPosition")),
                    date_added=str(record.get("dateAdded", "") or ""),
                    date_modified=str(record.get("dateModified", "") or ""),
                    tags=_tag_names(record.get("tags")),
                )
            )
        return annotations

    def resolve_top_level(self, item: LibraryItem) -> LibraryItem | None:
        """Walk parent links (annotation -> attachment -> item) up to the top-level item."""
        current = item
        seen: set[str] = set()
        while current.parent_key is not None:
            if current.key in seen:
                logger.warning(f"Parent cycle detected at item {current.key}")
                return None
            seen.add(current.key)
            parent = self._library.get_item(current.parent_key)
            if parent is None:
                return None
            current = parent
        return current

    def extract_from_item(self, item: LibraryItem) -> ItemAnnotationData | None:
        """
        Aggregate the annotations of all PDF attachments of the item's top-level item.

        Args:
            item: Any item: regular item, attachment or annotation

        Returns:
            ItemAnnotationData (annotations may be empty), or None when there is
            no top-level item, no PDF attachment, or the library cannot be read
        """
        try:
            return self._extract(item)
        except LIBRARY_ERRORS as e:
            logger.warning(
                f"Failed to extract annotations for item {item.key}: {e}",
                extra={"item_key": item.key},
            )
            return None

    def _extract(self, item: LibraryItem) -> ItemAnnotationData | None:
        top_item = self.resolve_top_level(item)
        if top_item is None:
            return None

        pdf_attachments = [a for a in self._library.get_attachments(top_item.key) if a.is_pdf_attachment]
        if not pdf_attachments:
            return None

        formatted: list[FormattedAnnotation] = []
        direct_pdf_url: str | None = None

        for pdf in pdf_attachments:
            # Last qualifying attachment wins
            if pdf.url and is_pdf_url(pdf.url):
                direct_pdf_url = pdf.url

            for raw in self.extract_from_attachment(pdf):
                annotation = self._format(raw)
                if annotation is not None:
                    formatted.append(annotation)

        formatted.sort(key=lambda a: a.sort_index)

        creator_names = ", ".join(
            name for name in (c.display_name() for c in top_item.creators) if name
        )

        return ItemAnnotationData(
            item_key=top_item.key,
            item_title=top_item.title,
            item_url=self._resolve_item_url(top_item),
            item_doi=top_item.doi or None,
            item_creators=creator_names or None,
            item_date=top_item.date or None,
            pdf_title=pdf_attachments[0].title or None,
            pdf_url=direct_pdf_url,
            annotations=tuple(formatted),
        )

    @staticmethod
    def _format(raw: RawAnnotation) -> FormattedAnnotation | None:
        if raw.kind == "freehand":
            return None

        page_index = raw.position.page_index if raw.position else None
        annotation = FormattedAnnotation(
            text="" if raw.kind == "image" else (raw.text or ""),
            comment=raw.comment or None,
            color=resolve_color(raw.color, DEFAULT_ANNOTATION_COLOR),
            color_emoji=color_to_emoji(raw.color),
            page_label=raw.page_label,
            page_index=page_index,
            tags=raw.tags,
            sort_index=raw.sort_index or "",
            zotero_link=annotation_deep_link(raw.attachment_key, raw.key, page_index),
            is_image=raw.kind == "image",
        )
        if raw.kind not in TEXT_KINDS and not annotation.is_image:
            return None
        return annotation if annotation.has_content() else None

    @staticmethod
    def _resolve_item_url(item: LibraryItem) -> str | None:
        if item.url:
            return item.url
        if item.doi:
            return doi_url(item.doi)
        if item.is_personal_library:
            return select_item_uri(item.key)
        return None
