"""Domain models for extracted PDF annotations."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..types import AnnotationKind, AnnotationPosition

DEFAULT_ANNOTATION_COLOR = "#ffd400"


@dataclass(frozen=True)
class RawAnnotation:
    """
    Annotation record as read from the Zotero library, normalized but not yet classified.

    Fields:
        key: Annotation key
        attachment_key: Key of the PDF attachment owning the annotation
        kind: highlight | underline | note | image | freehand
        text: Highlighted text (optional)
        comment: User comment (optional)
        color: Hex color string (optional)
        page_label: Page label shown in the PDF (optional)
        sort_index: Opaque position string, lexically ordered (optional)
        position: Parsed position (zero-based page index), None when absent or unparseable
        date_added: Creation timestamp
        date_modified: Modification timestamp
        tags: Tag names
    """

    key: str
    attachment_key: str
    kind: AnnotationKind
    text: str | None = None
    comment: str | None = None
    color: str | None = None
    page_label: str | None = None
    sort_index: str | None = None
    position: AnnotationPosition | None = None
    date_added: str = ""
    date_modified: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FormattedAnnotation:
    """
    Annotation ready for rendering.

    Image annotations have no text and are rendered as a figure reference.
    """

    text: str
    comment: str | None
    color: str
    color_emoji: str
    page_label: str | None = None
    page_index: int | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    sort_index: str = ""
    zotero_link: str | None = None
    is_image: bool = False

    def has_content(self) -> bool:
        """Image annotations always qualify; text annotations need text or a comment."""
        return self.is_image or bool(self.text) or bool(self.comment)


@dataclass(frozen=True)
class ItemAnnotationData:
    """
    Aggregate of all annotations on all PDF attachments of one top-level item.

    Built fresh for every sync attempt. Annotations are ordered ascending by sort_index.
    """

    item_key: str
    item_title: str
    item_url: str | None = None
    item_doi: str | None = None
    item_creators: str | None = None
    item_date: str | None = None
    pdf_title: str | None = None
    pdf_url: str | None = None
    annotations: tuple[FormattedAnnotation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate annotation ordering."""
        indexes = [a.sort_index for a in self.annotations]
        if indexes != sorted(indexes):
            raise ValueError("annotations must be sorted ascending by sort_index")
