from __future__ import annotations

from dataclasses import dataclass, field

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class Creator:
    """Item creator as stored by Zotero (single-field creators only have last_name)."""

    first_name: str = ""
    last_name: str = ""

    def display_name(self) -> str:
        """Return 'First Last', trimmed (empty when both parts are blank)."""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class LibraryItem:
    """
    Read-only view of a Zotero library item.

    Fields:
        key: Zotero item key (unique within a library)
        item_type: Zotero item type ('journalArticle', 'attachment', 'annotation', ...)
        title: Item title ('' when the item has none)
        parent_key: Key of the parent item, None for top-level items
        library_type: 'user' for the personal library, 'group' or 'feed' otherwise
        url: URL field (optional)
        doi: DOI field (optional)
        date: Date as entered by the user (optional)
        creators: Ordered creators
        content_type: MIME type, attachments only (optional)
        link_mode: Attachment link mode, attachments only (optional)
    """

    key: str
    item_type: str
    title: str = ""
    parent_key: str | None = None
    library_type: str = "user"
    url: str | None = None
    doi: str | None = None
    date: str | None = None
    creators: tuple[Creator, ...] = field(default_factory=tuple)
    content_type: str | None = None
    link_mode: str | None = None

    def __post_init__(self) -> None:
        """Validate item identity."""
        if not self.key:
            raise ValueError("key must be non-empty")
        if not self.item_type:
            raise ValueError("item_type must be non-empty")

    @property
    def is_top_level(self) -> bool:
        return self.parent_key is None

    @property
    def is_attachment(self) -> bool:
        return self.item_type == "attachment"

    @property
    def is_pdf_attachment(self) -> bool:
        return self.is_attachment and (self.content_type or "").lower() == PDF_CONTENT_TYPE

    @property
    def is_annotation(self) -> bool:
        return self.item_type == "annotation"

    @property
    def is_personal_library(self) -> bool:
        return self.library_type == "user"


@dataclass(frozen=True)
class AnnotationChange:
    """An annotation that changed in the library since a given point in time."""

    annotation_key: str
    attachment_key: str | None
    date_modified: str
