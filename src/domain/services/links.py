"""URL helpers: direct-PDF detection, Zotero deep links, submission URL priority."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.annotation import ItemAnnotationData

ZOTERO_SCHEME = "zotero"
PREPRINT_HOSTS = ("arxiv", "biorxiv", "medrxiv")


def is_pdf_url(url: str) -> bool:
    """
    Check whether a URL points directly at a PDF file.

    Matches a '.pdf' extension (case-insensitive), arXiv '/pdf/' URLs and the
    '/pdf/' paths of the bioRxiv/medRxiv preprint servers.
    """
    lower_url = url.strip().lower()
    if lower_url.endswith(".pdf"):
        return True
    if "arxiv.org/pdf/" in lower_url:
        return True
    return "/pdf/" in lower_url and any(host in lower_url for host in PREPRINT_HOSTS)


def is_local_uri(url: str | None) -> bool:
    return bool(url) and url.startswith(f"{ZOTERO_SCHEME}://")


def doi_url(doi: str) -> str:
    return f"https://doi.org/{doi}"


def select_item_uri(item_key: str) -> str:
    """Local URI selecting an item in the Zotero desktop app."""
    return f"{ZOTERO_SCHEME}://select/library/items/{item_key}"


def annotation_deep_link(attachment_key: str, annotation_key: str, page_index: int | None = None) -> str:
    """
    Build a URI that opens the PDF reader at an annotation.

    Args:
        attachment_key: PDF attachment key
        annotation_key: Annotation key
        page_index: Zero-based page index; rendered 1-based, omitted when unknown
    """
    params = f"annotation={annotation_key}"
    if page_index is not None:
        params = f"page={page_index + 1}&{params}"
    return f"{ZOTERO_SCHEME}://open-pdf/library/items/{attachment_key}?{params}"


def best_url_for_item(data: ItemAnnotationData) -> str:
    """
    Choose the URL submitted to Capacities.

    Priority: direct PDF URL from an attachment > item URL when it is a direct PDF
    link > DOI link > item URL > local select URI. A direct PDF URL makes Capacities
    create a PDF object instead of a generic web resource.
    """
    if data.pdf_url:
        return data.pdf_url

    item_url = data.item_url
    if item_url and not is_local_uri(item_url) and is_pdf_url(item_url):
        return item_url

    if data.item_doi:
        return doi_url(data.item_doi)

    if item_url and not is_local_uri(item_url):
        return item_url

    return item_url or select_item_uri(data.item_key)
