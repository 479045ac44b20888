"""Unit tests for ZoteroWebLibraryAdapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pyzotero import zotero_errors

from src.application.ports.capacities_api import CapacitiesApiPort
from src.application.services.annotation_extractor import AnnotationExtractor
from src.application.services.capacities_sync import NO_PDF, CapacitiesSyncService
from src.application.services.processed_items import ProcessedItemsStore
from src.application.use_cases.sync_items import sync_items_to_capacities
from src.domain.errors import ZoteroAPIError, ZoteroConnectionError, ZoteroRateLimitError
from src.domain.models.library_item import LibraryItem
from src.infrastructure.adapters.zotero_web_library import ZoteroWebLibraryAdapter, item_from_api


def _adapter(client: MagicMock) -> ZoteroWebLibraryAdapter:
    return ZoteroWebLibraryAdapter(library_id="1", api_key="k", client=client, sleep=lambda _: None)


def _entry(key: str, **data) -> dict:
    return {"key": key, "library": {"type": "user", "id": 1}, "data": {"key": key, **data}}


def test_init_creates_pyzotero_client():
    with patch("src.infrastructure.adapters.zotero_web_library.zotero.Zotero") as mock_zotero:
        ZoteroWebLibraryAdapter(library_id="12345", api_key="secret", library_type="group")

    mock_zotero.assert_called_once_with("12345", "group", "secret")


def test_init_requires_library_id_and_api_key():
    with pytest.raises(ZoteroConnectionError):
        ZoteroWebLibraryAdapter(library_id="", api_key="k")
    with pytest.raises(ZoteroConnectionError):
        ZoteroWebLibraryAdapter(library_id="1", api_key="")


def test_item_from_api_maps_fields():
    item = item_from_api(_entry(
        "ITEM1",
        itemType="journalArticle",
        title="Paper",
        url="https://x.org",
        DOI="10.1/x",
        date="March 2020",
        creators=[{"creatorType": "author", "firstName": "Jane", "lastName": "Doe"}, {"name": "WHO"}],
    ))

    assert item.key == "ITEM1"
    assert item.is_top_level
    assert item.doi == "10.1/x"
    assert [c.display_name() for c in item.creators] == ["Jane Doe", "WHO"]


def test_get_item_not_found_returns_none():
    client = MagicMock()
    client.item.side_effect = zotero_errors.ResourceNotFoundError("gone")

    assert _adapter(client).get_item("MISSING") is None
    assert client.item.call_count == 1


def test_get_attachments_and_annotations_use_children_filter():
    client = MagicMock()
    client.children.side_effect = [
        [_entry("ATT1", itemType="attachment", parentItem="ITEM1", contentType="application/pdf", linkMode="imported_file")],
        [_entry("ANN1", itemType="annotation", parentItem="ATT1", annotationType="highlight", annotationText="x")],
    ]
    adapter = _adapter(client)

    attachments = adapter.get_attachments("ITEM1")
    annotations = adapter.get_annotations("ATT1")

    assert attachments[0].is_pdf_attachment
    assert attachments[0].parent_key == "ITEM1"
    assert annotations[0]["annotationType"] == "highlight"
    assert client.children.call_args_list[0].kwargs == {"itemType": "attachment"}
    assert client.children.call_args_list[1].kwargs == {"itemType": "annotation"}


def test_transient_failures_are_retried():
    client = MagicMock()
    client.item.side_effect = [zotero_errors.PyZoteroError("502"), _entry("ITEM1", itemType="book")]

    item = _adapter(client).get_item("ITEM1")

    assert item.key == "ITEM1"
    assert client.item.call_count == 2


def test_persistent_failure_raises_api_error():
    client = MagicMock()
    client.item.side_effect = zotero_errors.PyZoteroError("500")

    with pytest.raises(ZoteroAPIError):
        _adapter(client).get_item("ITEM1")
    assert client.item.call_count == 3


def test_persistent_rate_limit_raises_rate_limit_error():
    client = MagicMock()
    client.children.side_effect = zotero_errors.TooManyRequestsError("429")

    with pytest.raises(ZoteroRateLimitError):
        _adapter(client).get_annotations("ATT1")


def test_list_annotation_changes_stops_at_threshold():
    client = MagicMock()
    client.items.return_value = [
        _entry("ANN3", parentItem="ATT1", dateModified="2024-05-01T10:00:03Z"),
        _entry("ANN2", parentItem="ATT2", dateModified="2024-05-01T10:00:02Z"),
        _entry("ANN1", parentItem="ATT1", dateModified="2024-05-01T10:00:00Z"),
    ]

    changes = _adapter(client).list_annotation_changes("2024-05-01 10:00:01")

    assert [c.annotation_key for c in changes] == ["ANN2", "ANN3"]
    assert changes[0].attachment_key == "ATT2"
    assert changes[1].date_modified == "2024-05-01 10:00:03"


def test_transport_errors_from_http_client_are_retried_then_wrapped():
    client = MagicMock()
    client.item.side_effect = ConnectionError("name resolution failed")

    with pytest.raises(ZoteroAPIError) as exc_info:
        _adapter(client).get_item("ITEM1")

    assert client.item.call_count == 3
    assert "name resolution failed" in exc_info.value.details["last_error"]


def test_transport_errors_become_failed_sync_results():
    client = MagicMock()
    client.item.side_effect = RuntimeError("connection reset by peer")
    client.children.side_effect = RuntimeError("connection reset by peer")
    capacities = MagicMock(spec=CapacitiesApiPort)
    capacities.is_configured.return_value = True
    processed = MagicMock(spec=ProcessedItemsStore)
    processed.is_processed.return_value = False
    service = CapacitiesSyncService(AnnotationExtractor(_adapter(client)), capacities, processed)
    items = [
        LibraryItem(key="ITEM1", item_type="journalArticle", title="Paper A"),
        LibraryItem(key="ITEM2", item_type="book", title="Paper B"),
    ]

    results = sync_items_to_capacities(service, items, sleep=lambda _: None)

    assert [(r.item_key, r.success, r.error) for r in results] == [
        ("ITEM1", False, NO_PDF),
        ("ITEM2", False, NO_PDF),
    ]
    capacities.save_weblink.assert_not_called()
    processed.add.assert_not_called()


def test_list_annotation_changes_includes_threshold_second():
    client = MagicMock()
    client.items.return_value = [
        _entry("ANN2", parentItem="ATT1", dateModified="2024-05-01T10:00:01Z"),
        _entry("ANN1", parentItem="ATT1", dateModified="2024-05-01T10:00:00Z"),
    ]

    changes = _adapter(client).list_annotation_changes("2024-05-01 10:00:01")

    assert [c.annotation_key for c in changes] == ["ANN2"]
