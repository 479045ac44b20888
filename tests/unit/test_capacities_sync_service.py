"""Unit tests for CapacitiesSyncService."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.application.ports.capacities_api import CapacitiesApiPort, SaveWeblinkResponse
from src.application.services.capacities_sync import (
    ALREADY_SYNCED,
    NO_ANNOTATIONS,
    NO_PDF,
    NOT_CONFIGURED,
    CapacitiesSyncService,
    build_tags,
)
from src.application.services.processed_items import ProcessedItemsStore
from src.domain.errors import CapacitiesAPIError
from src.domain.models.annotation import FormattedAnnotation, ItemAnnotationData
from src.domain.models.library_item import LibraryItem
from src.domain.policy.sync_policy import SyncPolicy

ITEM = LibraryItem(key="ITEM1", item_type="journalArticle", title="A Paper")


def _annotation(text: str, sort_index: str) -> FormattedAnnotation:
    return FormattedAnnotation(text=text, comment=None, color="#ffd400", color_emoji="\U0001F7E1", sort_index=sort_index)


def _data(annotations=None, **kwargs) -> ItemAnnotationData:
    if annotations is None:
        annotations = (_annotation("A", "00001"),)
    defaults = {"item_key": "ITEM1", "item_title": "A Paper"}
    defaults.update(kwargs)
    return ItemAnnotationData(annotations=tuple(annotations), **defaults)


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock(spec=CapacitiesApiPort)
    client.is_configured.return_value = True
    client.save_weblink.return_value = SaveWeblinkResponse(space_id="S", id="OBJ1", structure_id="MediaPDF")
    return client


@pytest.fixture
def extractor() -> MagicMock:
    extractor = MagicMock()
    extractor.extract_from_item.return_value = _data()
    return extractor


@pytest.fixture
def processed() -> MagicMock:
    processed = MagicMock(spec=ProcessedItemsStore)
    processed.is_processed.return_value = False
    return processed


@pytest.fixture
def service(extractor, client, processed) -> CapacitiesSyncService:
    return CapacitiesSyncService(extractor=extractor, client=client, processed_items=processed)


def test_successful_sync_submits_weblink_and_records_item(service, client, processed):
    result = service.sync_item(ITEM)

    assert result.success
    assert result.capacities_id == "OBJ1"
    assert result.structure_id == "MediaPDF"
    request = client.save_weblink.call_args[0][0]
    assert request.url == "zotero://select/library/items/ITEM1"
    assert request.title_overwrite == "A Paper"
    assert request.tags == ["zotero", "annotations"]
    assert request.md_text.startswith("## Annotations")
    processed.add.assert_called_once_with("ITEM1")


def test_not_configured_fails_before_any_work(service, client, extractor):
    client.is_configured.return_value = False

    result = service.sync_item(ITEM)

    assert not result.success
    assert result.error == NOT_CONFIGURED
    extractor.extract_from_item.assert_not_called()


def test_already_processed_item_is_skipped_unless_forced(service, client, processed):
    processed.is_processed.return_value = True

    skipped = service.sync_item(ITEM)
    forced = service.sync_item(ITEM, force=True)

    assert skipped.error == ALREADY_SYNCED
    assert forced.success
    client.save_weblink.assert_called_once()


def test_skip_processed_check(service, processed):
    processed.is_processed.return_value = True

    assert service.sync_item(ITEM, skip_processed_check=True).success


def test_no_pdf_and_no_annotations(service, extractor, client):
    extractor.extract_from_item.return_value = None
    assert service.sync_item(ITEM).error == NO_PDF

    extractor.extract_from_item.return_value = _data(annotations=())
    assert service.sync_item(ITEM).error == NO_ANNOTATIONS
    client.save_weblink.assert_not_called()


def test_api_failure_becomes_failed_result_and_leaves_store_untouched(service, client, processed):
    client.save_weblink.side_effect = CapacitiesAPIError(500, "Capacities API error: 500 Internal Server Error - oops")

    result = service.sync_item(ITEM)

    assert not result.success
    assert "500" in result.error
    processed.add.assert_not_called()


def test_doi_adds_research_tag_and_description(service, extractor, client):
    extractor.extract_from_item.return_value = _data(
        item_doi="10.1000/xyz", item_creators="Jane Doe", item_date="2020"
    )

    service.sync_item(ITEM)

    request = client.save_weblink.call_args[0][0]
    assert request.tags == ["zotero", "annotations", "research"]
    assert request.description_overwrite == "Jane Doe (2020)"
    assert request.url == "https://doi.org/10.1000/xyz"


def test_build_tags_without_doi():
    assert build_tags(_data()) == ["zotero", "annotations"]


def test_description_respects_policy_limit(extractor, client, processed):
    extractor.extract_from_item.return_value = _data(item_creators="x" * 50)
    service = CapacitiesSyncService(
        extractor=extractor,
        client=client,
        processed_items=processed,
        policy=SyncPolicy(max_description_length=10),
    )

    service.sync_item(ITEM)

    assert client.save_weblink.call_args[0][0].description_overwrite == "x" * 10


def test_untitled_item_reports_unknown(service, client):
    client.is_configured.return_value = False

    result = service.sync_item(LibraryItem(key="K", item_type="book"))

    assert result.item_title == "Unknown"


def test_daily_note_posts_markdown_without_tracking(service, client, processed):
    result = service.send_to_daily_note(ITEM)

    assert result.success
    md_text = client.save_to_daily_note.call_args[0][0]
    assert md_text.startswith("### A Paper\n\n## Annotations")
    processed.add.assert_not_called()


def test_dedup_helpers_delegate_to_store(service, processed):
    service.remove_processed_item("ITEM1")
    service.clear_processed_items()
    service.get_sync_stats()

    processed.remove.assert_called_once_with("ITEM1")
    processed.clear.assert_called_once()
    processed.stats.assert_called_once()
