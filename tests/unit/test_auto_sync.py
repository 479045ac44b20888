"""Unit tests for the auto-sync queue and change draining."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.application.services.auto_sync_queue import AutoSyncQueue
from src.application.use_cases.auto_sync import ChangeCursor, process_due_changes, record_annotation_changes
from src.domain.errors import ZoteroLibraryReadError
from src.domain.models.library_item import AnnotationChange, LibraryItem
from src.domain.models.sync_result import SyncResult


def test_events_within_window_are_merged():
    queue = AutoSyncQueue(debounce_seconds=2.0)

    queue.record_change("ITEM1", at=10.0)
    queue.record_change("ITEM1", at=11.5)

    assert len(queue) == 1
    assert queue.pop_due(11.9) == []
    assert queue.pop_due(12.0) == ["ITEM1"]
    assert queue.pop_due(20.0) == []


def test_window_is_not_extended_by_later_events():
    queue = AutoSyncQueue(debounce_seconds=2.0)

    queue.record_change("ITEM1", at=0.0)
    queue.record_change("ITEM1", at=1.9)

    assert queue.pop_due(2.0) == ["ITEM1"]


def test_due_items_come_out_in_first_event_order():
    queue = AutoSyncQueue(debounce_seconds=1.0)
    queue.record_change("B", at=0.0)
    queue.record_change("A", at=0.5)
    queue.record_change("C", at=5.0)

    assert queue.pop_due(2.0) == ["B", "A"]
    assert queue.pending() == ["C"]


def test_negative_debounce_is_rejected():
    with pytest.raises(ValueError):
        AutoSyncQueue(debounce_seconds=-1)


def _library() -> MagicMock:
    items = {
        "ITEM1": LibraryItem(key="ITEM1", item_type="journalArticle", title="Paper"),
        "ATT1": LibraryItem(key="ATT1", item_type="attachment", parent_key="ITEM1", content_type="application/pdf"),
        "EPUB1": LibraryItem(key="EPUB1", item_type="attachment", parent_key="ITEM1", content_type="application/epub+zip"),
        "ORPHAN": LibraryItem(key="ORPHAN", item_type="attachment", content_type="application/pdf"),
    }
    library = MagicMock()
    library.get_item.side_effect = items.get
    return library


def test_record_changes_resolves_annotations_to_top_level_items():
    queue = AutoSyncQueue(debounce_seconds=2.0)
    changes = [
        AnnotationChange("ANN1", "ATT1", "2024-01-01 10:00:00"),
        AnnotationChange("ANN2", "ATT1", "2024-01-01 10:00:01"),
        AnnotationChange("ANN3", "EPUB1", "2024-01-01 10:00:02"),
        AnnotationChange("ANN4", "ORPHAN", "2024-01-01 10:00:03"),
        AnnotationChange("ANN5", None, "2024-01-01 10:00:04"),
    ]

    queued = record_annotation_changes(changes, _library(), queue, now=0.0)

    assert queued == 1
    assert queue.pending() == ["ITEM1"]


def test_process_due_changes_force_syncs_existing_items():
    queue = AutoSyncQueue(debounce_seconds=2.0)
    queue.record_change("ITEM1", at=0.0)
    queue.record_change("GONE", at=0.0)
    service = MagicMock()
    service.sync_item.return_value = SyncResult(item_key="ITEM1", item_title="Paper", success=True)

    results = process_due_changes(service, _library(), queue, now=2.0)

    assert len(results) == 1
    item = service.sync_item.call_args[0][0]
    assert item.key == "ITEM1"
    assert service.sync_item.call_args.kwargs["force"] is True
    assert len(queue) == 0


def test_process_due_changes_skips_unreadable_items():
    queue = AutoSyncQueue(debounce_seconds=0.0)
    queue.record_change("ITEM1", at=0.0)
    library = MagicMock()
    library.get_item.side_effect = ZoteroLibraryReadError("item", "locked", key="ITEM1")
    service = MagicMock()

    assert process_due_changes(service, library, queue, now=0.0) == []
    service.sync_item.assert_not_called()


def test_cursor_reports_same_second_edit_once():
    cursor = ChangeCursor("2024-01-01 10:00:00")
    first = AnnotationChange("ANN1", "ATT1", "2024-01-01 10:00:05")
    second = AnnotationChange("ANN2", "ATT1", "2024-01-01 10:00:05")

    assert cursor.advance([first]) == [first]
    assert cursor.since == "2024-01-01 10:00:05"

    # Next poll lists the earlier change again together with one from the same second
    assert cursor.advance([first, second]) == [second]
    assert cursor.advance([first, second]) == []
    assert cursor.since == "2024-01-01 10:00:05"


def test_cursor_forgets_pairs_older_than_since():
    cursor = ChangeCursor("2024-01-01 10:00:00")
    cursor.advance([AnnotationChange("ANN1", "ATT1", "2024-01-01 10:00:05")])
    cursor.advance([AnnotationChange("ANN1", "ATT1", "2024-01-01 10:00:09")])

    assert cursor.since == "2024-01-01 10:00:09"
    assert cursor._seen == {("ANN1", "2024-01-01 10:00:09")}
    assert cursor.advance([]) == []
    assert cursor.since == "2024-01-01 10:00:09"
