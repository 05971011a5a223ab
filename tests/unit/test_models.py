"""Tests for domain models."""

import pytest

from coursetree.models.content import ContentItem
from coursetree.models.translation import MergeReport, TranslationUnit


def test_translation_unit_is_frozen() -> None:
    unit = TranslationUnit(item_id="b1", item_type="block", field_path="body", value="Hello")
    with pytest.raises(AttributeError):
        unit.value = "changed"  # type: ignore[misc]


def test_content_item_reads_and_writes_raw_data() -> None:
    raw = {"_id": "b1", "_parentId": "a1", "_type": "block", "title": "Block"}
    item = ContentItem(data=raw, collection="blocks")

    item.tracking_id = 3

    assert item.id == "b1"
    assert item.parent_id == "a1"
    assert item.type == "block"
    assert raw["_trackingId"] == 3

    item.tracking_id = None
    assert "_trackingId" not in raw


def test_content_item_title_prefers_display_title() -> None:
    item = ContentItem(data={"displayTitle": "Shown", "title": "Internal"}, collection="blocks")
    empty = ContentItem(data={"title": ""}, collection="blocks")

    assert item.title == "Shown"
    assert empty.title is None


def test_merge_report_problems_exclude_kept_translations() -> None:
    report = MergeReport()
    report.warn("skipped", "b1", "body", "Existing translation kept")
    report.warn("dangling-reference", "b2", "body", "No item")

    assert report.has_warnings
    assert [w.kind for w in report.problems] == ["dangling-reference"]
