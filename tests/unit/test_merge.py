"""Tests for merging translated units into a target language."""

import copy

import pytest

from coursetree.core.translate.merge import apply
from coursetree.core.tree.language import Language
from coursetree.models.translation import TranslationUnit
from tests.unit.sample_course import SMALL_COURSE


@pytest.fixture
def french(english: Language) -> Language:
    language = english.copy("fr")
    language.changed.clear()
    return language


def _unit(
    item_id: str, field_path: str, value: str, item_type: str = "component"
) -> TranslationUnit:
    return TranslationUnit(item_id=item_id, item_type=item_type, field_path=field_path, value=value)


def test_applies_single_block() -> None:
    master = Language.from_collections("en", copy.deepcopy(SMALL_COURSE))
    target = master.copy("fr")
    target.get("b1").data["body"] = ""
    target.changed.clear()

    report = apply(target, [_unit("b1", "body", "Hello", "block")], master=master)

    assert report.applied == 1
    assert report.warnings == []
    assert target.get("b1").data["body"] == "Hello"
    assert target.changed == {"blocks"}


def test_overwrites_untranslated_copy(english: Language, french: Language) -> None:
    report = apply(french, [_unit("b-05", "title", "Bloc 1", "block")], master=english)

    assert report.applied == 1
    assert french.get("b-05").data["title"] == "Bloc 1"
    assert english.get("b-05").data["title"] == "Block 1"


def test_keeps_existing_translation(english: Language, french: Language) -> None:
    french.get("b-05").data["title"] = "Bloc un"

    report = apply(french, [_unit("b-05", "title", "Bloc 1", "block")], master=english)

    assert french.get("b-05").data["title"] == "Bloc un"
    assert report.applied == 0
    assert report.skipped_existing == 1
    assert [w.kind for w in report.warnings] == ["skipped"]
    assert report.problems == []
    assert french.changed == set()


def test_replace_existing_overwrites_translation(english: Language, french: Language) -> None:
    french.get("b-05").data["title"] = "Bloc un"

    report = apply(
        french,
        [_unit("b-05", "title", "Bloc 1", "block")],
        master=english,
        replace_existing=True,
    )

    assert report.applied == 1
    assert french.get("b-05").data["title"] == "Bloc 1"


def test_without_master_only_empty_values_are_filled(french: Language) -> None:
    report = apply(
        french,
        [_unit("co-10", "body", "Corps", "page"), _unit("co-05", "title", "Page un", "page")],
    )

    assert report.applied == 1
    assert report.skipped_existing == 1
    assert french.get("co-10").data["body"] == "Corps"
    assert french.get("co-05").data["title"] == "Page One"


def test_dangling_unit_leaves_tree_unchanged(english: Language, french: Language) -> None:
    before = copy.deepcopy(french.to_collections())

    report = apply(french, [_unit("gone", "title", "Titre")], master=english)

    assert report.dangling == 1
    assert [(w.kind, w.item_id) for w in report.problems] == [("dangling-reference", "gone")]
    assert french.to_collections() == before
    assert french.changed == set()


def test_creates_list_slot_from_master(english: Language, french: Language) -> None:
    del french.get("c-10").data["_items"][1]

    report = apply(french, [_unit("c-10", "_items[1].title", "Élément 2")], master=english)

    assert report.applied == 1
    assert french.get("c-10").data["_items"][1] == {
        "title": "Élément 2",
        "body": "Two",
        "_graphic": {"src": "b.png", "alt": ""},
    }
    assert english.get("c-10").data["_items"][1]["title"] == "Item 2"


def test_creates_missing_key_from_master(english: Language, french: Language) -> None:
    del french.get("c-05").data["body"]

    report = apply(french, [_unit("c-05", "body", "<p>Bonjour</p>")], master=english)

    assert report.applied == 1
    assert french.get("c-05").data["body"] == "<p>Bonjour</p>"


def test_missing_path_without_master_shape(english: Language, french: Language) -> None:
    del french.get("c-05").data["body"]

    report = apply(
        french,
        [_unit("c-05", "body", "<p>Bonjour</p>"), _unit("c-05", "extra.title", "Titre")],
    )
    report_with_master = apply(french, [_unit("c-05", "extra.title", "Titre")], master=english)

    assert [w.kind for w in report.problems] == ["missing-path", "missing-path"]
    assert [w.kind for w in report_with_master.problems] == ["missing-path"]
    assert "body" not in french.get("c-05").data


@pytest.mark.parametrize("field_path", ["_items", "title.text", "_items.title[0]"])
def test_type_mismatch(english: Language, french: Language, field_path: str) -> None:
    report = apply(french, [_unit("c-10", field_path, "x")], master=english)

    assert report.applied == 0
    assert [w.kind for w in report.problems] == ["type-mismatch"]


@pytest.mark.parametrize(("field_path", "value"), [("title", ""), ("_items..title", "x")])
def test_invalid_units(english: Language, french: Language, field_path: str, value: str) -> None:
    report = apply(french, [_unit("c-10", field_path, value)], master=english)

    assert report.applied == 0
    assert [w.kind for w in report.problems] == ["invalid-unit"]
    assert french.get("c-10").data["title"] == "Accordion"


def test_applies_unit_under_dotted_key() -> None:
    collections = copy.deepcopy(SMALL_COURSE)
    collections["blocks"][0]["body"] = {"a.b": "Hello", "a": {"b": "Other"}}
    master = Language.from_collections("en", collections)
    target = master.copy("fr")

    report = apply(target, [_unit("b1", r"body.a\.b", "Bonjour", "block")], master=master)

    assert report.applied == 1
    assert target.get("b1").data["body"] == {"a.b": "Bonjour", "a": {"b": "Other"}}
