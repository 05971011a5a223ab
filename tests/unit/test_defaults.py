"""Tests for filling course data from schema defaults."""

from coursetree.core.schema.defaults import (
    apply_defaults,
    apply_globals_defaults,
    apply_screen_size_defaults,
)
from coursetree.core.schema.index import SchemaIndex
from coursetree.core.tree.data import CourseData
from tests.unit.fakes import FakeFileSystem


def test_apply_defaults_fills_without_overwriting() -> None:
    value = {"a": 1, "nested": {"x": "kept"}}

    result = apply_defaults(value, {"a": 2, "b": 3, "nested": {"x": "default", "y": True}})

    assert result is value
    assert value == {"a": 1, "b": 3, "nested": {"x": "kept", "y": True}}


def test_apply_defaults_copies_when_value_missing() -> None:
    defaults = {"a": {"b": 1}}

    result = apply_defaults(None, defaults)

    assert result == defaults
    assert result["a"] is not defaults["a"]


def test_apply_defaults_keeps_non_object_values() -> None:
    assert apply_defaults("text", {"a": 1}) == "text"
    assert apply_defaults({"a": "text"}, {"a": {"b": 1}}) == {"a": "text"}


def test_apply_globals_defaults(
    course_data: CourseData, course_fs: FakeFileSystem, schema_index: SchemaIndex
) -> None:
    apply_globals_defaults(course_data, schema_index)
    course_data.save()

    assert course_fs.writes == ["course/en/course.json"]
    assert course_fs.read_json("course/en/course.json")["_globals"] == {
        "_accessibility": {"skipNavigationText": "Skip", "_isEnabled": True}
    }


def test_apply_screen_size_defaults(
    course_data: CourseData, course_fs: FakeFileSystem, schema_index: SchemaIndex
) -> None:
    apply_screen_size_defaults(course_data, schema_index)
    course_data.save()

    assert course_fs.writes == ["course/config.json"]
    assert course_fs.read_json("course/config.json")["screenSize"] == {
        "small": 520,
        "medium": 760,
        "large": 1024,
    }
