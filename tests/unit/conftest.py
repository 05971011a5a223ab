"""Shared test fixtures."""

import copy

import pytest

from coursetree.core.schema.index import SchemaIndex
from coursetree.core.tree.data import CourseData
from coursetree.core.tree.language import Language
from tests.unit.fakes import FakeFileSystem
from tests.unit.sample_course import COURSE_EN, SCHEMAS, make_course_fs


@pytest.fixture
def course_fs() -> FakeFileSystem:
    """A fake filesystem holding a valid course with an "en" language."""
    return make_course_fs()


@pytest.fixture
def course_data(course_fs: FakeFileSystem) -> CourseData:
    return CourseData(course_fs, "course").load()


@pytest.fixture
def english() -> Language:
    return Language.from_collections("en", copy.deepcopy(COURSE_EN))


@pytest.fixture
def schema_index() -> SchemaIndex:
    return SchemaIndex(copy.deepcopy(SCHEMAS))
