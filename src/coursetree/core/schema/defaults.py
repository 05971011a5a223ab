"""Fill gaps in course data from schema defaults."""

import copy
from typing import Any

from loguru import logger

from coursetree.core.tree.data import CourseData
from coursetree.protocols import SchemaIndexProtocol


def apply_defaults(value: Any, defaults: Any) -> Any:
    """Return value with missing keys filled from defaults.

    Existing values are never removed or overwritten; nested objects are filled
    recursively. Objects are updated in place.
    """
    if value is None:
        return copy.deepcopy(defaults)
    if not isinstance(value, dict) or not isinstance(defaults, dict):
        return value
    for key, default in defaults.items():
        if key not in value:
            value[key] = copy.deepcopy(default)
        elif isinstance(value[key], dict) and isinstance(default, dict):
            apply_defaults(value[key], default)
    return value


def apply_globals_defaults(data: CourseData, schema_index: SchemaIndexProtocol) -> CourseData:
    """Fill the course ``_globals`` of every language from the course schema."""
    defaults = schema_index.defaults_for("course").get("_globals", {})
    for language in data.languages.values():
        course = language.root
        course.data["_globals"] = apply_defaults(course.data.get("_globals"), defaults)
        language.mark_changed(course.collection)
        logger.debug("{}: applied _globals defaults", language.name)
    return data


def apply_screen_size_defaults(
    data: CourseData, schema_index: SchemaIndexProtocol
) -> CourseData:
    """Fill ``screenSize`` in the course config from the config schema."""
    defaults = schema_index.defaults_for("config").get("screenSize", {})
    data.config["screenSize"] = apply_defaults(data.config.get("screenSize"), defaults)
    data.mark_config_changed()
    logger.debug("Applied screenSize defaults")
    return data
