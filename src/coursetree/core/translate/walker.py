"""Extract translatable values from a content tree."""

from collections.abc import Iterator
from typing import Any

from loguru import logger

from coursetree.core.translate.paths import PathToken, format_path
from coursetree.core.tree.language import Language
from coursetree.models.content import ContentItem
from coursetree.models.translation import TranslationUnit
from coursetree.protocols import SchemaIndexProtocol


def iter_string_leaves(
    value: Any, prefix: tuple[PathToken, ...] = ()
) -> Iterator[tuple[tuple[PathToken, ...], str]]:
    """Yield (path tokens, string) for every string reachable through objects and arrays."""
    if isinstance(value, str):
        if prefix:
            yield prefix, value
    elif isinstance(value, dict):
        for key, child in value.items():
            yield from iter_string_leaves(child, (*prefix, key))
    elif isinstance(value, list):
        for i, child in enumerate(value):
            yield from iter_string_leaves(child, (*prefix, i))


def extract_item(item: ContentItem, schema_index: SchemaIndexProtocol) -> list[TranslationUnit]:
    units = []
    context = item.title
    for tokens, value in iter_string_leaves(item.data):
        if not value:
            continue
        field_path = format_path(tokens)
        if not schema_index.is_translatable(item.type, field_path):
            continue
        units.append(
            TranslationUnit(
                item_id=item.id,
                item_type=item.type,
                field_path=field_path,
                value=value,
                context=context,
            )
        )
    return units


def extract(language: Language, schema_index: SchemaIndexProtocol) -> list[TranslationUnit]:
    """Return the translatable values of a language in export order.

    Export order is a pre-order walk from the course root with children in
    declaration order, and field order within each item as stored. Only
    non-empty strings the schema marks translatable are emitted.
    """
    units: list[TranslationUnit] = []
    for item in language.walk():
        units.extend(extract_item(item, schema_index))

    logger.info("{}: extracted {} translatable value(s)", language.name, len(units))
    return units
