"""Schema index: which item fields are translatable, and their defaults.

Schemas are plain JSON objects with ``properties``/``items``. A property is
translatable when it carries ``"translatable": true`` or
``"_adapt": {"translatable": true}``.

Files are composed in three passes, each in sorted path order:

1. plain schemas register under their ``$anchor`` (or file stem);
2. ``{"$merge": {"source": {"$ref": X}, "with": {...}}}`` derives a new schema from X;
3. ``{"$patch": {"source": {"$ref": X}, "with": {...}}}`` extends X in place.

When two contributions set the same key, the last loaded one wins.
"""

import copy
import json
from typing import Any

from loguru import logger

from coursetree.core.translate.paths import parse_path
from coursetree.protocols import FileSystemProtocol

SCHEMA_SUFFIX = ".schema.json"


def deep_merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    """Merge extra into base in place. Nested objects merge, everything else is replaced."""
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _ref_name(directive: dict[str, Any]) -> str | None:
    source = directive.get("source")
    if not isinstance(source, dict) or not isinstance(source.get("$ref"), str):
        return None
    return source["$ref"].lstrip("#/")


def _is_marked_translatable(node: dict[str, Any]) -> bool:
    if node.get("translatable") is True:
        return True
    adapt = node.get("_adapt")
    return isinstance(adapt, dict) and adapt.get("translatable") is True


def _collect_defaults(node: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    properties = node.get("properties")
    if not isinstance(properties, dict):
        return result
    for key, prop in properties.items():
        if not isinstance(prop, dict):
            continue
        if "default" in prop:
            result[key] = copy.deepcopy(prop["default"])
        else:
            nested = _collect_defaults(prop)
            if nested:
                result[key] = nested
    return result


class SchemaIndex:
    """Resolved schemas keyed by item type (or any other schema name)."""

    def __init__(self, schemas: dict[str, dict[str, Any]] | None = None) -> None:
        self._schemas: dict[str, dict[str, Any]] = dict(schemas or {})

    @classmethod
    def from_directory(cls, fs: FileSystemProtocol, path: str) -> "SchemaIndex":
        """Load and compose every ``*.schema.json`` file below path."""
        files = sorted(_find_schema_files(fs, path.rstrip("/")))
        loaded: list[tuple[str, dict[str, Any]]] = []
        for file_path in files:
            try:
                schema = json.loads(fs.read_file(file_path).decode("utf-8-sig"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                msg = f"Cannot parse schema {file_path}: {exc}"
                raise ValueError(msg) from exc
            if not isinstance(schema, dict):
                msg = f"Schema {file_path} is not an object"
                raise ValueError(msg)
            loaded.append((file_path, schema))

        index = cls()
        index.compose(loaded)
        logger.debug("Loaded {} schema file(s) from {}", len(loaded), path)
        return index

    def compose(self, loaded: list[tuple[str, dict[str, Any]]]) -> None:
        """Register plain schemas, then derived ($merge), then patches ($patch)."""
        merges: list[tuple[str, dict[str, Any]]] = []
        patches: list[tuple[str, dict[str, Any]]] = []
        for file_path, schema in loaded:
            if "$patch" in schema:
                patches.append((file_path, schema))
            elif "$merge" in schema:
                merges.append((file_path, schema))
            else:
                self.add(_schema_name(file_path, schema), schema)

        # Derived schemas may derive from each other; resolve until no progress.
        pending = merges
        while pending:
            remaining = []
            for file_path, schema in pending:
                directive = schema["$merge"]
                source = _ref_name(directive)
                if source is None or source not in self._schemas:
                    remaining.append((file_path, schema))
                    continue
                derived = copy.deepcopy(self._schemas[source])
                deep_merge(derived, directive.get("with", {}))
                self.add(_schema_name(file_path, schema), derived)
            if len(remaining) == len(pending):
                for file_path, _schema in remaining:
                    logger.warning("Schema {}: $merge source not found, ignored", file_path)
                break
            pending = remaining

        for file_path, schema in patches:
            directive = schema["$patch"]
            target = _ref_name(directive)
            if target is None or target not in self._schemas:
                logger.warning(
                    "Schema {}: $patch target {!r} not found, ignored", file_path, target
                )
                continue
            deep_merge(self._schemas[target], directive.get("with", {}))
            logger.debug("Schema {} patched {!r}", file_path, target)

    def add(self, name: str, schema: dict[str, Any]) -> None:
        if name in self._schemas:
            logger.debug("Schema {!r} replaced by a later definition", name)
        self._schemas[name] = schema

    @property
    def names(self) -> list[str]:
        return sorted(self._schemas)

    def get(self, name: str) -> dict[str, Any] | None:
        return self._schemas.get(name)

    def is_translatable(self, item_type: str, field_path: str) -> bool:
        """Return True if the schema for item_type marks field_path translatable.

        Unknown types, undescribed fields and malformed paths are not translatable.
        """
        node: Any = self._schemas.get(item_type)
        if node is None:
            return False
        try:
            tokens = parse_path(field_path)
        except ValueError:
            return False

        for token in tokens:
            if not isinstance(node, dict):
                return False
            if isinstance(token, int):
                node = node.get("items")
            else:
                properties = node.get("properties")
                node = properties.get(token) if isinstance(properties, dict) else None
            if node is None:
                return False

        return isinstance(node, dict) and _is_marked_translatable(node)

    def defaults_for(self, item_type: str) -> dict[str, Any]:
        """Return nested defaults declared by the item_type schema (empty if unknown)."""
        schema = self._schemas.get(item_type)
        if schema is None:
            return {}
        return _collect_defaults(schema)


def _schema_name(file_path: str, schema: dict[str, Any]) -> str:
    anchor = schema.get("$anchor")
    if isinstance(anchor, str) and anchor:
        return anchor
    return file_path.rsplit("/", 1)[-1].removesuffix(SCHEMA_SUFFIX)


def _find_schema_files(fs: FileSystemProtocol, path: str) -> list[str]:
    found: list[str] = []
    for entry in fs.list_dir(path):
        if entry.endswith("/"):
            found.extend(_find_schema_files(fs, f"{path}/{entry.rstrip('/')}"))
        elif entry.endswith(SCHEMA_SUFFIX):
            found.append(f"{path}/{entry}")
    return found
