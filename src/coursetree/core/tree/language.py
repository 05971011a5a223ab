"""Load one language of a course into an in-memory content tree."""

import copy
import json
from collections.abc import Iterator
from typing import Any

from loguru import logger

from coursetree.config import COLLECTIONS, DEFAULT_JSONEXT, SINGLE_OBJECT_COLLECTIONS
from coursetree.errors import StructuralError
from coursetree.models.content import ContentItem
from coursetree.protocols import FileSystemProtocol

# Violation kinds that make a tree unusable. Anything else is only reported.
STRUCTURAL_KINDS: frozenset[str] = frozenset(
    {"missing-id", "duplicate-id", "unresolved-parent", "root-count", "cycle"}
)


def dump_json(data: Any) -> bytes:
    """Serialize course data the way it is stored on disk."""
    return (json.dumps(data, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


class Language:
    """One localized copy of the course content tree.

    Items are owned by the language. Parent/child links are id references resolved
    through ``get``; children come back in on-disk declaration order.
    """

    def __init__(
        self,
        name: str,
        collections: dict[str, list[dict[str, Any]]],
        *,
        jsonext: str = DEFAULT_JSONEXT,
        single_object: frozenset[str] = SINGLE_OBJECT_COLLECTIONS,
    ) -> None:
        self.name = name
        self.jsonext = jsonext
        self._single_object = set(single_object)
        self._collections: dict[str, list[ContentItem]] = {}
        self.changed: set[str] = set()

        for collection, raw_items in collections.items():
            self._collections[collection] = [
                ContentItem(data=raw, collection=collection, index=i)
                for i, raw in enumerate(raw_items)
            ]
        self.reindex()

    @classmethod
    def from_collections(
        cls,
        name: str,
        collections: dict[str, list[dict[str, Any]]],
        *,
        jsonext: str = DEFAULT_JSONEXT,
    ) -> "Language":
        """Build a language from raw collections without validating it."""
        return cls(name, collections, jsonext=jsonext)

    @classmethod
    def load(
        cls,
        fs: FileSystemProtocol,
        course_dir: str,
        name: str,
        *,
        jsonext: str = DEFAULT_JSONEXT,
        validate: bool = True,
    ) -> "Language":
        """Read every collection of a language folder and validate the tree.

        Raises:
            StructuralError: If the tree has no single course root, an unresolved
                parent, a duplicated id or a cycle.
            FileNotFoundError: If the course file itself is missing.
        """
        from coursetree.core.tree.identity import check_ids

        collections: dict[str, list[dict[str, Any]]] = {}
        single_object: set[str] = set()
        for collection in COLLECTIONS:
            path = f"{course_dir}/{name}/{collection}.{jsonext}"
            try:
                raw = fs.read_file(path)
            except FileNotFoundError:
                if collection in SINGLE_OBJECT_COLLECTIONS:
                    raise
                logger.debug("No {} collection for language {!r}", collection, name)
                continue
            try:
                parsed = json.loads(raw.decode("utf-8-sig"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                msg = f"Cannot parse {path}: {exc}"
                raise ValueError(msg) from exc

            if isinstance(parsed, dict):
                single_object.add(collection)
                parsed = [parsed]
            if not isinstance(parsed, list) or not all(isinstance(x, dict) for x in parsed):
                msg = f"{path}: expected an object or an array of objects"
                raise ValueError(msg)
            collections[collection] = parsed

        language = cls(name, collections, jsonext=jsonext, single_object=frozenset(single_object))
        if not validate:
            return language

        violations = check_ids(language)
        structural = [v for v in violations if v.kind in STRUCTURAL_KINDS]
        if structural:
            details = "; ".join(v.message for v in structural)
            msg = f"Language {name!r} in {course_dir} is not a valid tree: {details}"
            raise StructuralError(msg, structural)
        for violation in violations:
            logger.warning("{}: {}", name, violation.message)

        logger.debug("Loaded language {!r} ({} items)", name, len(language.items))
        return language

    def reindex(self) -> None:
        """Rebuild the id and children lookups after items were added or removed."""
        self._by_id: dict[str, ContentItem] = {}
        self._children: dict[str, list[ContentItem]] = {}
        for item in self.items:
            self._by_id.setdefault(item.id, item)
            if item.parent_id is not None:
                self._children.setdefault(item.parent_id, []).append(item)

    @property
    def collections(self) -> dict[str, list[ContentItem]]:
        return self._collections

    @property
    def items(self) -> list[ContentItem]:
        """All items in declaration order: by collection, then by file position."""
        return [item for items in self._collections.values() for item in items]

    @property
    def root(self) -> ContentItem:
        roots = [item for item in self.items if item.parent_id is None]
        if len(roots) != 1 or roots[0].type != "course":
            msg = f"Language {self.name!r} has {len(roots)} root item(s), expected one course"
            raise StructuralError(msg)
        return roots[0]

    def get(self, item_id: str) -> ContentItem | None:
        return self._by_id.get(item_id)

    def children_of(self, item_id: str) -> list[ContentItem]:
        return list(self._children.get(item_id, ()))

    def items_of_type(self, item_type: str) -> list[ContentItem]:
        return [item for item in self.items if item.type == item_type]

    def walk(self) -> Iterator[ContentItem]:
        """Yield items in pre-order from the course root, children in declaration order."""
        visited: set[str] = set()
        stack = [self.root]
        while stack:
            item = stack.pop()
            if item.id in visited:
                continue
            visited.add(item.id)
            yield item
            stack.extend(reversed(self._children.get(item.id, ())))

    def mark_changed(self, collection: str) -> None:
        self.changed.add(collection)

    def to_collections(self) -> dict[str, list[dict[str, Any]]]:
        return {name: [item.data for item in items] for name, items in self._collections.items()}

    def copy(self, name: str) -> "Language":
        """Deep copy every item under a new language name, keeping all ids."""
        duplicate = Language(
            name,
            copy.deepcopy(self.to_collections()),
            jsonext=self.jsonext,
            single_object=frozenset(self._single_object),
        )
        duplicate.changed = set(duplicate.collections)
        return duplicate

    def save(self, fs: FileSystemProtocol, course_dir: str, *, force: bool = False) -> None:
        """Write changed collections back to their files."""
        for collection, items in self._collections.items():
            if not force and collection not in self.changed:
                continue
            data: Any = [item.data for item in items]
            if collection in self._single_object and len(data) == 1:
                data = data[0]
            fs.write_file(f"{course_dir}/{self.name}/{collection}.{self.jsonext}", dump_json(data))
        self.changed.clear()
