"""Identifier checks and tracking id assignment for content trees."""

from loguru import logger

from coursetree.config import COLLECTIONS, DEFAULT_TRACKING_ID_TYPE, ITEM_TYPES
from coursetree.core.tree.language import Language
from coursetree.models.content import ContentItem, Violation


def check_ids(language: Language) -> list[Violation]:
    """Validate the identifier invariants of a language without mutating it.

    Returns every violation found, an empty list meaning the tree is valid.
    Never raises, so callers can report all problems at once.
    """
    items = language.items
    violations: list[Violation] = []
    by_id: dict[str, ContentItem] = {}

    for item in items:
        if not item.id:
            violations.append(
                Violation(
                    "missing-id",
                    None,
                    f"{item.collection}[{item.index}] has no _id",
                )
            )
        elif item.id in by_id:
            violations.append(
                Violation(
                    "duplicate-id", item.id, f"Duplicate _id {item.id!r} in {item.collection}"
                )
            )
        else:
            by_id[item.id] = item

        allowed = COLLECTIONS.get(item.collection, ITEM_TYPES)
        if item.type not in allowed:
            violations.append(
                Violation(
                    "unknown-type",
                    item.id or None,
                    f"{item.collection}[{item.index}] has _type {item.type!r}, "
                    f"expected one of {', '.join(allowed)}",
                )
            )

    roots = [item for item in items if item.id and item.parent_id is None]
    if len(roots) != 1:
        root_ids = ", ".join(repr(r.id) for r in roots) or "none"
        violations.append(
            Violation("root-count", None, f"Expected one root item, found {len(roots)}: {root_ids}")
        )
    elif roots[0].type != "course":
        violations.append(
            Violation(
                "root-count",
                roots[0].id,
                f"Root item {roots[0].id!r} is a {roots[0].type!r}, expected a course",
            )
        )

    for item in items:
        if item.id and item.parent_id is not None and item.parent_id not in by_id:
            violations.append(
                Violation(
                    "unresolved-parent",
                    item.id,
                    f"{item.type} {item.id!r} has unknown _parentId {item.parent_id!r}",
                )
            )

    violations.extend(_find_cycles(items, by_id))

    tracked: dict[int, str] = {}
    for item in items:
        tracking_id = item.tracking_id
        if tracking_id is None:
            continue
        if tracking_id in tracked:
            violations.append(
                Violation(
                    "duplicate-tracking-id",
                    item.id,
                    f"_trackingId {tracking_id} used by both {tracked[tracking_id]!r} "
                    f"and {item.id!r}",
                )
            )
        else:
            tracked[tracking_id] = item.id

    return violations


def _find_cycles(items: list[ContentItem], by_id: dict[str, ContentItem]) -> list[Violation]:
    """Walk each parent chain with a visited set, reporting every cycle once."""
    bound = len(items) + 1
    reported: set[frozenset[str]] = set()
    violations: list[Violation] = []

    for item in items:
        chain: list[str] = []
        current: ContentItem | None = item
        steps = 0
        while current is not None and steps <= bound:
            if current.id in chain:
                members = chain[chain.index(current.id) :]
                key = frozenset(members)
                if key not in reported:
                    reported.add(key)
                    loop = " -> ".join([*members, current.id])
                    violations.append(Violation("cycle", current.id, f"Parent cycle: {loop}"))
                break
            chain.append(current.id)
            parent_id = current.parent_id
            current = by_id.get(parent_id) if parent_id else None
            steps += 1

    return violations


def add_tracking_ids(language: Language, item_type: str = DEFAULT_TRACKING_ID_TYPE) -> int:
    """Number items of item_type 0..n-1 in pre-order, overwriting existing ids.

    Ids follow the current structural order, so reordered content gets new ids.
    Items of any other type lose their tracking id.

    Returns:
        The number of items that received a tracking id.
    """
    count = 0
    for item in language.walk():
        if item.type != item_type:
            if item.tracking_id is not None:
                item.tracking_id = None
                language.mark_changed(item.collection)
            continue
        if item.tracking_id != count:
            item.tracking_id = count
            language.mark_changed(item.collection)
        count += 1

    logger.info("{}: assigned tracking ids to {} {} item(s)", language.name, count, item_type)
    return count


def remove_tracking_ids(language: Language) -> int:
    """Delete every tracking id. Returns the number removed."""
    removed = 0
    for item in language.items:
        if "_trackingId" in item.data:
            item.tracking_id = None
            language.mark_changed(item.collection)
            removed += 1

    logger.info("{}: removed {} tracking id(s)", language.name, removed)
    return removed
