"""Write translated units back into a target language, by item identity."""

import copy
from collections.abc import Iterable
from typing import Any

from loguru import logger

from coursetree.core.translate.paths import PathToken, parse_path
from coursetree.core.tree.language import Language
from coursetree.models.translation import MergeReport, TranslationUnit

_MISSING = object()


def _get(container: Any, token: PathToken) -> Any:
    if isinstance(token, int):
        if isinstance(container, list) and token < len(container):
            return container[token]
        return _MISSING
    if isinstance(container, dict):
        return container.get(token, _MISSING)
    return _MISSING


def _set(container: Any, token: PathToken, value: Any, master_container: Any) -> None:
    """Set container[token], growing a list from the master's elements when needed."""
    if isinstance(token, int) and token >= len(container):
        container.extend(copy.deepcopy(master_container[len(container) : token]))
        container.append(value)
    else:
        container[token] = value


def apply(
    target: Language,
    units: Iterable[TranslationUnit],
    *,
    master: Language | None = None,
    replace_existing: bool = False,
) -> MergeReport:
    """Merge units into target, matching items by id rather than position.

    A target value counts as an existing translation when it is a non-empty string
    that differs from the master's value at the same path (any non-empty string when
    no master is given); it is kept unless replace_existing is set. Missing keys and
    list slots are created only where the master has them.

    Args:
        target: Language to mutate.
        units: Decoded units.
        master: Language the units were extracted from, used for structure and
            to tell untranslated copies from translations.
        replace_existing: Overwrite existing translations.

    Returns:
        MergeReport with applied/skipped/dangling counts and per-unit warnings.
    """
    report = MergeReport()
    for unit in units:
        _apply_unit(target, unit, master, replace_existing, report)

    logger.info(
        "{}: {} applied, {} kept existing, {} dangling, {} warning(s)",
        target.name,
        report.applied,
        report.skipped_existing,
        report.dangling,
        len(report.warnings),
    )
    for warning in report.warnings:
        logger.debug(
            "{} {}:{} {}", warning.kind, warning.item_id, warning.field_path, warning.message
        )
    return report


def _apply_unit(
    target: Language,
    unit: TranslationUnit,
    master: Language | None,
    replace_existing: bool,
    report: MergeReport,
) -> None:
    item_id, field_path = unit.item_id, unit.field_path

    item = target.get(item_id)
    if item is None:
        report.dangling += 1
        msg = f"No item {item_id!r} in {target.name}"
        report.warn("dangling-reference", item_id, field_path, msg)
        return

    if not unit.value:
        report.warn("invalid-unit", item_id, field_path, "Empty value not applied")
        return

    try:
        tokens = parse_path(field_path)
    except ValueError as exc:
        report.warn("invalid-unit", item_id, field_path, str(exc))
        return

    master_item = master.get(item_id) if master is not None else None
    container: Any = item.data
    master_container: Any = master_item.data if master_item is not None else _MISSING

    for token in tokens[:-1]:
        child = _get(container, token)
        master_child = _get(master_container, token)
        if child is _MISSING:
            if isinstance(token, int) != isinstance(container, list):
                msg = f"{token!r} does not fit container"
                report.warn("type-mismatch", item_id, field_path, msg)
                return
            if not isinstance(master_child, (dict, list)):
                report.warn("missing-path", item_id, field_path, f"{token!r} not found")
                return
            child = copy.deepcopy(master_child)
            _set(container, token, child, master_container)
        if not isinstance(child, (dict, list)):
            msg = f"{token!r} is not an object or array"
            report.warn("type-mismatch", item_id, field_path, msg)
            return
        container, master_container = child, master_child

    last = tokens[-1]
    existing = _get(container, last)
    master_value = _get(master_container, last)
    if existing is _MISSING:
        if master_value is _MISSING or not isinstance(container, (dict, list)):
            report.warn("missing-path", item_id, field_path, f"{last!r} not found")
            return
        if isinstance(last, int) != isinstance(container, list):
            report.warn("type-mismatch", item_id, field_path, f"{last!r} does not fit container")
            return
    elif not isinstance(existing, str):
        report.warn("type-mismatch", item_id, field_path, "Target value is not a string")
        return
    elif existing and not replace_existing and existing != master_value:
        report.skipped_existing += 1
        report.warn("skipped", item_id, field_path, "Existing translation kept")
        return

    _set(container, last, unit.value, master_container)
    target.mark_changed(item.collection)
    report.applied += 1
