"""CLI for course content trees: id checks, tracking ids, defaults and translation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from coursetree import __version__
from coursetree.config import (
    DEFAULT_FORMAT,
    DEFAULT_JSONEXT,
    DEFAULT_MASTER_LANG,
    FORMATS,
    ProjectConfig,
    resolve_root_directory,
)
from coursetree.core.schema.defaults import apply_globals_defaults, apply_screen_size_defaults
from coursetree.core.schema.index import SchemaIndex
from coursetree.core.translate.codecs.registry import get_codec
from coursetree.core.translate.service import export_translations, import_translations
from coursetree.core.tree.data import CourseData
from coursetree.core.tree.identity import add_tracking_ids, remove_tracking_ids
from coursetree.errors import CourseTreeError
from coursetree.filesystem import LocalFileSystem
from coursetree.logging_config import configure_logging

app = typer.Typer(help="Manage multilingual course content trees and their translations.")

# Errors reported to the user without a traceback.
_USER_ERRORS = (CourseTreeError, ValueError, FileNotFoundError)

_FORMAT_HELP = f"Interchange format: {', '.join(FORMATS)}"


@dataclass(frozen=True)
class _State:
    config: ProjectConfig
    dry_run: bool


@app.callback()
def main(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Project root (default: $COURSETREE_ROOT or cwd)"),
    ] = None,
    output_data: bool = typer.Option(
        False, "--output-data", help="Use build/course instead of src/course"
    ),
    jsonext: str = typer.Option(DEFAULT_JSONEXT, "--jsonext", help="Course file extension"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write anything"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)
    config = ProjectConfig(
        root_dir=root or resolve_root_directory(),
        jsonext=jsonext,
        use_output_data=output_data,
    )
    ctx.obj = _State(config=config, dry_run=dry_run)


def _fail(exc: Exception) -> typer.Exit:
    logger.error("{}", exc)
    return typer.Exit(1)


def _open_course(ctx: typer.Context, *, validate: bool = True) -> CourseData:
    state: _State = ctx.obj
    try:
        fs = LocalFileSystem(state.config.root_dir, dry_run=state.dry_run)
        return CourseData(fs, state.config.data_dir, jsonext=state.config.jsonext).load(
            validate=validate
        )
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc


def _log_writes(data: CourseData) -> None:
    if isinstance(data.fs, LocalFileSystem):
        logger.info("Files: {}", data.fs.summary())


def _load_schemas(data: CourseData, schema_dir: str | None, ctx: typer.Context) -> SchemaIndex:
    state: _State = ctx.obj
    try:
        return SchemaIndex.from_directory(data.fs, schema_dir or state.config.schema_dir)
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc


@app.command(name="check-ids")
def check_ids_cmd(ctx: typer.Context) -> None:
    """Report _id, _parentId and _trackingId problems in every language."""
    data = _open_course(ctx, validate=False)
    total = 0
    for name, violations in data.check_ids().items():
        for violation in violations:
            typer.echo(f"  [{name}] {violation.kind}: {violation.message}")
        total += len(violations)
    if total:
        typer.echo(f"Found {total} problem(s)")
        raise typer.Exit(1)
    typer.echo(f"No problems found in {len(data.language_names)} language(s)")


@app.command(name="add-ids")
def add_ids_cmd(
    ctx: typer.Context,
    item_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Item type receiving tracking ids (default: block)"),
    ] = None,
) -> None:
    """Assign sequential _trackingId values in structural order."""
    state: _State = ctx.obj
    data = _open_course(ctx)
    for language in data.languages.values():
        add_tracking_ids(language, item_type or state.config.tracking_id_type)
    data.save()
    _log_writes(data)


@app.command(name="remove-ids")
def remove_ids_cmd(ctx: typer.Context) -> None:
    """Delete every _trackingId."""
    data = _open_course(ctx)
    for language in data.languages.values():
        remove_tracking_ids(language)
    data.save()
    _log_writes(data)


@app.command(name="copy-language")
def copy_language_cmd(
    ctx: typer.Context,
    from_lang: str = typer.Argument(..., help="Language to copy"),
    to_lang: str = typer.Argument(..., help="New language name"),
    replace: bool = typer.Option(False, "--replace", help="Overwrite an existing language"),
) -> None:
    """Duplicate a language folder, keeping every item id."""
    data = _open_course(ctx)
    try:
        language = data.copy_language(from_lang, to_lang, replace_existing=replace)
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc
    language.save(data.fs, data.course_dir)
    _log_writes(data)
    typer.echo(f"Copied {from_lang} to {to_lang} ({len(language.items)} items)")


@app.command(name="apply-defaults")
def apply_defaults_cmd(
    ctx: typer.Context,
    schema_dir: Annotated[
        str | None,
        typer.Option("--schemas", "-s", help="Schema directory, relative to the root"),
    ] = None,
    globals_: bool = typer.Option(True, "--globals/--no-globals", help="Fill course _globals"),
    screen_size: bool = typer.Option(
        True, "--screen-size/--no-screen-size", help="Fill config screenSize"
    ),
) -> None:
    """Fill missing values from schema defaults without overwriting anything."""
    data = _open_course(ctx)
    schemas = _load_schemas(data, schema_dir, ctx)
    if globals_:
        apply_globals_defaults(data, schemas)
    if screen_size:
        apply_screen_size_defaults(data, schemas)
    data.save()
    _log_writes(data)


@app.command(name="export")
def export_cmd(
    ctx: typer.Context,
    master: Annotated[
        str | None,
        typer.Option("--master", "-m", help="Master language (default: config _defaultLanguage)"),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="Target language recorded in XLIFF files"),
    ] = None,
    fmt: str = typer.Option(DEFAULT_FORMAT, "--format", "-f", help=_FORMAT_HELP),
    delimiter: Annotated[
        str | None,
        typer.Option("--delimiter", help="CSV delimiter (default: ,)"),
    ] = None,
    encoding: Annotated[
        str | None,
        typer.Option("--encoding", help="CSV charset (default: utf-8 with BOM)"),
    ] = None,
    schema_dir: Annotated[
        str | None,
        typer.Option("--schemas", "-s", help="Schema directory, relative to the root"),
    ] = None,
    output_dir: Annotated[
        str | None,
        typer.Option("--output-dir", "-o", help="Output directory, relative to the root"),
    ] = None,
) -> None:
    """Export translatable text of the master language."""
    state: _State = ctx.obj
    data = _open_course(ctx)
    schemas = _load_schemas(data, schema_dir, ctx)
    master_lang = master or data.default_language or DEFAULT_MASTER_LANG
    try:
        codec = get_codec(fmt, delimiter=delimiter, encoding=encoding)
        result = export_translations(
            data,
            schemas,
            master_lang=master_lang,
            target_lang=target,
            output_dir=output_dir or state.config.language_files_dir(master_lang),
            codec=codec,
        )
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc
    _log_writes(data)
    typer.echo(f"Exported {len(result.units)} units to {len(result.files)} file(s)")


@app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    target: str = typer.Option(..., "--target", "-t", help="Language receiving translations"),
    master: Annotated[
        str | None,
        typer.Option("--master", "-m", help="Master language (default: config _defaultLanguage)"),
    ] = None,
    fmt: str = typer.Option(DEFAULT_FORMAT, "--format", "-f", help=_FORMAT_HELP),
    delimiter: Annotated[
        str | None,
        typer.Option("--delimiter", help="CSV delimiter (default: auto-detect)"),
    ] = None,
    encoding: Annotated[
        str | None,
        typer.Option("--encoding", help="CSV charset (default: auto-detect)"),
    ] = None,
    language_path: Annotated[
        str | None,
        typer.Option("--language-path", "-p", help="Directory with translated files"),
    ] = None,
    replace: bool = typer.Option(False, "--replace", help="Overwrite existing translations"),
    strict: bool = typer.Option(False, "--strict", help="Do not save if any unit fails"),
) -> None:
    """Merge translated files into the target language."""
    state: _State = ctx.obj
    data = _open_course(ctx)
    master_lang = master or data.default_language or DEFAULT_MASTER_LANG
    try:
        codec = get_codec(fmt, delimiter=delimiter, encoding=encoding)
        result = import_translations(
            data,
            master_lang=master_lang,
            target_lang=target,
            input_dir=language_path or state.config.language_files_dir(target),
            codec=codec,
            replace_existing=replace,
            strict=strict,
        )
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc

    _log_writes(data)
    report = result.report
    typer.echo(
        f"Applied {report.applied}, kept {report.skipped_existing} existing, "
        f"{report.dangling} dangling, {len(report.problems)} problem(s)"
    )
    for warning in report.problems[:20]:
        typer.echo(f"  {warning.kind}: {warning.item_id} {warning.field_path}: {warning.message}")
    if not result.saved:
        raise typer.Exit(1)


@app.command(name="version")
def version_cmd(ctx: typer.Context) -> None:
    """Show the coursetree version and the course project's package.json version."""
    state: _State = ctx.obj
    try:
        project_version = state.config.version
    except _USER_ERRORS as exc:
        raise _fail(exc) from exc
    typer.echo(f"coursetree {__version__}")
    typer.echo(f"project {project_version or 'unknown'}")
