"""Export translatable text from a master language and import translations back."""

from dataclasses import dataclass, field

from loguru import logger

from coursetree.core.translate.merge import apply
from coursetree.core.translate.walker import extract
from coursetree.core.tree.data import CourseData
from coursetree.models.translation import MergeReport, TranslationUnit
from coursetree.protocols import CodecProtocol, FileSystemProtocol, SchemaIndexProtocol


@dataclass(frozen=True)
class ExportResult:
    """Units exported and the files written for them."""

    units: list[TranslationUnit]
    files: list[str]


@dataclass
class ImportResult:
    """Outcome of an import: the merge report and whether the target was saved."""

    target_lang: str
    report: MergeReport = field(default_factory=MergeReport)
    created_target: bool = False
    saved: bool = False


def export_translations(
    data: CourseData,
    schema_index: SchemaIndexProtocol,
    *,
    master_lang: str,
    output_dir: str,
    codec: CodecProtocol,
    target_lang: str | None = None,
) -> ExportResult:
    """Extract the master language and write interchange files to output_dir.

    Every file is encoded in memory before the first one is written.
    """
    language = data.get_language(master_lang)
    units = extract(language, schema_index)
    files = codec.encode(units, source_lang=master_lang, target_lang=target_lang)

    written = []
    for name, contents in files.items():
        path = f"{output_dir.rstrip('/')}/{name}"
        data.fs.write_file(path, contents)
        written.append(path)

    logger.info(
        "Exported {} unit(s) from {!r} to {} file(s)", len(units), master_lang, len(written)
    )
    return ExportResult(units=units, files=written)


def read_interchange_files(
    fs: FileSystemProtocol, input_dir: str, codec: CodecProtocol
) -> dict[str, bytes]:
    """Read every file in input_dir with the codec's extension."""
    input_dir = input_dir.rstrip("/")
    names = [
        entry
        for entry in fs.list_dir(input_dir)
        if not entry.endswith("/") and entry.endswith(codec.extension)
    ]
    if not names:
        msg = f"No {codec.extension} files found in {input_dir}"
        raise FileNotFoundError(msg)
    return {name: fs.read_file(f"{input_dir}/{name}") for name in names}


def import_translations(
    data: CourseData,
    *,
    master_lang: str,
    target_lang: str,
    input_dir: str,
    codec: CodecProtocol,
    replace_existing: bool = False,
    strict: bool = False,
) -> ImportResult:
    """Decode interchange files and merge them into the target language.

    The target is copied from the master language when it does not exist yet.
    Decoding finishes before the target is touched, so a malformed file aborts the
    import with FormatError and nothing is written. With strict, the target is not
    saved when any unit could not be applied.
    """
    if master_lang == target_lang:
        msg = f"Target language must differ from master language {master_lang!r}"
        raise ValueError(msg)

    files = read_interchange_files(data.fs, input_dir, codec)
    decoded = codec.decode(files, target_lang=target_lang)
    logger.info("Decoded {} unit(s) from {} file(s)", len(decoded.units), len(files))

    master = data.get_language(master_lang)
    result = ImportResult(target_lang=target_lang)
    if data.has_language(target_lang):
        target = data.get_language(target_lang)
    else:
        target = data.copy_language(master_lang, target_lang)
        result.created_target = True

    result.report = apply(target, decoded.units, master=master, replace_existing=replace_existing)
    result.report.warnings[:0] = decoded.warnings

    if strict and result.report.problems:
        logger.warning(
            "Not saving {!r}: {} unit(s) could not be applied",
            target_lang,
            len(result.report.problems),
        )
        return result

    target.save(data.fs, data.course_dir)
    result.saved = True
    return result
