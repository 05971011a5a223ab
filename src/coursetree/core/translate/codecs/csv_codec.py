"""Delimited-text codec: one CSV file per item type."""

import csv
import io
from collections.abc import Mapping, Sequence

from coursetree.config import CSV_DELIMITER_CANDIDATES, DEFAULT_CSV_DELIMITER, DEFAULT_CSV_ENCODING
from coursetree.core.translate.codecs.charset import decode_text
from coursetree.errors import FormatError
from coursetree.models.translation import DecodeResult, TranslationUnit, UnitWarning

HEADER: tuple[str, ...] = ("itemId", "fieldPath", "context", "value")
REQUIRED_COLUMNS: tuple[str, ...] = ("itemId", "fieldPath", "value")


def detect_delimiter(header_line: str) -> str | None:
    """Return the candidate delimiter occurring most often in the header row."""
    counts = [(header_line.count(d), -i, d) for i, d in enumerate(CSV_DELIMITER_CANDIDATES)]
    count, _, delimiter = max(counts)
    return delimiter if count > 0 else None


class CsvCodec:
    """Encode units as ``<itemType>.csv`` files with columns itemId,fieldPath,context,value.

    Args:
        delimiter: Field delimiter. Auto-detected on decode when None.
        encoding: Charset used on encode. The default writes a UTF-8 BOM.
        decode_encoding: Charset used on decode. Auto-detected when None.
    """

    extension = ".csv"

    def __init__(
        self,
        *,
        delimiter: str | None = None,
        encoding: str = DEFAULT_CSV_ENCODING,
        decode_encoding: str | None = None,
    ) -> None:
        if delimiter is not None and len(delimiter) != 1:
            msg = f"delimiter must be a single character, got {delimiter!r}"
            raise ValueError(msg)
        self.delimiter = delimiter
        self.encoding = encoding
        self.decode_encoding = decode_encoding

    def encode(
        self,
        units: Sequence[TranslationUnit],
        *,
        source_lang: str,
        target_lang: str | None = None,
    ) -> dict[str, bytes]:
        by_type: dict[str, list[TranslationUnit]] = {}
        for unit in units:
            by_type.setdefault(unit.item_type, []).append(unit)

        files: dict[str, bytes] = {}
        for item_type, type_units in by_type.items():
            buf = io.StringIO()
            writer = csv.writer(buf, delimiter=self.delimiter or DEFAULT_CSV_DELIMITER)
            writer.writerow(HEADER)
            for unit in type_units:
                writer.writerow([unit.item_id, unit.field_path, unit.context or "", unit.value])
            files[f"{item_type}{self.extension}"] = buf.getvalue().encode(self.encoding)
        return files

    def decode(
        self, files: Mapping[str, bytes], *, target_lang: str | None = None
    ) -> DecodeResult:
        # Rows carry no language; target_lang only matters for XLIFF.
        result = DecodeResult()
        for name, data in files.items():
            if not name.endswith(self.extension):
                continue
            self._decode_file(name, data, result)
        return result

    def _decode_file(self, name: str, data: bytes, result: DecodeResult) -> None:
        text = decode_text(data, path=name, encoding=self.decode_encoding)
        if not text.strip():
            raise FormatError("empty file", path=name)

        delimiter = self.delimiter
        if delimiter is None:
            delimiter = detect_delimiter(text.splitlines()[0])
            if delimiter is None:
                raise FormatError("cannot detect delimiter in header row", path=name)

        try:
            rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True))
        except csv.Error as exc:
            raise FormatError(f"invalid CSV: {exc}", path=name) from exc

        header = [column.strip() for column in rows[0]]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise FormatError(f"header is missing column(s) {missing!r}", path=name)
        col = {column: header.index(column) for column in HEADER if column in header}

        item_type = name.rsplit("/", 1)[-1].removesuffix(self.extension)
        for line, row in enumerate(rows[1:], start=2):
            if not any(cell.strip() for cell in row):
                continue
            # Spreadsheet tools drop trailing empty cells.
            row = row + [""] * (len(header) - len(row))
            item_id = row[col["itemId"]]
            field_path = row[col["fieldPath"]]
            if not item_id or not field_path:
                result.warnings.append(
                    UnitWarning(
                        kind="invalid-unit",
                        item_id=item_id or None,
                        field_path=field_path or None,
                        message=f"{name}:{line}: row without itemId or fieldPath skipped",
                    )
                )
                continue
            context = row[col["context"]] if "context" in col else ""
            result.units.append(
                TranslationUnit(
                    item_id=item_id,
                    item_type=item_type,
                    field_path=field_path,
                    value=row[col["value"]],
                    context=context or None,
                )
            )
