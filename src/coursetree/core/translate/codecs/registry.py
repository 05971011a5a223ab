"""Pick an interchange codec by format name."""

from coursetree.config import DEFAULT_CSV_ENCODING, FORMATS
from coursetree.core.translate.codecs.csv_codec import CsvCodec
from coursetree.core.translate.codecs.json_codec import JsonCodec
from coursetree.core.translate.codecs.xliff_codec import XliffCodec
from coursetree.protocols import CodecProtocol


def get_codec(
    format: str,
    *,
    delimiter: str | None = None,
    encoding: str | None = None,
) -> CodecProtocol:
    """Return the codec for "csv", "json" or "xlf".

    delimiter and encoding only apply to csv; on decode, None means auto-detect.
    """
    name = format.lower().lstrip(".")
    if name == "xliff":
        name = "xlf"
    if name not in FORMATS:
        msg = f"Unknown interchange format {format!r}, expected one of {', '.join(FORMATS)}"
        raise ValueError(msg)
    if name == "csv":
        return CsvCodec(
            delimiter=delimiter,
            encoding=encoding or DEFAULT_CSV_ENCODING,
            decode_encoding=encoding,
        )
    if name == "json":
        return JsonCodec()
    return XliffCodec()
