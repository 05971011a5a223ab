"""Character set detection for interchange files."""

import codecs

from charset_normalizer import from_bytes

from coursetree.errors import FormatError

# Longest marks first: the UTF-32 LE mark starts with the UTF-16 LE mark.
_BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def detect_encoding(data: bytes) -> str | None:
    """Guess the charset of data: byte-order mark, then UTF-8, then statistics.

    Returns None when no charset fits.
    """
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        pass
    else:
        return "utf-8"
    best = from_bytes(data).best()
    return best.encoding if best is not None else None


def decode_text(data: bytes, *, path: str, encoding: str | None = None) -> str:
    """Decode a file, detecting its charset unless one is given.

    Raises:
        FormatError: If no charset is detected or the bytes do not decode.
    """
    if encoding is None:
        encoding = detect_encoding(data)
        if encoding is None:
            raise FormatError("cannot detect character encoding", path=path)
    try:
        text = data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise FormatError(f"cannot decode as {encoding}: {exc}", path=path) from exc
    return text.removeprefix("\ufeff")
