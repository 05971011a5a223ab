"""XLIFF 1.2 codec."""

import re
from collections.abc import Mapping, Sequence
from urllib.parse import quote, unquote

from lxml import etree

from coursetree.config import XLIFF_FILENAME
from coursetree.errors import FormatError
from coursetree.models.translation import DecodeResult, TranslationUnit, UnitWarning

XLIFF_NS = "urn:oasis:names:tc:xliff:document:1.2"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"
RESTYPE_PREFIX = "x-"
CHAR_CTYPE_PREFIX = "x-char-"

# Characters XML 1.0 cannot carry, written as <x ctype="x-char-XXXX"/> placeholders.
_ILLEGAL_XML_RE = re.compile(r"([\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff])")
_CHAR_CTYPE_RE = re.compile(r"x-char-([0-9a-f]{4})")




def _tag(name: str) -> str:
    return f"{{{XLIFF_NS}}}{name}"


def make_unit_id(item_id: str, field_path: str) -> str:
    """Encode an item id and field path as a trans-unit id.

    The item id is percent-quoted so the first "/" always separates the two parts.
    """
    return f"{quote(item_id, safe='')}/{field_path}"


def split_unit_id(unit_id: str) -> tuple[str, str] | None:
    """Invert ``make_unit_id``. Returns None if unit_id was not made by it."""
    quoted, sep, field_path = unit_id.partition("/")
    if not sep or not quoted or not field_path:
        return None
    return unquote(quoted), field_path


def _set_text(element: etree._Element, value: str) -> None:
    """Set the text of element, writing XML-illegal characters as ``<x/>`` placeholders."""
    pieces = _ILLEGAL_XML_RE.split(value)
    # An explicit (possibly empty) text node keeps pretty_print out of mixed content.
    element.text = pieces[0]
    for index in range(1, len(pieces), 2):
        placeholder = etree.SubElement(
            element,
            _tag("x"),
            id=f"char{index // 2 + 1}",
            ctype=f"{CHAR_CTYPE_PREFIX}{ord(pieces[index]):04x}",
        )
        placeholder.tail = pieces[index + 1]


def _text(element: etree._Element | None) -> str | None:
    if element is None:
        return None
    parts = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            match = _CHAR_CTYPE_RE.fullmatch(child.get("ctype", ""))
            if etree.QName(child).localname == "x" and match:
                parts.append(chr(int(match.group(1), 16)))
            else:
                parts.append("".join(child.itertext()))
        parts.append(child.tail or "")
    return "".join(parts)


class XliffCodec:
    """Encode units as a single XLIFF 1.2 ``source.xlf`` document.

    One ``<file>`` per language pair, one ``<trans-unit>`` per unit. The item
    type travels in ``restype`` and the context in ``<note>``. Characters XML
    cannot represent become ``<x ctype="x-char-000b"/>`` placeholders.
    """

    extension = ".xlf"

    def __init__(self, *, filename: str = XLIFF_FILENAME, original: str = "course") -> None:
        self.filename = filename
        self.original = original

    def encode(
        self,
        units: Sequence[TranslationUnit],
        *,
        source_lang: str,
        target_lang: str | None = None,
    ) -> dict[str, bytes]:
        root = etree.Element(_tag("xliff"), nsmap={None: XLIFF_NS}, version="1.2")
        file_el = etree.SubElement(
            root,
            _tag("file"),
            original=self.original,
            datatype="plaintext",
        )
        file_el.set("source-language", source_lang)
        if target_lang:
            file_el.set("target-language", target_lang)
        body = etree.SubElement(file_el, _tag("body"))

        for unit in units:
            try:
                trans_unit = etree.SubElement(
                    body,
                    _tag("trans-unit"),
                    id=make_unit_id(unit.item_id, unit.field_path),
                    restype=f"{RESTYPE_PREFIX}{unit.item_type}",
                )
            except ValueError as exc:
                msg = f"cannot encode {unit.item_id}/{unit.field_path!r}: {exc}"
                raise FormatError(msg, path=self.filename) from exc
            trans_unit.set(XML_SPACE, "preserve")
            _set_text(etree.SubElement(trans_unit, _tag("source")), unit.value)
            if unit.context:
                _set_text(etree.SubElement(trans_unit, _tag("note")), unit.context)

        contents = etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)
        return {self.filename: contents}

    def decode(
        self, files: Mapping[str, bytes], *, target_lang: str | None = None
    ) -> DecodeResult:
        """Decode every ``.xlf`` file in files.

        With target_lang, ``<file>`` elements declaring another target-language
        are skipped with a "wrong-language" warning.
        """
        result = DecodeResult()
        for name, data in files.items():
            if name.endswith(self.extension):
                self._decode_file(name, data, result, target_lang)
        return result

    def _decode_file(
        self, name: str, data: bytes, result: DecodeResult, target_lang: str | None
    ) -> None:
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(data, parser)
        except etree.XMLSyntaxError as exc:
            raise FormatError(f"invalid XML: {exc}", path=name) from exc
        if etree.QName(root).localname != "xliff":
            localname = etree.QName(root).localname
            raise FormatError(f"root element is <{localname}>, not <xliff>", path=name)

        for file_el in root.iter("{*}file"):
            file_target = file_el.get("target-language")
            if target_lang and file_target and file_target.lower() != target_lang.lower():
                skipped = sum(1 for _ in file_el.iter("{*}trans-unit"))
                result.warnings.append(
                    UnitWarning(
                        kind="wrong-language",
                        item_id=None,
                        field_path=None,
                        message=(
                            f"{name}: <file> targets {file_target!r}, not {target_lang!r}, "
                            f"{skipped} trans-unit(s) skipped"
                        ),
                    )
                )
                continue
            for trans_unit in file_el.iter("{*}trans-unit"):
                self._decode_unit(name, trans_unit, result)

    def _decode_unit(self, name: str, trans_unit: etree._Element, result: DecodeResult) -> None:
        unit_id = trans_unit.get("id", "")
        parts = split_unit_id(unit_id)
        if parts is None:
            result.warnings.append(
                UnitWarning(
                    kind="invalid-unit",
                    item_id=None,
                    field_path=None,
                    message=f"{name}: trans-unit id {unit_id!r} does not name an item, skipped",
                )
            )
            return
        item_id, field_path = parts

        target = _text(trans_unit.find("{*}target"))
        value = target if target else _text(trans_unit.find("{*}source"))
        if value is None:
            result.warnings.append(
                UnitWarning(
                    kind="invalid-unit",
                    item_id=item_id,
                    field_path=field_path,
                    message=f"{name}: trans-unit {unit_id!r} has no source, skipped",
                )
            )
            return

        restype = trans_unit.get("restype", "")
        note = _text(trans_unit.find("{*}note"))
        result.units.append(
            TranslationUnit(
                item_id=item_id,
                item_type=restype.removeprefix(RESTYPE_PREFIX),
                field_path=field_path,
                value=value,
                context=note or None,
            )
        )
