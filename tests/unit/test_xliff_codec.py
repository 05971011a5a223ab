"""Tests for the XLIFF 1.2 codec."""

import pytest
from lxml import etree

from coursetree.core.translate.codecs.xliff_codec import (
    XLIFF_NS,
    XliffCodec,
    make_unit_id,
    split_unit_id,
)
from coursetree.errors import FormatError
from coursetree.models.translation import TranslationUnit

NS = {"x": XLIFF_NS}


def _document(units: str) -> bytes:
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<xliff xmlns="{XLIFF_NS}" version="1.2">'
        f'<file original="course" source-language="en" target-language="fr" datatype="plaintext">'
        f"<body>{units}</body></file></xliff>"
    ).encode()


def test_unit_id_quotes_item_id() -> None:
    unit_id = make_unit_id("a/b c", "_items[0].title")

    assert unit_id == "a%2Fb%20c/_items[0].title"
    assert split_unit_id(unit_id) == ("a/b c", "_items[0].title")


@pytest.mark.parametrize("unit_id", ["", "no-slash", "/body", "b1/"])
def test_split_unit_id_rejects_foreign_ids(unit_id: str) -> None:
    assert split_unit_id(unit_id) is None


def test_encode_builds_xliff_document() -> None:
    units = [
        TranslationUnit("b1", "block", "body", "Hello", context="Intro"),
        TranslationUnit("c1", "component", "_items[0].title", "Item"),
    ]

    files = XliffCodec().encode(units, source_lang="en", target_lang="fr")

    root = etree.fromstring(files["source.xlf"])
    assert files["source.xlf"].startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
    file_el = root.find("x:file", NS)
    assert file_el.get("source-language") == "en"
    assert file_el.get("target-language") == "fr"
    trans_units = root.findall(".//x:trans-unit", NS)
    assert [tu.get("id") for tu in trans_units] == ["b1/body", "c1/_items[0].title"]
    assert trans_units[0].get("restype") == "x-block"
    assert trans_units[0].findtext("x:source", namespaces=NS) == "Hello"
    assert trans_units[0].findtext("x:note", namespaces=NS) == "Intro"
    assert trans_units[1].find("x:note", NS) is None


def test_encode_without_target_language() -> None:
    root = etree.fromstring(XliffCodec().encode([], source_lang="en")["source.xlf"])

    assert root.find("x:file", NS).get("target-language") is None


def test_encode_then_decode_keeps_markup_as_text() -> None:
    unit = TranslationUnit("b1", "block", "body", "<p>Hello &amp; bye</p>", context="Intro")
    codec = XliffCodec()

    assert codec.decode(codec.encode([unit], source_lang="en")).units == [unit]


def test_decode_prefers_target_and_falls_back_to_source() -> None:
    data = _document(
        '<trans-unit id="b1/body" restype="x-block">'
        "<source>Hello</source><target>Bonjour</target></trans-unit>"
        '<trans-unit id="b2/body" restype="x-block">'
        "<source>Untranslated</source><target></target></trans-unit>"
    )

    units = XliffCodec().decode({"source.xlf": data}).units

    assert [(u.item_id, u.item_type, u.value) for u in units] == [
        ("b1", "block", "Bonjour"),
        ("b2", "block", "Untranslated"),
    ]


def test_decode_warns_on_bad_units() -> None:
    data = _document(
        '<trans-unit id="free-text"><source>x</source></trans-unit>'
        '<trans-unit id="b1/body"></trans-unit>'
    )

    result = XliffCodec().decode({"source.xlf": data})

    assert result.units == []
    assert [(w.kind, w.item_id) for w in result.warnings] == [
        ("invalid-unit", None),
        ("invalid-unit", "b1"),
    ]


@pytest.mark.parametrize(
    ("data", "match"),
    [
        (b"<xliff><file>", "invalid XML"),
        (b"<html/>", "not <xliff>"),
    ],
)
def test_decode_rejects_malformed_documents(data: bytes, match: str) -> None:
    with pytest.raises(FormatError, match=match):
        XliffCodec().decode({"source.xlf": data})


@pytest.mark.parametrize("value", ["Hello\x0bworld", "\x0b", "a\x00b\x1fc\x0c"])
def test_encode_then_decode_keeps_control_characters(value: str) -> None:
    unit = TranslationUnit("b1", "block", "body", value, context=f"note{value}")
    codec = XliffCodec()

    assert codec.decode(codec.encode([unit], source_lang="en")).units == [unit]


def test_encode_writes_control_characters_as_placeholders() -> None:
    unit = TranslationUnit("b1", "block", "body", "Hello\x0bworld")

    data = XliffCodec().encode([unit], source_lang="en")["source.xlf"]

    source = etree.fromstring(data).find(".//x:source", NS)
    assert source.text == "Hello"
    assert [(x.get("id"), x.get("ctype")) for x in source] == [("char1", "x-char-000b")]
    assert source[0].tail == "world"


def test_decode_reads_text_around_foreign_inline_elements() -> None:
    data = _document(
        '<trans-unit id="b1/body" restype="x-block">'
        '<source>Hello <g id="1">big</g><x id="2"/> world</source></trans-unit>'
    )

    units = XliffCodec().decode({"source.xlf": data}).units

    assert units[0].value == "Hello big world"


def test_encode_rejects_field_path_xml_cannot_carry() -> None:
    unit = TranslationUnit("b1", "block", "body\x01", "Hello")

    with pytest.raises(FormatError, match="b1/'body\\\\x01'") as excinfo:
        XliffCodec().encode([unit], source_lang="en")

    assert excinfo.value.path == "source.xlf"


def test_decode_skips_files_for_other_target_language() -> None:
    data = (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<xliff xmlns="{XLIFF_NS}" version="1.2">'
        f'<file original="course" source-language="en" target-language="de"><body>'
        '<trans-unit id="b1/body"><source>Hello</source><target>Hallo</target></trans-unit>'
        "</body></file>"
        f'<file original="course" source-language="en" target-language="FR"><body>'
        '<trans-unit id="b1/body"><source>Hello</source><target>Bonjour</target></trans-unit>'
        "</body></file></xliff>"
    ).encode()

    result = XliffCodec().decode({"source.xlf": data}, target_lang="fr")

    assert [u.value for u in result.units] == ["Bonjour"]
    assert [(w.kind, w.item_id) for w in result.warnings] == [("wrong-language", None)]
    assert "'de'" in result.warnings[0].message


def test_decode_without_target_language_reads_every_file() -> None:
    data = _document('<trans-unit id="b1/body"><source>Hello</source></trans-unit>')

    assert len(XliffCodec().decode({"source.xlf": data}).units) == 1
    assert len(XliffCodec().decode({"source.xlf": data}, target_lang="fr").units) == 1
    assert len(XliffCodec().decode({"source.xlf": data}, target_lang="de").units) == 0
