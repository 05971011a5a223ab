"""Single JSON bundle codec."""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from coursetree.config import JSON_BUNDLE_FILENAME
from coursetree.core.translate.codecs.charset import decode_text
from coursetree.errors import FormatError
from coursetree.models.translation import DecodeResult, TranslationUnit, UnitWarning


class JsonCodec:
    """Encode units as one ``export.json`` array of unit records, in export order."""

    extension = ".json"

    def __init__(self, *, filename: str = JSON_BUNDLE_FILENAME) -> None:
        self.filename = filename

    def encode(
        self,
        units: Sequence[TranslationUnit],
        *,
        source_lang: str,
        target_lang: str | None = None,
    ) -> dict[str, bytes]:
        records = [
            {
                "itemId": unit.item_id,
                "itemType": unit.item_type,
                "fieldPath": unit.field_path,
                "context": unit.context,
                "value": unit.value,
            }
            for unit in units
        ]
        contents = json.dumps(records, indent=2, ensure_ascii=False) + "\n"
        return {self.filename: contents.encode("utf-8")}

    def decode(
        self, files: Mapping[str, bytes], *, target_lang: str | None = None
    ) -> DecodeResult:
        # Rows carry no language; target_lang only matters for XLIFF.
        result = DecodeResult()
        for name, data in files.items():
            if not name.endswith(self.extension):
                continue
            try:
                records = json.loads(decode_text(data, path=name))
            except json.JSONDecodeError as exc:
                raise FormatError(f"invalid JSON: {exc}", path=name) from exc
            if not isinstance(records, list):
                raise FormatError("expected an array of unit records", path=name)
            for i, record in enumerate(records):
                unit = self._decode_record(name, i, record, result)
                if unit is not None:
                    result.units.append(unit)
        return result

    def _decode_record(
        self, name: str, i: int, record: Any, result: DecodeResult
    ) -> TranslationUnit | None:
        if not isinstance(record, dict):
            raise FormatError(f"record {i} is not an object", path=name)
        item_id = record.get("itemId")
        field_path = record.get("fieldPath")
        if not isinstance(item_id, str) or not item_id:
            raise FormatError(f"record {i} has no itemId", path=name)
        if not isinstance(field_path, str) or not field_path:
            raise FormatError(f"record {i} has no fieldPath", path=name)

        value = record.get("value")
        if not isinstance(value, str):
            result.warnings.append(
                UnitWarning(
                    kind="invalid-unit",
                    item_id=item_id,
                    field_path=field_path,
                    message=f"{name}: record {i} has no string value, skipped",
                )
            )
            return None

        item_type = record.get("itemType")
        context = record.get("context")
        return TranslationUnit(
            item_id=item_id,
            item_type=item_type if isinstance(item_type, str) else "",
            field_path=field_path,
            value=value,
            context=context if isinstance(context, str) and context else None,
        )
