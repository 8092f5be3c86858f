"""XML representation of SenML packs (RFC 8428, section 7)."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, List

from pydantic import ValidationError

from models.errors import DecodeError
from models.records import Pack, RawRecord
from wire.schemas import SENML_NAMESPACE, RecordSchema

_PACK_TAG = "sensml"
_RECORD_TAG = "senml"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _format_attribute(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def decode_xml(payload: bytes) -> List[RawRecord]:
    # DTDs and entity declarations are rejected outright.
    if b"<!DOCTYPE" in payload.upper():
        raise DecodeError("SenML XML packs must not contain a document type declaration.")
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise DecodeError(f"Invalid SenML XML pack: {exc}") from exc

    if _local_name(root.tag) != _PACK_TAG:
        raise DecodeError(
            f"Expected a <{_PACK_TAG}> root element, got <{_local_name(root.tag)}>."
        )

    records: List[RawRecord] = []
    for position, element in enumerate(root):
        if _local_name(element.tag) != _RECORD_TAG:
            raise DecodeError(
                f"Unexpected <{_local_name(element.tag)}> element at position {position}."
            )
        try:
            schema = RecordSchema.model_validate(dict(element.attrib))
        except ValidationError as exc:
            raise DecodeError(f"Invalid SenML XML record at position {position}: {exc}") from exc
        records.append(schema.to_record())
    return records


def encode_xml(records: Pack) -> bytes:
    root = ET.Element(_PACK_TAG, xmlns=SENML_NAMESPACE)
    for record in records:
        attributes = RecordSchema.from_record(record).to_wire()
        ET.SubElement(
            root,
            _RECORD_TAG,
            {label: _format_attribute(value) for label, value in attributes.items()},
        )
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
