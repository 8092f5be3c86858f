"""JSON representation of SenML packs (RFC 8428, section 5)."""

from __future__ import annotations

import json
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from models.errors import DecodeError, EncodeError
from models.records import Pack, RawRecord
from wire.schemas import RecordSchema

_PACK_ADAPTER = TypeAdapter(List[RecordSchema])


def decode_json(payload: bytes) -> List[RawRecord]:
    try:
        schemas = _PACK_ADAPTER.validate_json(payload, strict=True)
    except ValidationError as exc:
        raise DecodeError(f"Invalid SenML JSON pack: {exc}") from exc
    return [schema.to_record() for schema in schemas]


def encode_json(records: Pack, indent: Optional[int] = None) -> bytes:
    document = [RecordSchema.from_record(record).to_wire() for record in records]
    separators = (",", ":") if indent is None else None
    try:
        text = json.dumps(document, indent=indent, separators=separators, allow_nan=False)
    except ValueError as exc:
        raise EncodeError(f"Pack cannot be represented as JSON: {exc}") from exc
    return text.encode("utf-8")
