"""Format dispatch for the SenML wire codecs."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from models.errors import UnsupportedFormatError
from models.records import Pack, RawRecord
from wire.json_codec import decode_json, encode_json
from wire.xml_codec import decode_xml, encode_xml


class PackFormat(str, Enum):
    """Wire representations understood by the codecs."""

    json = "json"
    xml = "xml"


_SUFFIX_FORMATS = {
    ".json": PackFormat.json,
    ".senml": PackFormat.json,
    ".xml": PackFormat.xml,
}


def parse_format(value: Union[str, PackFormat]) -> PackFormat:
    if isinstance(value, PackFormat):
        return value
    candidate = value.strip().lower()
    try:
        return PackFormat(candidate)
    except ValueError as exc:
        raise UnsupportedFormatError(f"Unsupported SenML format {value!r}.") from exc


def infer_format(path: Path, default: Optional[PackFormat] = None) -> PackFormat:
    """Pick a format from the file suffix, falling back to ``default``."""
    detected = _SUFFIX_FORMATS.get(path.suffix.lower())
    if detected is not None:
        return detected
    if default is not None:
        return default
    raise UnsupportedFormatError(f"Cannot infer SenML format from {path.name!r}.")


def decode(payload: bytes, fmt: Union[str, PackFormat]) -> List[RawRecord]:
    pack_format = parse_format(fmt)
    if pack_format is PackFormat.xml:
        return decode_xml(payload)
    return decode_json(payload)


def encode(
    records: Pack,
    fmt: Union[str, PackFormat],
    indent: Optional[int] = None,
) -> bytes:
    pack_format = parse_format(fmt)
    if pack_format is PackFormat.xml:
        return encode_xml(records)
    return encode_json(records, indent=indent)
