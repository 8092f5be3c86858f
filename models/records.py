"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

MAX_SUPPORTED_VERSION = 10

BASE_FIELDS = ("base_name", "base_time", "base_unit", "base_value", "base_sum")
VALUE_FIELDS = ("value", "bool_value", "string_value", "data_value", "sum")


@dataclass(frozen=True, slots=True)
class RawRecord:
    """A SenML record exactly as it appeared on the wire, before inheritance."""

    base_name: Optional[str] = None
    base_time: Optional[float] = None
    base_unit: Optional[str] = None
    base_value: Optional[float] = None
    base_sum: Optional[float] = None
    base_version: Optional[int] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    value: Optional[float] = None
    bool_value: Optional[bool] = None
    string_value: Optional[str] = None
    data_value: Optional[str] = None
    sum: Optional[float] = None
    time: Optional[float] = None
    update_time: Optional[float] = None
    link: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolvedRecord:
    """A record with every base attribute folded in and an absolute time."""

    name: str
    unit: Optional[str] = None
    value: Optional[float] = None
    bool_value: Optional[bool] = None
    string_value: Optional[str] = None
    data_value: Optional[str] = None
    sum: Optional[float] = None
    time: Optional[float] = None
    update_time: Optional[float] = None
    link: Optional[str] = None
    base_version: Optional[int] = None


Record = Union[RawRecord, ResolvedRecord]
Pack = Sequence[Record]
