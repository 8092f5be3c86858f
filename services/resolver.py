"""Base-attribute resolution for SenML packs (RFC 8428, section 4.6)."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional

from models.errors import (
    EmptyNameError,
    InconsistentVersionError,
    InvalidNameCharactersError,
    InvalidNameStartError,
    MissingValueError,
    UnsupportedVersionError,
)
from models.records import (
    BASE_FIELDS,
    MAX_SUPPORTED_VERSION,
    VALUE_FIELDS,
    RawRecord,
    ResolvedRecord,
)

logger = logging.getLogger(__name__)

# Resolved times below 2**28 seconds are offsets relative to "now".
RELATIVE_TIME_THRESHOLD = 2**28

_NAME_CHARACTERS = re.compile(r"[A-Za-z0-9\-:./_]*")
_NAME_START = re.compile(r"[A-Za-z0-9]")


@dataclass
class BaseState:
    """Latest base attributes seen while scanning a pack left to right."""

    base_name: Optional[str] = None
    base_time: Optional[float] = None
    base_unit: Optional[str] = None
    base_value: Optional[float] = None
    base_sum: Optional[float] = None

    def absorb(self, record: RawRecord) -> None:
        for field_name in BASE_FIELDS:
            candidate = getattr(record, field_name)
            if candidate is not None:
                setattr(self, field_name, candidate)


def _accumulate(base: Optional[float], own: Optional[float]) -> Optional[float]:
    if base is None and own is None:
        return None
    return (base or 0.0) + (own or 0.0)


def validate_name(name: str, record_index: Optional[int] = None) -> str:
    """Check a concatenated name against the SenML name grammar."""
    if not name:
        raise EmptyNameError(
            "The concatenated name must not be empty.", record_index=record_index
        )
    if _NAME_CHARACTERS.fullmatch(name) is None:
        raise InvalidNameCharactersError(
            f"Name {name!r} may only contain A-Z, a-z, 0-9, '-', ':', '.', '/' and '_'.",
            record_index=record_index,
        )
    if _NAME_START.match(name) is None:
        raise InvalidNameStartError(
            f"Name {name!r} must start with a character in A-Z, a-z or 0-9.",
            record_index=record_index,
        )
    return name


def to_absolute_time(resolved_time: float, now: float) -> float:
    if resolved_time < RELATIVE_TIME_THRESHOLD:
        return resolved_time + now
    return resolved_time


def chronological(records: Iterable[ResolvedRecord]) -> List[ResolvedRecord]:
    """Stable sort by time with undated records ahead of dated ones."""
    return sorted(
        records,
        key=lambda record: (record.time is not None, record.time or 0.0),
    )


class Resolver:
    """Pure resolution component that can be unit tested in isolation."""

    def __init__(
        self,
        max_version: int = MAX_SUPPORTED_VERSION,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_version = max_version
        self._clock = clock

    def resolve(self, records: Iterable[RawRecord]) -> List[ResolvedRecord]:
        now = self._clock()
        state = BaseState()
        version: Optional[int] = None
        resolved: List[ResolvedRecord] = []

        for index, record in enumerate(records):
            version = self._check_version(record, version, index)
            state.absorb(record)
            resolved.append(self._resolve_record(record, state, now, index))

        if version is not None and version < self.max_version:
            resolved = [replace(record, base_version=version) for record in resolved]

        logger.debug(
            "Resolved pack",
            extra={"record_count": len(resolved)},
        )
        return chronological(resolved)

    def _check_version(
        self, record: RawRecord, adopted: Optional[int], index: int
    ) -> Optional[int]:
        declared = record.base_version
        if declared is None:
            return adopted
        if declared > self.max_version:
            raise UnsupportedVersionError(
                f"Version {declared} is higher than the supported version {self.max_version}.",
                record_index=index,
            )
        if adopted is not None and declared != adopted:
            raise InconsistentVersionError(
                f"All records must share one version (got {declared}, expected {adopted}).",
                record_index=index,
            )
        return declared

    def _resolve_record(
        self, record: RawRecord, state: BaseState, now: float, index: int
    ) -> ResolvedRecord:
        name = validate_name((state.base_name or "") + (record.name or ""), index)

        resolved_time = _accumulate(state.base_time, record.time)
        if resolved_time is not None:
            resolved_time = to_absolute_time(resolved_time, now)

        resolved = ResolvedRecord(
            name=name,
            unit=record.unit if record.unit is not None else state.base_unit,
            value=_accumulate(state.base_value, record.value),
            bool_value=record.bool_value,
            string_value=record.string_value,
            data_value=record.data_value,
            sum=_accumulate(state.base_sum, record.sum),
            time=resolved_time,
            update_time=record.update_time,
            link=record.link,
        )

        if all(getattr(resolved, field_name) is None for field_name in VALUE_FIELDS):
            raise MissingValueError(
                "The record has no value, boolean value, string value, data value or sum.",
                record_index=index,
            )
        return resolved


def resolve(records: Iterable[RawRecord]) -> List[ResolvedRecord]:
    """Resolve a raw pack against the wall clock."""
    return Resolver().resolve(records)
