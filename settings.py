from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_INPUT_FORMAT_ENV = "SENML_INPUT_FORMAT"
_OUTPUT_FORMAT_ENV = "SENML_OUTPUT_FORMAT"
_JSON_INDENT_ENV = "SENML_JSON_INDENT"
_WORKER_COUNT_ENV = "PROCESSOR_WORKER_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_KNOWN_FORMATS = {"json", "xml"}


@dataclass(frozen=True)
class Settings:
    input_format: Optional[str]
    output_format: str
    json_indent: Optional[int]
    processor_workers: int
    log_level: str


def _read_format_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in _KNOWN_FORMATS else default


def _read_positive_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_worker_count(default: int) -> int:
    parsed = _read_positive_int(_WORKER_COUNT_ENV, default)
    return parsed if parsed is not None else default


def is_log_level(name: str) -> bool:
    return isinstance(logging.getLevelName(name.upper()), int)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip().upper()
    if not candidate or not is_log_level(candidate):
        return default
    return candidate


@lru_cache
def get_settings() -> Settings:
    return Settings(
        input_format=_read_format_env(_INPUT_FORMAT_ENV, None),
        output_format=_read_format_env(_OUTPUT_FORMAT_ENV, "json") or "json",
        json_indent=_read_positive_int(_JSON_INDENT_ENV, None),
        processor_workers=_read_worker_count(4),
        log_level=_read_log_level("INFO"),
    )
