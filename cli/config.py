from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from settings import get_settings, is_log_level
from wire.codec import PackFormat, parse_format

DEFAULT_OUTPUT_FORMAT = PackFormat.json


@dataclass(frozen=True)
class CLIConfig:
    input_format: Optional[PackFormat] = None
    output_format: PackFormat = DEFAULT_OUTPUT_FORMAT
    json_indent: Optional[int] = None
    log_level: str = "INFO"


def load_config(
    input_format: Optional[str] = None,
    output_format: Optional[str] = None,
    json_indent: Optional[int] = None,
    log_level: Optional[str] = None,
) -> CLIConfig:
    """Merge command-line overrides over the environment settings."""
    settings = get_settings()
    in_format = input_format or settings.input_format
    out_format = output_format or settings.output_format or DEFAULT_OUTPUT_FORMAT
    indent = json_indent if json_indent is not None else settings.json_indent
    level = log_level.strip().upper() if log_level else ""
    if not is_log_level(level):
        level = settings.log_level
    return CLIConfig(
        input_format=parse_format(in_format) if in_format else None,
        output_format=parse_format(out_format),
        json_indent=indent if indent and indent > 0 else None,
        log_level=level,
    )
