from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

import typer

from models.records import ResolvedRecord
from services.processor import ProcessingResult, ProcessingStatus

_STATUS_COLORS = {
    ProcessingStatus.resolved: typer.colors.GREEN,
    ProcessingStatus.converted: typer.colors.GREEN,
    ProcessingStatus.failed: typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_time(value: Optional[float]) -> str:
    if value is None:
        return "-"
    try:
        instant = datetime.fromtimestamp(value, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return f"{value:g}"
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _primary_value(record: ResolvedRecord) -> str:
    if record.value is not None:
        return f"{record.value:g}"
    if record.bool_value is not None:
        return "true" if record.bool_value else "false"
    if record.string_value is not None:
        return repr(record.string_value)
    if record.data_value is not None:
        return f"<data {len(record.data_value)} chars>"
    return "-"


def render_records(records: Sequence[ResolvedRecord]) -> None:
    echo_heading("Resolved Records")
    if not records:
        typer.echo("No records.")
        return
    for record in records:
        line = f"  - {_format_time(record.time)} {record.name} = {_primary_value(record)}"
        if record.unit:
            line += f" {record.unit}"
        if record.sum is not None:
            line += f" (sum {record.sum:g})"
        typer.echo(line)
    if records[0].base_version is not None:
        typer.echo()
        echo_key_values([("version", records[0].base_version)])


def render_results(results: Sequence[ProcessingResult]) -> None:
    echo_heading("Processing Results")
    for result in results:
        typer.secho(
            f"  - {result.source}: {result.status.value}",
            fg=_STATUS_COLORS[result.status],
        )
        if result.error is not None:
            typer.echo(f"      {result.error.code}: {result.error.reason}")
        else:
            typer.echo(
                f"      records={result.record_count} processing_ms={result.processing_ms}"
            )

    failed = sum(1 for result in results if result.status is ProcessingStatus.failed)
    typer.echo()
    echo_key_values([("files", len(results)), ("failed", failed)])
