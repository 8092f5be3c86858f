from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from cli.config import CLIConfig, load_config
from cli.render import render_records, render_results
from logging_config import configure_logging
from models.errors import SenMLError
from services.processor import PackProcessor, ProcessingResult, ProcessingStatus
from services.resolver import Resolver
from settings import get_settings
from wire.codec import PackFormat, decode, infer_format


@dataclass
class CLIState:
    config: CLIConfig
    processor: PackProcessor


app = typer.Typer(
    help="Decode, resolve and re-encode SenML (RFC 8428) packs.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        _fail("CLI state is uninitialized.")
    return state


def _emit(result: ProcessingResult, output: Optional[Path]) -> None:
    if result.status is ProcessingStatus.failed or result.output is None:
        reason = result.error.reason if result.error else "unknown error"
        _fail(f"{result.source}: {reason}")
    if output is None:
        typer.echo(result.output.decode("utf-8"))
        return
    output.write_bytes(result.output)
    typer.secho(
        f"Wrote {result.record_count} records to {output}",
        fg=typer.colors.GREEN,
        err=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    indent: Optional[int] = typer.Option(
        None,
        "--indent",
        help="Indent JSON output by this many spaces (defaults to SENML_JSON_INDENT or compact).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level for diagnostics on stderr (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(json_indent=indent, log_level=log_level)
    configure_logging(config.log_level)
    processor = PackProcessor(
        resolver=Resolver(),
        input_format=config.input_format,
        output_format=config.output_format,
        json_indent=config.json_indent,
        workers=get_settings().processor_workers,
    )
    ctx.obj = CLIState(config=config, processor=processor)


@app.command("resolve")
def resolve_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a SenML pack."),
    input_format: Optional[PackFormat] = typer.Option(
        None,
        "--from",
        "-f",
        case_sensitive=False,
        help="Input format (inferred from the file suffix when omitted).",
    ),
    output_format: Optional[PackFormat] = typer.Option(
        None,
        "--to",
        "-t",
        case_sensitive=False,
        help="Output format (defaults to SENML_OUTPUT_FORMAT or json).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the encoded pack here instead of stdout.",
    ),
) -> None:
    """Resolve base attributes and relative times, then re-encode the pack."""
    state = _get_state(ctx)
    result = state.processor.process_file(
        file, input_format=input_format, output_format=output_format
    )
    _emit(result, output)


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a SenML pack."),
    output_format: PackFormat = typer.Option(
        ...,
        "--to",
        "-t",
        case_sensitive=False,
        help="Target format.",
    ),
    input_format: Optional[PackFormat] = typer.Option(
        None,
        "--from",
        "-f",
        case_sensitive=False,
        help="Input format (inferred from the file suffix when omitted).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the encoded pack here instead of stdout.",
    ),
) -> None:
    """Re-encode a pack in another format without resolving it."""
    state = _get_state(ctx)
    result = state.processor.process_file(
        file,
        input_format=input_format,
        output_format=output_format,
        resolve=False,
    )
    _emit(result, output)


@app.command("check")
def check_command(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="SenML packs to validate."),
) -> None:
    """Resolve several packs concurrently and report which ones are valid."""
    state = _get_state(ctx)
    results = state.processor.process_files(files)
    render_results(results)
    if any(result.status is ProcessingStatus.failed for result in results):
        raise typer.Exit(code=1)


@app.command("show")
def show_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a SenML pack."),
    input_format: Optional[PackFormat] = typer.Option(
        None,
        "--from",
        "-f",
        case_sensitive=False,
        help="Input format (inferred from the file suffix when omitted).",
    ),
) -> None:
    """Print the resolved records of a pack in chronological order."""
    state = _get_state(ctx)
    fallback = state.config.input_format or PackFormat.json
    try:
        pack_format = input_format or infer_format(file, default=fallback)
        records = state.processor.resolver.resolve(decode(file.read_bytes(), pack_format))
    except SenMLError as exc:
        _fail(f"{file}: {exc}")
    render_records(records)
