from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cli.app import app
from settings import get_settings
from wire.codec import PackFormat, decode

VALID_PACK = b'[{"bn":"dev/","bt":1600000000,"bver":5,"n":"temp","u":"Cel","v":21.5},{"n":"temp","t":-10,"v":21.0}]'
INVALID_PACK = b'[{"bn":"dev/","n":"temp","v":1},{"n":"temp(1)","v":2}]'


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    for name in ("SENML_INPUT_FORMAT", "SENML_OUTPUT_FORMAT", "SENML_JSON_INDENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("cli.app.configure_logging", lambda level=None: None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _write(tmp_path: Path, name: str, payload: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(payload)
    return path


def test_resolve_writes_json_to_stdout(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", VALID_PACK)

    result = runner.invoke(app, ["resolve", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {"bver": 5, "n": "dev/temp", "v": 21.0, "t": 1599999990.0},
        {"bver": 5, "n": "dev/temp", "u": "Cel", "v": 21.5, "t": 1600000000.0},
    ]


def test_resolve_to_xml_file(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", VALID_PACK)
    target = tmp_path / "resolved.xml"

    result = runner.invoke(app, ["resolve", str(path), "--to", "xml", "-o", str(target)])

    assert result.exit_code == 0
    records = decode(target.read_bytes(), PackFormat.xml)
    assert [record.name for record in records] == ["dev/temp", "dev/temp"]
    assert all(record.base_name is None for record in records)


def test_resolve_honours_indent_option(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", VALID_PACK)

    result = runner.invoke(app, ["--indent", "2", "resolve", str(path)])

    assert result.exit_code == 0
    assert result.stdout.startswith("[\n  {")


def test_resolve_rejects_invalid_pack(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "bad.json", INVALID_PACK)

    result = runner.invoke(app, ["resolve", str(path)])

    assert result.exit_code == 1
    assert "record 1" in result.output


def test_convert_keeps_base_attributes(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", VALID_PACK)

    result = runner.invoke(app, ["convert", str(path), "--to", "xml"])

    assert result.exit_code == 0
    assert 'bn="dev/"' in result.stdout
    assert decode(result.stdout.strip().encode("utf-8"), PackFormat.xml) == decode(
        VALID_PACK, PackFormat.json
    )


def test_check_reports_every_file(runner: CliRunner, tmp_path) -> None:
    good = _write(tmp_path, "good.json", VALID_PACK)
    bad = _write(tmp_path, "bad.json", INVALID_PACK)

    result = runner.invoke(app, ["check", str(good), str(bad)])

    assert result.exit_code == 1
    assert "Processing Results" in result.output
    assert f"{good}: resolved" in result.output
    assert f"{bad}: failed" in result.output
    assert "invalid_name_characters" in result.output
    assert "failed: 1" in result.output


def test_check_succeeds_when_all_valid(runner: CliRunner, tmp_path) -> None:
    good = _write(tmp_path, "good.json", VALID_PACK)

    result = runner.invoke(app, ["check", str(good)])

    assert result.exit_code == 0
    assert "failed: 0" in result.output


def test_show_lists_records_chronologically(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", VALID_PACK)

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 0
    lines = [line.strip() for line in result.stdout.splitlines()]
    assert "- 2020-09-13T12:26:30.000Z dev/temp = 21" in lines
    assert "- 2020-09-13T12:26:40.000Z dev/temp = 21.5 Cel" in lines
    assert lines.index("- 2020-09-13T12:26:30.000Z dev/temp = 21") < lines.index(
        "- 2020-09-13T12:26:40.000Z dev/temp = 21.5 Cel"
    )
    assert "version: 5" in lines


def test_show_reports_errors(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.xml", b"<sensml><senml n='x' v='1'></sensml>")

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 1
    assert "Invalid SenML XML pack" in result.output


def test_show_prints_out_of_range_times_as_numbers(runner: CliRunner, tmp_path) -> None:
    path = _write(tmp_path, "pack.json", b'[{"n":"x","v":1,"t":1700000000000000}]')

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 0
    assert "- 1.7e+15 x = 1" in [line.strip() for line in result.stdout.splitlines()]


def test_unknown_log_level_falls_back_to_settings(monkeypatch, runner: CliRunner, tmp_path) -> None:
    levels: list = []
    monkeypatch.setattr("cli.app.configure_logging", lambda level=None: levels.append(level))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = _write(tmp_path, "pack.json", VALID_PACK)

    result = runner.invoke(app, ["--log-level", "loud", "resolve", str(path)])

    assert result.exit_code == 0
    assert levels == ["INFO"]
