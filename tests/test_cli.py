"""CLI behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from sigen.cli import _build_parser, _parse_context, main


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate", "pkg:Service"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.target == "pkg:Service"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "pkg:Service", "--verbose"])
    assert args.verbose is True


def test_cli_rejects_namespace_with_no_namespace() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "pkg:Service", "--namespace", "a", "--no-namespace"])


def test_parse_context_uses_literals_when_possible() -> None:
    context = _parse_context(["debug=True", "limit=3", "name=service", "roles=['a', 'b']"])

    assert context == {"debug": True, "limit": 3, "name": "service", "roles": ["a", "b"]}


def test_parse_context_requires_key_value_pairs() -> None:
    with pytest.raises(ValueError, match="KEY=VALUE"):
        _parse_context(["debug"])


def test_generate_prints_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(
        [
            "generate",
            "tests._fixtures.services:Calculator",
            "--namespace",
            "services",
            "--context",
            "allow_multiply=True",
            "--config",
            str(tmp_path),
        ]
    )

    out = capsys.readouterr().out
    assert out.startswith("__name__ = 'services'\n")
    assert "class CalculatorProxy(SimpleProxy):" in out
    assert "def multiply(self, a, b):" in out


def test_generate_without_namespace(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(
        [
            "generate",
            "tests._fixtures.services:Greeter",
            "--no-namespace",
            "--class-name",
            "PublicGreeter",
            "--config",
            str(tmp_path),
        ]
    )

    out = capsys.readouterr().out
    assert out.startswith("from typing import final\n")
    assert "class PublicGreeter(SimpleProxy):" in out


def test_generate_reports_nothing_to_expose(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "tests._fixtures.services:Silent", "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Nothing to expose" in capsys.readouterr().err


def test_generate_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "tests._fixtures.services:Calculator", "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "allow_multiply" in capsys.readouterr().err


def test_generate_rejects_malformed_target(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["generate", "tests._fixtures.services", "--config", str(tmp_path)])

    assert "module:attribute" in capsys.readouterr().err


def test_generate_writes_log_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log_file = tmp_path / "sigen.log"
    main(
        [
            "generate",
            "tests._fixtures.services:Greeter",
            "--verbose",
            "--log-file",
            str(log_file),
            "--config",
            str(tmp_path),
        ]
    )

    assert "class GreeterProxy(SimpleProxy):" in capsys.readouterr().out
    logged = log_file.read_text(encoding="utf-8")
    assert "DEBUG sigen.builder: Generating GreeterProxy" in logged


def test_cli_log_file_defaults_to_none() -> None:
    args = _build_parser().parse_args(["generate", "pkg:Service"])
    assert args.log_file is None


def test_generate_reports_targets_that_need_arguments(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "tests._fixtures.services:RecordingProxy", "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Cannot instantiate 'tests._fixtures.services:RecordingProxy'" in capsys.readouterr().err
