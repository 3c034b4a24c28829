"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from permabundle import cli
from permabundle.cli import _build_parser
from permabundle.deploy import DeployResult


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "bundle", "octo/site"])
    assert args.verbose is True
    assert args.command == "bundle"
    assert args.source == "octo/site"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["deploy", "site.zip", "--verbose"])
    assert args.verbose is True
    assert args.command == "deploy"


def test_cli_accepts_output_and_config() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--config", "conf.yml", "bundle", "page.html", "-o", "out.html"])
    assert args.config == "conf.yml"
    assert args.output == "out.html"


def test_cli_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_bundle_writes_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "page.html"
    source.write_text('<p class="x">\n  hi\n</p>', encoding="utf-8")
    output = tmp_path / "out.html"

    cli.main(["--config", str(tmp_path), "bundle", str(source), "--output", str(output)])

    assert output.read_text(encoding="utf-8") == "<p class='x'> hi\n</p>"
    assert "Wrote" in capsys.readouterr().out


def test_bundle_prints_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>hi</p>", encoding="utf-8")

    cli.main(["--config", str(tmp_path), "bundle", str(source)])

    assert capsys.readouterr().out == "<p>hi</p>\n"


def test_bundle_failure_exits_with_message(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("hello", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path), "bundle", str(source)])

    assert excinfo.value.code == 1
    assert "permabundle bundle failed: Unsupported file type '.txt'" in capsys.readouterr().err


def test_invalid_config_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".permabundle.yml").write_text("- nope\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path), "bundle", "octo/site"])

    assert excinfo.value.code == 1
    assert "mapping" in capsys.readouterr().err


def test_deploy_prints_links(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    submitted: list[str] = []

    def fake_submit(self, html: str) -> DeployResult:
        submitted.append(html)
        return DeployResult(success=True, links=["https://arweave.net/abc"])

    monkeypatch.setattr("permabundle.deploy.DeployClient.submit", fake_submit)
    source = tmp_path / "page.html"
    source.write_text("<p>hi</p>", encoding="utf-8")

    cli.main(["--config", str(tmp_path), "deploy", str(source)])

    assert submitted == ["<p>hi</p>"]
    assert capsys.readouterr().out.splitlines()[-1] == "https://arweave.net/abc"


def test_log_file_option_captures_pipeline_logs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>hi</p>", encoding="utf-8")
    log_file = tmp_path / "run.log"

    cli.main(["--config", str(tmp_path), "--log-file", str(log_file), "bundle", str(source)])

    assert capsys.readouterr().out == "<p>hi</p>\n"
    assert "Bundling uploaded html file page.html" in log_file.read_text(encoding="utf-8")
