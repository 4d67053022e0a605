"""Tests for scripts/render_template.py."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from scripts.render_template import format_error, main, parse_args
from src.core.config import reset_settings

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


@pytest.fixture(autouse=True)
def _clean_state() -> Iterator[None]:
    reset_settings()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def template_file(tmp_path: Path) -> Path:
    path = tmp_path / "subject.tmpl"
    path.write_text("{{ .CompanyName }}: {{ .Headline }}")
    return path


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args(["t.tmpl", "d.json"])
        assert args.template == "t.tmpl"
        assert args.data == "d.json"
        assert args.name == ""
        assert args.timeout is None
        assert args.json is False

    def test_options(self) -> None:
        args = parse_args(["t.tmpl", "d.json", "--name", "body", "--timeout", "2.5", "--json"])
        assert args.name == "body"
        assert args.timeout == 2.5
        assert args.json is True


class TestFormatError:
    def test_with_position(self) -> None:
        assert format_error({"error": "boom", "line": 3, "column": 7}) == "error at 3:7: boom"

    def test_line_only(self) -> None:
        assert format_error({"error": "boom", "line": 2}) == "error at 2: boom"

    def test_no_position(self) -> None:
        assert format_error({"error": "boom"}) == "error: boom"


class TestMain:
    def test_renders(self, template_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(template_file), str(FIXTURES / "alarm.json"), "--log-level", "ERROR"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out == "ACME Incorporated: Kentik Alert"

    def test_json_output(self, template_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main([str(template_file), str(FIXTURES / "digest.json"), "--json", "--log-level", "ERROR"])
        assert json.loads(capsys.readouterr().out) == {"output": "Kentik Test Company: Kentik Insights Digest"}

    def test_error_exit(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        broken = tmp_path / "broken.tmpl"
        broken.write_text("ok\n{{ .Nope }}")
        with pytest.raises(SystemExit) as exc_info:
            main([str(broken), str(FIXTURES / "alarm.json"), "--name", "body", "--log-level", "ERROR"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith("error at 2:4: template: body:2:4:")
