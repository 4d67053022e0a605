"""Tests for src/core/logging.py — renderer selection and output stream."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from src.core.config import reset_settings
from src.core.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    reset_settings()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    reset_settings()


class TestSetupLogging:
    def test_json_to_stream(self) -> None:
        stream = io.StringIO()
        setup_logging(level="INFO", fmt="json", stream=stream)
        structlog.get_logger("tests.logging").info("template_rendered", name="subject", output_len=3)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "template_rendered"
        assert record["name"] == "subject"
        assert record["output_len"] == 3
        assert record["level"] == "info"
        assert record["logger"] == "tests.logging"
        assert "timestamp" in record

    def test_level_filters(self) -> None:
        stream = io.StringIO()
        setup_logging(level="WARNING", fmt="json", stream=stream)
        structlog.get_logger("tests.logging").info("quiet")
        assert stream.getvalue() == ""

    def test_console_renderer(self) -> None:
        stream = io.StringIO()
        setup_logging(level="DEBUG", fmt="console", stream=stream)
        structlog.get_logger("tests.logging").debug("schema_built", fields=3)
        out = stream.getvalue()
        assert "schema_built" in out
        with pytest.raises(json.JSONDecodeError):
            json.loads(out)

    def test_single_handler(self) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())
        assert len(logging.getLogger().handlers) == 1
