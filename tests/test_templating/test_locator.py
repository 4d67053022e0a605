"""Tests for src/templating/locator.py."""

from __future__ import annotations

import pytest

from src.templating import ParseError, Template
from src.templating.locator import extract_line_column


class TestExtractLineColumn:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("template: body:7:3: executing \"body\" at <.X>: boom", (7, 3)),
            ("template: subject:4: unexpected EOF", (4, 0)),
            ("template: t:12:1: something", (12, 1)),
            ("no position here", (0, 0)),
            ("", (0, 0)),
        ],
    )
    def test_messages(self, message: str, expected: tuple[int, int]) -> None:
        assert extract_line_column(message) == expected

    def test_parse_error_text(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Template("t", "line one\nline two\n{{ .Invalid")
        assert extract_line_column(str(exc_info.value)) == (3, 0)
