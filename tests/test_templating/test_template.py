"""Tests for src/templating/template.py."""

from __future__ import annotations

import pytest

from src.templating import ExecutionError, ParseError, Template


class TestTemplate:
    def test_parses_on_construction(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Template("subject", "{{ if . }}")
        err = exc_info.value
        assert err.name == "subject"
        assert err.line == 1
        assert str(err).startswith("template: subject:1: ")

    def test_keeps_source_and_name(self) -> None:
        template = Template("body", "hi {{ . }}")
        assert template.name == "body"
        assert template.source == "hi {{ . }}"
        assert template.execute("there") == "hi there"

    def test_execution_error_names_template(self) -> None:
        template = Template("body", "{{ .A.B }}")
        with pytest.raises(ExecutionError) as exc_info:
            template.execute({"A": 1})
        assert exc_info.value.name == "body"
        assert 'executing "body"' in str(exc_info.value)
