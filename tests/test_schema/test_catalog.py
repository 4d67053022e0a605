"""Tests for src/schema/catalog.py."""

from __future__ import annotations

from src.schema.catalog import (
    ENUM_FIELD_BINDINGS,
    FUNCTION_DESCRIPTORS,
    METHOD_DESCRIPTIONS,
    first_sentence,
    function_signature,
)
from src.templating.functions import REGISTRY


def _documented() -> None:
    """First line here. Second sentence follows.

    Another paragraph.
    """


def _wrapped() -> None:
    """A sentence that is
    wrapped across lines."""


def _undocumented() -> None:
    pass


class TestFirstSentence:
    def test_first_sentence(self) -> None:
        assert first_sentence(_documented) == "First line here."

    def test_joins_wrapped_lines(self) -> None:
        assert first_sentence(_wrapped) == "A sentence that is wrapped across lines."

    def test_missing_docstring(self) -> None:
        assert first_sentence(_undocumented) == ""


class TestSignatures:
    def test_two_params(self) -> None:
        assert function_signature(REGISTRY["joinWith"]) == "joinWith(index int, sep string) string"

    def test_enum_param(self) -> None:
        assert function_signature(REGISTRY["importanceToColor"]) == "importanceToColor(severity ViewModelImportance) string"

    def test_descriptors_cover_registry(self) -> None:
        assert [d[0] for d in FUNCTION_DESCRIPTORS] == list(REGISTRY)
        assert all(d[2] for d in FUNCTION_DESCRIPTORS)


class TestDescriptions:
    def test_method_keys(self) -> None:
        assert METHOD_DESCRIPTIONS["EventViewModelDetails.WithTag"]
        assert "NotificationViewModel.Headline" in METHOD_DESCRIPTIONS

    def test_bindings(self) -> None:
        assert ENUM_FIELD_BINDINGS["Importance"] == "ViewModelImportance"
