"""Tests for src/templating/values.py — truthiness and value printing."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from src.templating.values import (
    NO_VALUE,
    format_float,
    format_value,
    sprint,
    sprintf,
    sprintln,
    truth,
    type_name,
)
from src.viewmodel import EventViewModelDetail, EventViewModelDetails, NotificationViewModel


class TestTruth:
    @pytest.mark.parametrize("value", [None, NO_VALUE, False, 0, 0.0, "", [], (), {}])
    def test_falsy(self, value: object) -> None:
        assert not truth(value)

    @pytest.mark.parametrize("value", [True, 1, -1, 0.5, "x", [0], {"k": None}])
    def test_truthy(self, value: object) -> None:
        assert truth(value)

    def test_collections(self) -> None:
        assert not truth(EventViewModelDetails([]))
        assert truth(EventViewModelDetails([EventViewModelDetail(Name="a")]))

    def test_models_are_true(self) -> None:
        assert truth(NotificationViewModel())


class TestTypeName:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "<nil>"),
            (True, "bool"),
            (1, "int"),
            (1.5, "float64"),
            ("s", "string"),
            ([1], "[]interface {}"),
            ({"a": 1}, "map[string]interface {}"),
            (datetime(2022, 1, 1, tzinfo=UTC), "time.Time"),
        ],
    )
    def test_names(self, value: object, expected: str) -> None:
        assert type_name(value) == expected

    def test_model_class_name(self) -> None:
        assert type_name(NotificationViewModel()) == "NotificationViewModel"


class TestFormatFloat:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1.5, "1.5"),
            (-2.5, "-2.5"),
            (100.0, "100"),
            (123456.0, "123456"),
            (1e6, "1e+06"),
            (1234567.0, "1.234567e+06"),
            (0.0001, "0.0001"),
            (0.00001, "1e-05"),
            (58555.9140625, "58555.9140625"),
            (1.5e300, "1.5e+300"),
            (0.0, "0"),
        ],
    )
    def test_shortest_form(self, value: float, expected: str) -> None:
        assert format_float(value) == expected

    def test_special_values(self) -> None:
        assert format_float(float("nan")) == "NaN"
        assert format_float(float("inf")) == "+Inf"
        assert format_float(float("-inf")) == "-Inf"


class TestFormatValue:
    def test_scalars(self) -> None:
        assert format_value(None) == "<nil>"
        assert format_value(NO_VALUE) == "<no value>"
        assert format_value(True) == "true"
        assert format_value(42) == "42"
        assert format_value("text") == "text"

    def test_list(self) -> None:
        assert format_value([1, "a", None, 2.5]) == "[1 a <nil> 2.5]"

    def test_map_sorted(self) -> None:
        assert format_value({"b": 1, "a": [2, 3]}) == "map[a:[2 3] b:1]"

    def test_time(self) -> None:
        assert format_value(datetime(2022, 4, 13, 19, 50, 5, tzinfo=UTC)) == "2022-04-13 19:50:05 +0000 UTC"
        assert (
            format_value(datetime(2022, 4, 13, 19, 50, 5, 500000, tzinfo=UTC))
            == "2022-04-13 19:50:05.5 +0000 UTC"
        )

    def test_model_prints_field_values(self) -> None:
        detail = EventViewModelDetail(Name="bits", Label="Bits", Value=10, Tag="metric")
        assert format_value(detail) == "{bits Bits 10 metric}"

    def test_collection_prints_as_list(self) -> None:
        details = EventViewModelDetails([EventViewModelDetail(Name="a", Value=1)])
        assert format_value(details) == "[{a  1 }]"


class TestSprint:
    def test_spaces_between_non_strings(self) -> None:
        assert sprint("a", 1, 2, "b") == "a1 2b"

    def test_strings_concatenate(self) -> None:
        assert sprint("a", "b") == "ab"

    def test_sprintln(self) -> None:
        assert sprintln(1, "a") == "1 a\n"


class TestSprintf:
    @pytest.mark.parametrize(
        ("fmt", "args", "expected"),
        [
            ("%d items", (3,), "3 items"),
            ("%5.2f", (3.14159,), " 3.14"),
            ("%-5s|", ("ab",), "ab   |"),
            ("%05d", (42,), "00042"),
            ("%+d", (5,), "+5"),
            ("%x", (255,), "ff"),
            ("%X", ("hi",), "6869"),
            ("%q", ('a"b',), '"a\\"b"'),
            ("%t", (True,), "true"),
            ("%c", (65,), "A"),
            ("%.2s", ("hello",), "he"),
            ("%*d", (4, 7), "   7"),
            ("%T", (1.5,), "float64"),
            ("%v", ([1, 2],), "[1 2]"),
            ("%g", (1e6,), "1e+06"),
            ("%e", (1234.5,), "1.234500e+03"),
            ("%f", (2,), "2.000000"),
            ("100%%", (), "100%"),
        ],
    )
    def test_verbs(self, fmt: str, args: tuple[object, ...], expected: str) -> None:
        assert sprintf(fmt, *args) == expected

    def test_missing_argument(self) -> None:
        assert sprintf("%v %v", 1) == "1 %!v(MISSING)"

    def test_wrong_type(self) -> None:
        assert sprintf("%d", "x") == "%!d(string=x)"
        assert sprintf("%s", 5) == "%!s(int=5)"

    def test_extra_arguments(self) -> None:
        assert sprintf("%d", 1, 2) == "1%!(EXTRA int=2)"

    def test_plus_v_names_fields(self) -> None:
        detail = EventViewModelDetail(Name="a", Value=1)
        assert sprintf("%+v", detail) == "{name:a label: value:1 tag:}"
