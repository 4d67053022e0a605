"""Tests for src/viewmodel/decode.py — strict decoding and defaults."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from src.viewmodel import DecodeError, NotificationViewModel, decode_view_model

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def _fixture_text(name: str) -> str:
    return (FIXTURES / f"{name}.json").read_text()


class TestValidInput:
    @pytest.mark.parametrize("name", ["alarm", "insight", "synthetics", "mitigation", "digest"])
    def test_fixtures_decode(self, name: str) -> None:
        model = decode_view_model(_fixture_text(name))
        assert isinstance(model, NotificationViewModel)
        assert model.raw_events

    def test_alarm_fields(self) -> None:
        model = decode_view_model(_fixture_text("alarm"))
        assert model.company_id == 1002
        assert model.company_name == "ACME Incorporated"
        assert model.config.base_domain == "portal.kentik.com"
        assert model.config.email_to == ["your@email.address"]
        event = model.raw_events[0]
        assert event.type == "alarm"
        assert event.importance == 5
        assert len(event.details) == 13
        assert event.details[0].value == 197790252

    def test_decoded_value_accepted(self) -> None:
        model = decode_view_model({"CompanyID": 7, "CompanyName": "Acme"})
        assert model.company_id == 7
        assert model.company_name == "Acme"

    def test_bytes_accepted(self) -> None:
        assert decode_view_model(b'{"CompanyID": 3}').company_id == 3

    def test_empty_object(self) -> None:
        model = decode_view_model("{}")
        assert model.company_id == 0
        assert model.raw_events == []
        assert model.config.base_domain == ""

    def test_null_collections(self) -> None:
        model = decode_view_model('{"Events": null, "Config": null}')
        assert model.raw_events == []
        assert model.config.email_to == []

    def test_null_details(self) -> None:
        model = decode_view_model('{"Events": [{"Type": "alarm", "Details": null}]}')
        assert len(model.raw_events[0].details) == 0

    def test_detail_value_shapes(self) -> None:
        data = {
            "Events": [
                {
                    "Details": [
                        {"Name": "s", "Value": "text"},
                        {"Name": "n", "Value": 1.5},
                        {"Name": "b", "Value": True},
                        {"Name": "l", "Value": [1, "two"]},
                        {"Name": "m", "Value": {"k": "v"}},
                        {"Name": "z", "Value": None},
                    ]
                }
            ]
        }
        details = decode_view_model(data).raw_events[0].details
        assert [d.value for d in details] == ["text", 1.5, True, [1, "two"], {"k": "v"}, None]


class TestNow:
    def test_explicit_now(self) -> None:
        model = decode_view_model('{"Now": "2022-04-13T19:50:05Z"}')
        assert model.now == datetime(2022, 4, 13, 19, 50, 5, tzinfo=UTC)

    def test_missing_now_defaults_to_current_time(self) -> None:
        before = datetime.now(UTC)
        model = decode_view_model("{}")
        assert model.now is not None
        assert before - timedelta(seconds=1) <= model.now <= datetime.now(UTC) + timedelta(seconds=1)

    def test_zero_now_defaults_to_current_time(self) -> None:
        model = decode_view_model('{"Now": "0001-01-01T00:00:00Z"}')
        assert model.now is not None
        assert model.now.year >= 2024

    def test_naive_now_is_utc(self) -> None:
        model = decode_view_model('{"Now": "2022-04-13T19:50:05"}')
        assert model.now is not None
        assert model.now.tzinfo is not None
        assert model.now.utcoffset() == timedelta(0)


class TestStrictness:
    def test_invalid_json(self) -> None:
        with pytest.raises(DecodeError):
            decode_view_model("{invalid json}")

    def test_unknown_top_level_key(self) -> None:
        with pytest.raises(DecodeError, match="Bogus"):
            decode_view_model('{"CompanyID": 1, "Bogus": true}')

    def test_unknown_event_key(self) -> None:
        with pytest.raises(DecodeError, match="Severity"):
            decode_view_model('{"Events": [{"Type": "alarm", "Severity": 3}]}')

    def test_unknown_detail_key(self) -> None:
        data = {"Events": [{"Details": [{"Name": "a", "Value": 1, "Color": "red"}]}]}
        with pytest.raises(DecodeError, match="Color"):
            decode_view_model(json.dumps(data))

    def test_unknown_config_key(self) -> None:
        with pytest.raises(DecodeError, match="Domain"):
            decode_view_model('{"Config": {"Domain": "x"}}')

    def test_template_name_is_not_an_input_key(self) -> None:
        # Events are read from "Events"; "RawEvents" is only the template name.
        with pytest.raises(DecodeError):
            decode_view_model('{"RawEvents": []}')

    def test_wrong_type(self) -> None:
        with pytest.raises(DecodeError, match="CompanyID"):
            decode_view_model('{"CompanyID": "not a number"}')

    @pytest.mark.parametrize(
        "data,location",
        [
            ('{"CompanyID": "12"}', "CompanyID"),
            ('{"CompanyID": 1.5}', "CompanyID"),
            ('{"Events": [{"IsActive": "true"}]}', "IsActive"),
            ('{"Events": [{"Importance": "5"}]}', "Importance"),
            ('{"Now": 0}', "Now"),
            ('{"Config": {"EmailTo": [1]}}', "EmailTo"),
        ],
    )
    def test_no_type_coercion(self, data: str, location: str) -> None:
        with pytest.raises(DecodeError, match=location):
            decode_view_model(data)

    def test_not_an_object(self) -> None:
        with pytest.raises(DecodeError):
            decode_view_model("[1, 2, 3]")

    def test_unserializable_value(self) -> None:
        with pytest.raises(DecodeError):
            decode_view_model({"CompanyID": object()})
