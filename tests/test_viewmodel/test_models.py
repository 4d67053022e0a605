"""Tests for src/viewmodel/models.py — accessors and public representation."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from src.viewmodel import (
    EventViewModel,
    EventViewModelDetail,
    EventViewModelDetails,
    NotificationViewModel,
    decode_view_model,
)

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"

NOW = datetime(2022, 4, 13, 19, 50, 5, tzinfo=UTC)


# ── Helpers ─────────────────────────────────────────────────────


def _load(name: str) -> NotificationViewModel:
    return decode_view_model((FIXTURES / f"{name}.json").read_text())


def _detail(name: str, value: Any = None, label: str = "", tag: str = "") -> EventViewModelDetail:
    return EventViewModelDetail(Name=name, Label=label, Value=value, Tag=tag)


def _details(*items: EventViewModelDetail) -> EventViewModelDetails:
    return EventViewModelDetails(list(items))


def _event(**kw: Any) -> EventViewModel:
    return EventViewModel(**kw)


def _notification(*events: EventViewModel, **kw: Any) -> NotificationViewModel:
    return NotificationViewModel(Now=NOW, Events=list(events), **kw)


# ── EventViewModelDetail ────────────────────────────────────────


class TestDetail:
    def test_label_or_name(self) -> None:
        assert _detail("bits", label="Bits").label_or_name() == "Bits"
        assert _detail("bits").label_or_name() == "bits"

    def test_is_list(self) -> None:
        assert _detail("a", [1, 2]).is_list()
        assert _detail("a", {"k": 1}).is_list()
        assert not _detail("a", "text").is_list()
        assert not _detail("a", None).is_list()

    def test_get_values(self) -> None:
        assert _detail("a", [1, 2]).get_values() == [1, 2]
        assert _detail("a", {"x": 1, "y": 2}).get_values() == [1, 2]
        assert _detail("a", "one").get_values() == ["one"]

    def test_public_dict_hides_tag(self) -> None:
        detail = _detail("IP_dst", "1.2.3.4", label="Dest", tag="dimension")
        assert detail.public_dict() == {"Name": "IP_dst", "Label": "Dest", "Value": "1.2.3.4"}

    def test_public_dict_omits_empty_label(self) -> None:
        assert _detail("x", 1).public_dict() == {"Name": "x", "Value": 1}


# ── EventViewModelDetails ───────────────────────────────────────


class TestDetails:
    @pytest.fixture
    def details(self) -> EventViewModelDetails:
        return _details(
            _detail("AlarmID", 42, label="ID"),
            _detail("Severity", "major", tag="general"),
            _detail("IP_dst", "1.2.3.4", label="Dest IP", tag="dimension"),
            _detail("URL", "https://x", label="Open", tag="url"),
            _detail("Other", "https://y", tag="url"),
        )

    def test_iteration_and_len(self, details: EventViewModelDetails) -> None:
        assert len(details) == 5
        assert [d.name for d in details] == ["AlarmID", "Severity", "IP_dst", "URL", "Other"]
        assert details[2].name == "IP_dst"

    def test_with_tag(self, details: EventViewModelDetails) -> None:
        assert [d.name for d in details.with_tag("url")] == ["URL", "Other"]
        assert len(details.with_tag("missing")) == 0

    def test_values_with_tag(self, details: EventViewModelDetails) -> None:
        assert details.values_with_tag("url") == ["https://x", "https://y"]

    def test_general(self, details: EventViewModelDetails) -> None:
        assert [d.name for d in details.general()] == ["AlarmID", "Severity"]

    def test_with_names_keeps_detail_order(self, details: EventViewModelDetails) -> None:
        assert [d.name for d in details.with_names("URL", "AlarmID")] == ["AlarmID", "URL"]
        assert len(details.with_names()) == 0

    def test_names_values_map(self, details: EventViewModelDetails) -> None:
        assert details.names()[0] == "AlarmID"
        assert details.values()[0] == 42
        assert details.to_map()["IP_dst"] == "1.2.3.4"

    def test_has(self, details: EventViewModelDetails) -> None:
        assert details.has("Severity")
        assert not details.has("severity")
        assert details.has_tag("dimension")
        assert not details.has_tag("metric")

    def test_get(self, details: EventViewModelDetails) -> None:
        assert details.get("IP_dst").label == "Dest IP"

    def test_get_missing_returns_placeholder(self, details: EventViewModelDetails) -> None:
        placeholder = details.get("Nope")
        assert placeholder.name == "Nope"
        assert placeholder.label == "Nope"
        assert placeholder.value is None

    def test_get_value(self, details: EventViewModelDetails) -> None:
        assert details.get_value("AlarmID") == 42
        assert details.get_value("Nope") is None

    def test_get_string_value(self, details: EventViewModelDetails) -> None:
        assert details.get_string_value("Severity") == "major"
        assert details.get_string_value("AlarmID") == ""
        assert details.get_string_value("Nope") == ""

    def test_selections_do_not_mutate(self, details: EventViewModelDetails) -> None:
        details.with_tag("url")
        details.prettified_metrics()
        assert len(details) == 5


class TestPrettifiedMetrics:
    def test_digest_metrics(self) -> None:
        details = _load("digest").raw_events[1].details
        metrics = {d.name: d for d in details.prettified_metrics()}

        assert list(metrics) == ["bits", "packets", "unique_src_ip"]
        assert metrics["bits"].value == "57.18"
        assert metrics["bits"].label == "Kbits/s"
        assert metrics["packets"].value == "11.20"
        assert metrics["packets"].label == "packets/s"
        assert metrics["unique_src_ip"].value == "1"
        assert metrics["unique_src_ip"].label == ""

    def test_tag_preserved(self) -> None:
        result = _details(_detail("bits_in", 2048, tag="metric")).prettified_metrics()
        assert result[0].tag == "metric"
        assert result[0].value == "2"
        assert result[0].label == "Kbits/s"

    def test_non_metrics_dropped(self) -> None:
        result = _details(_detail("a", 1), _detail("b", 2, tag="dimension")).prettified_metrics()
        assert len(result) == 0

    def test_non_numeric_passes_through(self) -> None:
        original = _detail("level", "high", label="Level", tag="metric")
        result = _details(original).prettified_metrics()
        assert result[0] is original

    def test_sub_unit_rate_has_no_prefix(self) -> None:
        result = _details(_detail("bits", 0, tag="metric")).prettified_metrics()
        assert result[0].value == "0"
        assert result[0].label == "bits/s"

    def test_non_rate_metric_keeps_label(self) -> None:
        result = _details(_detail("level", 300.0, label="Level", tag="metric")).prettified_metrics()
        assert result[0].value == "300"
        assert result[0].label == "Level"


# ── EventViewModel ──────────────────────────────────────────────


class TestEvent:
    @pytest.mark.parametrize(
        ("event_type", "method"),
        [
            ("alarm", "is_alarm"),
            ("insight", "is_insight"),
            ("custom-insight", "is_custom_insight"),
            ("mitigation", "is_mitigation"),
            ("synthetic", "is_synthetic"),
            ("ai-investigation", "is_ai_investigation"),
        ],
    )
    def test_type_predicates(self, event_type: str, method: str) -> None:
        assert getattr(_event(Type=event_type), method)()
        assert not getattr(_event(Type="generic"), method)()

    def test_custom_insight_is_insight(self) -> None:
        assert _event(Type="custom-insight").is_insight()

    def test_is_test(self) -> None:
        assert _event(IsTestEvent=True).is_test()
        assert not _event().is_test()

    def test_top_level_application(self) -> None:
        assert _event(Application="kentik.nms").top_level_application() == "nms"
        assert _event(Application="ddos").top_level_application() == "ddos"
        assert _event(Application="").top_level_application() == ""
        assert _event(Application="kentik.").top_level_application() == "kentik."

    @pytest.mark.parametrize(
        ("application", "method"),
        [
            ("a.nms", "is_nms_app"),
            ("a.kmetrics", "is_kmetrics_app"),
            ("a.synthetics", "is_synthetics_app"),
            ("a.ktrac", "is_ktrac_app"),
            ("a.core", "is_traffic_app"),
            ("a.ddos", "is_protect_app"),
            ("a.cloud", "is_cloud_app"),
        ],
    )
    def test_application_predicates(self, application: str, method: str) -> None:
        assert getattr(_event(Application=application), method)()
        assert not getattr(_event(Application="a.other"), method)()

    def test_base_portal_url(self) -> None:
        assert _event(BaseDomain="portal.example.com").base_portal_url() == "portal.example.com"

    def test_public_dict(self) -> None:
        event = _load("alarm").raw_events[0]
        assert event.public_dict() == {
            "Type": "alarm",
            "Description": "Alarm for UDP Fragments Attack Active",
            "IsActive": True,
            "StartTime": "2021-11-17 10:29:32 UTC",
            "EndTime": "ongoing",
            "CurrentState": "alarm",
            "PreviousState": "new",
        }

    def test_public_dict_omits_empty_description(self) -> None:
        assert "Description" not in _event(Type="alarm").public_dict()


# ── NotificationViewModel ───────────────────────────────────────


class TestNotificationUrls:
    def test_urls(self) -> None:
        model = _load("alarm")
        assert model.base_portal_url() == "https://portal.kentik.com"
        assert model.notifications_settings_url() == "https://portal.kentik.com/v4/settings/notifications"
        assert model.synthetics_dashboard_url() == "https://portal.kentik.com/v4/synthetics/dashboard"


class TestNotificationTime:
    def test_now_formats(self) -> None:
        model = _load("insight")
        assert model.now_date() == "April 13, 2022"
        assert model.now_rfc3339() == "2022-04-13T19:50:05Z"
        assert model.now_datetime() == "2022-04-13 19:50:05 UTC"
        assert model.now_unix() == 1649879405
        assert model.copyrights() == "© 2022 Kentik"

    def test_now_date_has_no_padding(self) -> None:
        model = NotificationViewModel(Now=datetime(2023, 1, 2, tzinfo=UTC))
        assert model.now_date() == "January 2, 2023"


class TestNotificationEvents:
    def test_counts(self) -> None:
        model = _notification(_event(IsActive=True), _event(IsActive=False), _event(IsActive=True))
        assert model.active_count() == 2
        assert model.inactive_count() == 1
        assert model.is_multiple_events()
        assert not model.is_single_event()
        assert model.is_at_least_one_event()

    def test_no_events(self) -> None:
        model = _notification()
        assert model.event() is None
        assert model.events() == []
        assert not model.is_single_event()
        assert not model.is_multiple_events()
        assert not model.is_at_least_one_event()

    def test_event_returns_first(self) -> None:
        first = _event(Type="alarm")
        model = _notification(first, _event(Type="insight"))
        assert model.event() is first

    def test_insights_only(self) -> None:
        assert _load("digest").is_insights_only()
        assert not _load("alarm").is_insights_only()

    def test_synthetics_only(self) -> None:
        model = _load("synthetics")
        assert model.is_synthetics_only()
        assert model.is_synth_only()
        assert not _load("insight").is_synthetics_only()

    def test_single_custom_insight_only(self) -> None:
        assert _notification(_event(Type="custom-insight")).is_single_custom_insight_only()
        assert not _notification(_event(Type="insight")).is_single_custom_insight_only()
        assert not _notification(
            _event(Type="custom-insight"), _event(Type="custom-insight")
        ).is_single_custom_insight_only()


class TestHeadlineAndSummary:
    @pytest.mark.parametrize(
        ("fixture", "headline"),
        [
            ("insight", "Kentik Insights Alert"),
            ("digest", "Kentik Insights Digest"),
            ("alarm", "Kentik Alert"),
            ("synthetics", "Kentik Synthetics Alert"),
            ("mitigation", "Kentik Alert"),
        ],
    )
    def test_headline(self, fixture: str, headline: str) -> None:
        assert _load(fixture).headline() == headline

    def test_single_event_summary_is_description(self) -> None:
        assert _load("alarm").summary() == "Alarm for UDP Fragments Attack Active"

    def test_digest_summary(self) -> None:
        assert _load("digest").summary() == "2 changed to unhealthy"

    def test_mixed_summary(self) -> None:
        model = _notification(_event(IsActive=True), _event(IsActive=False), _event(IsActive=False))
        assert model.summary() == "1 changed to unhealthy, 2 changed to healthy"

    def test_empty_summary(self) -> None:
        assert _notification().summary() == ""


class TestNotificationPublicDict:
    def test_only_company_id_is_public(self) -> None:
        assert _load("alarm").public_dict() == {"CompanyID": 1002}
