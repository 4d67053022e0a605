"""View model entities rendered by notification templates."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import Field, RootModel, field_validator, model_validator

from src.viewmodel.base import TemplateModel, accessor
from src.viewmodel.formatting import (
    format_magnitude,
    format_metric_value,
    format_rfc3339,
    to_float,
)
from src.viewmodel.types import DetailTag, EventApplication, EventType

# Metric names with these prefixes are per-second rates scaled by magnitude.
_RATE_PREFIXES = ("bits", "packets")

_ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)


# ── Event details ───────────────────────────────────────────────


class EventViewModelDetail(TemplateModel):
    """A single named fact about an event."""

    _omit_empty: ClassVar[frozenset[str]] = frozenset({"Label"})

    name: str = Field("", alias="Name", description="Detail field name/key")
    label: str = Field("", alias="Label", description="Human-readable label for the detail")
    value: Any = Field(None, alias="Value", description="Detail value (can be any type)")
    tag: str = Field(
        "",
        alias="Tag",
        exclude=True,
        description="Categorization tag (metric, dimension, url, device, etc.)",
    )

    @accessor("LabelOrName")
    def label_or_name(self) -> str:
        """Returns Label if set, otherwise returns Name."""
        return self.label or self.name

    @accessor("IsList")
    def is_list(self) -> bool:
        """Reports whether the detail value is a list-like type."""
        return isinstance(self.value, (list, tuple, dict))

    @accessor("GetValues")
    def get_values(self) -> list[Any]:
        """Returns the detail value(s) as a list."""
        if isinstance(self.value, dict):
            return list(self.value.values())
        if self.is_list():
            return list(self.value)
        return [self.value]


class EventViewModelDetails(RootModel[list[EventViewModelDetail]]):
    """Ordered collection of event details with filtering helpers."""

    root: list[EventViewModelDetail] = Field(default_factory=list)

    def __iter__(self) -> Iterator[EventViewModelDetail]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> EventViewModelDetail:
        return self.root[index]

    def _select(self, details: list[EventViewModelDetail]) -> EventViewModelDetails:
        return EventViewModelDetails(details)

    @accessor("WithTag")
    def with_tag(self, tag: str) -> EventViewModelDetails:
        """Filters details by the specified tag."""
        return self._select([d for d in self.root if d.tag == tag])

    @accessor("ValuesWithTag")
    def values_with_tag(self, tag: str) -> list[Any]:
        """Returns all detail values with the specified tag."""
        return [d.value for d in self.root if d.tag == tag]

    @accessor("General")
    def general(self) -> EventViewModelDetails:
        """Returns details with an empty or general tag."""
        return self._select([d for d in self.root if d.tag in (DetailTag.EMPTY, DetailTag.GENERAL)])

    @accessor("WithNames")
    def with_names(self, *names: str) -> EventViewModelDetails:
        """Filters details by the given names."""
        return self._select([d for d in self.root for name in names if d.name == name])

    @accessor("Names")
    def names(self) -> list[str]:
        """Returns all detail names."""
        return [d.name for d in self.root]

    @accessor("Values")
    def values(self) -> list[Any]:
        """Returns all detail values."""
        return [d.value for d in self.root]

    @accessor("ToMap")
    def to_map(self) -> dict[str, Any]:
        """Converts details to a name-to-value map."""
        return {d.name: d.value for d in self.root}

    @accessor("Has")
    def has(self, name: str) -> bool:
        """Checks if a detail with the given name exists."""
        return any(d.name == name for d in self.root)

    @accessor("HasTag")
    def has_tag(self, tag: str) -> bool:
        """Checks if any detail has the specified tag."""
        return any(d.tag == tag for d in self.root)

    @accessor("Get")
    def get(self, name: str) -> EventViewModelDetail:
        """Retrieves a detail by name.

        A missing name yields a placeholder detail whose value is nil, so
        chained lookups like ``(.Details.Get "x").Value`` never fail.
        """
        for detail in self.root:
            if detail.name == name:
                return detail
        return EventViewModelDetail(Name=name, Label=name)

    @accessor("GetValue")
    def get_value(self, name: str) -> Any:
        """Retrieves a value by name."""
        return self.get(name).value

    @accessor("GetStringValue")
    def get_string_value(self, name: str) -> str:
        """Retrieves a string value by name."""
        value = self.get(name).value
        return value if isinstance(value, str) else ""

    @accessor("PrettifiedMetrics")
    def prettified_metrics(self) -> EventViewModelDetails:
        """Returns metric details with formatted values."""
        result: list[EventViewModelDetail] = []
        for detail in self.root:
            if detail.tag != DetailTag.METRIC:
                continue

            number = to_float(detail.value)
            if number is None:
                result.append(detail)
                continue

            label = detail.label
            for prefix in _RATE_PREFIXES:
                if detail.name.startswith(prefix):
                    number, magnitude = format_magnitude(number)
                    label = f"{magnitude}{prefix}/s"
                    break

            result.append(
                EventViewModelDetail(
                    Name=detail.name,
                    Label=label,
                    Tag=detail.tag,
                    Value=format_metric_value(number),
                )
            )
        return self._select(result)


# ── Events ──────────────────────────────────────────────────────


class EventViewModel(TemplateModel):
    """Core event data for templates."""

    _omit_empty: ClassVar[frozenset[str]] = frozenset({"Description"})

    type: str = Field(
        "",
        alias="Type",
        description="Event type (alarm, insight, synthetic, mitigation, generic)",
    )
    description: str = Field("", alias="Description", description="Human-readable event description")
    is_active: bool = Field(False, alias="IsActive", description="Whether the event is currently active")
    start_time: str = Field("", alias="StartTime", description="Formatted start time string")
    end_time: str = Field("", alias="EndTime", description="Formatted end time string")
    current_state: str = Field("", alias="CurrentState", description="Current state of the event")
    previous_state: str = Field("", alias="PreviousState", description="Previous state of the event")
    start_timestamp: int = Field(
        0, alias="StartTimestamp", exclude=True, description="Unix timestamp of event start"
    )
    end_timestamp: int = Field(
        0, alias="EndTimestamp", exclude=True, description="Unix timestamp of event end"
    )
    importance: int = Field(0, alias="Importance", exclude=True, description="Severity level (0-7)")
    group_name: str = Field("", alias="GroupName", exclude=True, description="Name of the event group")
    details: EventViewModelDetails = Field(
        default_factory=EventViewModelDetails,
        alias="Details",
        exclude=True,
        description="List of event detail key-value pairs",
    )
    is_test_event: bool = Field(
        False, alias="IsTestEvent", exclude=True, description="Whether the event is a test event"
    )
    base_domain: str = Field(
        "",
        alias="BaseDomain",
        exclude=True,
        description="Portal base domain (e.g., portal.kentik.com)",
    )
    application: str = Field(
        "", alias="Application", exclude=True, description="Application that triggered the event"
    )

    @field_validator("details", mode="before")
    @classmethod
    def _null_details(cls, value: Any) -> Any:
        return EventViewModelDetails() if value is None else value

    @accessor("IsAlarm")
    def is_alarm(self) -> bool:
        """Returns true if event type is alarm."""
        return self.type == EventType.ALARM

    @accessor("IsInsight")
    def is_insight(self) -> bool:
        """Returns true if event type is insight or custom-insight."""
        return self.type in (EventType.INSIGHT, EventType.CUSTOM_INSIGHT)

    @accessor("IsCustomInsight")
    def is_custom_insight(self) -> bool:
        """Returns true if event type is custom-insight."""
        return self.type == EventType.CUSTOM_INSIGHT

    @accessor("IsMitigation")
    def is_mitigation(self) -> bool:
        """Returns true if event type is mitigation."""
        return self.type == EventType.MITIGATION

    @accessor("IsSynthetic")
    def is_synthetic(self) -> bool:
        """Returns true if event type is synthetic."""
        return self.type == EventType.SYNTHETIC

    @accessor("IsAIInvestigation")
    def is_ai_investigation(self) -> bool:
        """Returns true if event type is ai-investigation."""
        return self.type == EventType.AI_INVESTIGATION

    @accessor("IsTest")
    def is_test(self) -> bool:
        """Reports whether the event is a test event."""
        return self.is_test_event

    @accessor("TopLevelApplication")
    def top_level_application(self) -> str:
        """Returns the last application segment."""
        last = self.application.split(".")[-1]
        return last or self.application

    @accessor("IsNMSApp")
    def is_nms_app(self) -> bool:
        """Reports whether the event application is NMS."""
        return self.top_level_application() == EventApplication.NMS

    @accessor("IsKmetricsApp")
    def is_kmetrics_app(self) -> bool:
        """Reports whether the event application is Kmetrics."""
        return self.top_level_application() == EventApplication.KMETRICS

    @accessor("IsSyntheticsApp")
    def is_synthetics_app(self) -> bool:
        """Reports whether the event application is Synthetics."""
        return self.top_level_application() == EventApplication.SYNTHETICS

    @accessor("IsKtracApp")
    def is_ktrac_app(self) -> bool:
        """Reports whether the event application is Ktrac."""
        return self.top_level_application() == EventApplication.KTRAC

    @accessor("IsTrafficApp")
    def is_traffic_app(self) -> bool:
        """Reports whether the event application is Core."""
        return self.top_level_application() == EventApplication.CORE

    @accessor("IsProtectApp")
    def is_protect_app(self) -> bool:
        """Reports whether the event application is DDoS."""
        return self.top_level_application() == EventApplication.DDOS

    @accessor("IsCloudApp")
    def is_cloud_app(self) -> bool:
        """Reports whether the event application is Cloud."""
        return self.top_level_application() == EventApplication.CLOUD

    @accessor("BasePortalURL")
    def base_portal_url(self) -> str:
        """Returns the portal base domain for the event."""
        return self.base_domain


# ── Notification ────────────────────────────────────────────────


class NotificationViewConfig(TemplateModel):
    """Configuration used to build portal URLs."""

    base_domain: str = Field(
        "", alias="BaseDomain", description="Portal base domain (e.g., portal.kentik.com)"
    )
    email_to: list[str] = Field(
        default_factory=list, alias="EmailTo", description="List of email recipients"
    )

    @field_validator("email_to", mode="before")
    @classmethod
    def _null_recipients(cls, value: Any) -> Any:
        return [] if value is None else value


class NotificationViewModel(TemplateModel):
    """Root model for template rendering."""

    company_id: int = Field(0, alias="CompanyID", description="Unique identifier for the company")
    company_name: str = Field("", alias="CompanyName", exclude=True, description="Name of the company")
    now: datetime | None = Field(
        None,
        alias="Now",
        exclude=True,
        description="Current timestamp when notification is generated",
    )
    raw_events: list[EventViewModel] = Field(
        default_factory=list,
        validation_alias="Events",
        serialization_alias="RawEvents",
        exclude=True,
        description="List of all events in this notification",
    )
    config: NotificationViewConfig = Field(
        default_factory=NotificationViewConfig,
        alias="Config",
        exclude=True,
        description="Notification configuration settings",
    )

    @field_validator("raw_events", mode="before")
    @classmethod
    def _null_events(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("config", mode="before")
    @classmethod
    def _null_config(cls, value: Any) -> Any:
        return NotificationViewConfig() if value is None else value

    @model_validator(mode="after")
    def _resolve_now(self) -> NotificationViewModel:
        if self.now is not None and self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=UTC)
        if self.now is None or self.now == _ZERO_TIME:
            self.now = datetime.now(UTC)
        return self

    @property
    def _now(self) -> datetime:
        return self.now or datetime.now(UTC)

    # ── Portal URLs ──

    @accessor("BasePortalURL")
    def base_portal_url(self) -> str:
        """Returns the portal base URL (without path)."""
        return f"https://{self.config.base_domain}"

    @accessor("NotificationsSettingsURL")
    def notifications_settings_url(self) -> str:
        """Returns the notification channels URL."""
        return f"https://{self.config.base_domain}/v4/settings/notifications"

    @accessor("SyntheticsDashboardURL")
    def synthetics_dashboard_url(self) -> str:
        """Returns the synthetics dashboard URL."""
        return f"https://{self.config.base_domain}/v4/synthetics/dashboard"

    # ── Time ──

    @accessor("NowDate")
    def now_date(self) -> str:
        """Returns the current date formatted as 'January 2, 2006'."""
        now = self._now
        return f"{now:%B} {now.day}, {now.year}"

    @accessor("NowRFC3339")
    def now_rfc3339(self) -> str:
        """Returns the current time in RFC3339 format, example: 2006-01-02T15:04:05Z."""
        return format_rfc3339(self._now)

    @accessor("NowDatetime")
    def now_datetime(self) -> str:
        """Returns the current time as '2006-01-02 15:04:05 UTC'."""
        return f"{self._now:%Y-%m-%d %H:%M:%S} UTC"

    @accessor("NowUnix")
    def now_unix(self) -> int:
        """Returns the current time as Unix timestamp."""
        return int(self._now.timestamp())

    @accessor("Copyrights")
    def copyrights(self) -> str:
        """Returns the copyright string with current year."""
        return f"© {self._now.year} Kentik"

    # ── Event counts and classification ──

    @accessor("IsSingleEvent")
    def is_single_event(self) -> bool:
        """Returns true if notification message is triggered with a single event."""
        return len(self.raw_events) == 1

    @accessor("IsMultipleEvents")
    def is_multiple_events(self) -> bool:
        """Returns true if notification message is triggered with more than one event."""
        return len(self.raw_events) > 1

    @accessor("IsAtLeastOneEvent")
    def is_at_least_one_event(self) -> bool:
        """Returns true if at least one event exists."""
        return len(self.raw_events) > 0

    @accessor("Event")
    def event(self) -> EventViewModel | None:
        """Returns the first event or nil if empty."""
        return self.raw_events[0] if self.raw_events else None

    @accessor("Events")
    def events(self) -> list[EventViewModel]:
        """Returns all events as a list."""
        return self.raw_events

    @accessor("ActiveCount")
    def active_count(self) -> int:
        """Returns the count of currently active events."""
        return sum(1 for event in self.raw_events if event.is_active)

    @accessor("InactiveCount")
    def inactive_count(self) -> int:
        """Returns the count of inactive events."""
        return sum(1 for event in self.raw_events if not event.is_active)

    @accessor("IsInsightsOnly")
    def is_insights_only(self) -> bool:
        """Returns true if all events are from Insights."""
        return all(event.is_insight() for event in self.raw_events)

    @accessor("IsSyntheticsOnly")
    def is_synthetics_only(self) -> bool:
        """Returns true if all events are from Synthetics."""
        return all(event.is_synthetic() for event in self.raw_events)

    @accessor("IsSynthOnly")
    def is_synth_only(self) -> bool:
        """Alias for IsSyntheticsOnly."""
        return self.is_synthetics_only()

    @accessor("IsSingleCustomInsightOnly")
    def is_single_custom_insight_only(self) -> bool:
        """Returns true if single custom insight event."""
        return len(self.raw_events) == 1 and self.raw_events[0].is_custom_insight()

    # ── Generated text ──

    @accessor("Headline")
    def headline(self) -> str:
        """Returns the generated headline text."""
        segments = ["Kentik"]
        if self.is_insights_only():
            segments.append("Insights")
        elif self.is_synthetics_only():
            segments.append("Synthetics")
        segments.append("Digest" if self.is_multiple_events() else "Alert")
        return " ".join(segments)

    @accessor("Summary")
    def summary(self) -> str:
        """Returns the generated summary text."""
        if self.is_single_event():
            return self.raw_events[0].description
        segments: list[str] = []
        if active := self.active_count():
            segments.append(f"{active} changed to unhealthy")
        if inactive := self.inactive_count():
            segments.append(f"{inactive} changed to healthy")
        return ", ".join(segments)
