"""Enumerations and severity lookup tables for the notification view model."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from types import MappingProxyType


class ViewModelImportance(IntEnum):
    """Severity levels for view model events, ordered from none to critical."""

    NONE = 0
    HEALTHY = 1
    NOTICE = 2
    MINOR = 3
    WARNING = 4
    MAJOR = 5
    SEVERE = 6
    CRITICAL = 7


class EventType(StrEnum):
    """Notification event category."""

    ALARM = "alarm"
    INSIGHT = "insight"
    CUSTOM_INSIGHT = "custom-insight"
    SYNTHETIC = "synthetic"
    MITIGATION = "mitigation"
    GENERIC = "generic"
    AI_INVESTIGATION = "ai-investigation"


class DetailTag(StrEnum):
    """Categorization tag attached to event details.

    The set is open: details may carry tags not listed here.
    """

    EMPTY = ""
    GENERAL = "general"
    METRIC = "metric"
    DIMENSION = "dimension"
    URL = "url"
    DEVICE = "device"
    DEVICE_LABELS = "device_labels"
    DEVICE_LABEL = "device_label"


class EventApplication(StrEnum):
    """Application that produced an event (last segment of the dotted name)."""

    UNSPECIFIED = ""
    NMS = "nms"
    KMETRICS = "kmetrics"
    KTRAC = "ktrac"
    SYNTHETICS = "synthetics"
    DDOS = "ddos"
    CORE = "core"
    CLOUD = "cloud"


# ── Severity lookup tables ──────────────────────────────────────

IMPORTANCE_NAMES: MappingProxyType[int, str] = MappingProxyType({
    ViewModelImportance.NONE: "n/a",
    ViewModelImportance.HEALTHY: "healthy",
    ViewModelImportance.NOTICE: "notice",
    ViewModelImportance.MINOR: "minor",
    ViewModelImportance.WARNING: "warning",
    ViewModelImportance.MAJOR: "major",
    ViewModelImportance.SEVERE: "severe",
    ViewModelImportance.CRITICAL: "critical",
})

IMPORTANCE_COLORS: MappingProxyType[int, str] = MappingProxyType({
    ViewModelImportance.NONE: "#999999",
    ViewModelImportance.HEALTHY: "#1E9E1E",
    ViewModelImportance.NOTICE: "#157FF3",
    ViewModelImportance.MINOR: "#F29D49",
    ViewModelImportance.WARNING: "#EE7E0F",
    ViewModelImportance.MAJOR: "#DB3737",
    ViewModelImportance.SEVERE: "#C23030",
    ViewModelImportance.CRITICAL: "#A82A2A",
})

IMPORTANCE_EMOJIS: MappingProxyType[int, str] = MappingProxyType({
    ViewModelImportance.NONE: "",
    ViewModelImportance.HEALTHY: ":warning: :large_green_circle:",
    ViewModelImportance.NOTICE: ":warning: :large_blue_circle:",
    ViewModelImportance.MINOR: ":warning: :large_purple_circle:",
    ViewModelImportance.WARNING: ":warning: :large_brown_circle:",
    ViewModelImportance.MAJOR: ":warning: :large_yellow_circle:",
    ViewModelImportance.SEVERE: ":warning: :large_orange_circle: ",
    ViewModelImportance.CRITICAL: ":warning: :red_circle:",
})
