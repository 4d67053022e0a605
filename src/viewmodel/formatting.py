"""Number and time formatting helpers shared by the view model and templates."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

_MAGNITUDE_UNIT = 1024
_MAGNITUDE_PREFIXES = "KMGTPE"


def to_float(value: Any) -> float | None:
    """Coerce a detail value to float, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def format_magnitude(value: float) -> tuple[float, str]:
    """Scale *value* by powers of 1024 and return it with its prefix letter.

    Values below one unit (including zero and negatives) are returned
    unchanged with no prefix; anything beyond exa is capped at ``E``.
    """
    if not math.isfinite(value) or value < _MAGNITUDE_UNIT:
        return value, ""
    exp = min(int(math.floor(math.log(value) / math.log(_MAGNITUDE_UNIT))), len(_MAGNITUDE_PREFIXES))
    if exp <= 0:
        return value, ""
    return value / math.pow(_MAGNITUDE_UNIT, exp), _MAGNITUDE_PREFIXES[exp - 1]


def format_metric_value(value: float) -> str:
    """Two decimals, or no decimals when the fractional part is under 0.05."""
    fraction, _ = math.modf(value)
    if fraction < 0.05:
        return f"{value:.0f}"
    return f"{value:.2f}"


def format_rfc3339(moment: datetime) -> str:
    """Format *moment* as RFC3339 without fractional seconds (UTC as ``Z``)."""
    offset = moment.utcoffset()
    if offset is None or not offset:
        return f"{moment:%Y-%m-%dT%H:%M:%S}Z"
    return moment.isoformat(timespec="seconds")
