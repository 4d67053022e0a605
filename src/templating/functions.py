"""Function library callable from templates.

Every function is registered once with a category and optional aliases.
Docstrings double as the descriptions shown to template authors, so the
first sentence of each must stand on its own.
"""

from __future__ import annotations

import inspect
import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, get_type_hints

from pydantic import BaseModel, RootModel

from src.templating.values import NO_VALUE, is_int, sprintf, type_name
from src.viewmodel.formatting import format_rfc3339
from src.viewmodel.types import IMPORTANCE_COLORS, IMPORTANCE_EMOJIS, IMPORTANCE_NAMES, ViewModelImportance

UGLIFY_ERROR = "uglifyErr"
EXPLODE_JSON_KEYS_ERROR = "explodeJSONKeysErr"


class FunctionCategory(StrEnum):
    STRING = "string"
    CONVERSION = "conversion"
    TIME = "time"
    UTILITY = "utility"
    FORMATTING = "formatting"


# ── String ──────────────────────────────────────────────────────

_WORD_RE = re.compile(r"[\w']+")


def to_upper(s: str) -> str:
    """Converts a string to uppercase."""
    return s.upper()


def to_lower(s: str) -> str:
    """Converts a string to lowercase."""
    return s.lower()


def title(s: str) -> str:
    """Converts a string to Title case."""
    return _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), s)


def trim_space(s: str) -> str:
    """Removes leading and trailing whitespace."""
    return s.strip()


def split(s: str, sep: str) -> list[str]:
    """Splits a string by the given separator.

    An empty separator splits after each character.
    """
    if not sep:
        return list(s)
    return s.split(sep)


# ── Conversion ──────────────────────────────────────────────────

_HTML_UNSAFE = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}


def _model_keys(model: BaseModel) -> dict[str, str]:
    return {
        info.serialization_alias or info.alias or attr: attr
        for attr, info in type(model).model_fields.items()
    }


def _ordered(dumped: Any, source: Any) -> Any:
    """Sort plain mapping keys in *dumped*, keeping model fields in declared order."""
    if isinstance(source, RootModel):
        source = source.root
    if isinstance(source, BaseModel) and isinstance(dumped, dict):
        keys = _model_keys(source)
        return {
            key: _ordered(item, getattr(source, keys[key])) if key in keys else item
            for key, item in dumped.items()
        }
    if isinstance(dumped, list):
        if isinstance(source, (list, tuple)) and len(source) == len(dumped):
            return [_ordered(item, src) for item, src in zip(dumped, source)]
        return [_ordered(item, None) for item in dumped]
    if isinstance(dumped, dict):
        return {key: _ordered(dumped[key], None) for key in sorted(dumped)}
    return dumped


def _jsonable(value: Any) -> Any:
    if value is NO_VALUE:
        return None
    if isinstance(value, RootModel):
        return [_jsonable(item) for item in value.root]
    if isinstance(value, BaseModel):
        return _ordered(value.model_dump(mode="json", by_alias=True), value)
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
        text = moment.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): _jsonable(value[k]) for k in sorted(value, key=str)}
    return value


def to_json(v: Any) -> str:
    """Converts any value to a JSON string.

    Values that cannot be represented serialize to ``null``.
    """
    try:
        text = json.dumps(
            _jsonable(v),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError):
        return "null"
    for ch, escaped in _HTML_UNSAFE.items():
        text = text.replace(ch, escaped)
    return text


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def compact_json(s: str) -> str:
    """Compacts a JSON string by removing whitespace."""
    try:
        value = json.loads(s, parse_constant=_reject_constant)
    except ValueError:
        return UGLIFY_ERROR
    return to_json(value)


def explode_json_keys(s: str) -> str:
    """Extracts object key-values without braces.

    The result is the inside of the compacted object, fit to be embedded
    in another object literal.
    """
    compacted = compact_json(s)
    if len(compacted) > 1 and compacted[0] == "{" and compacted[-1] == "}":
        return compacted[1:-1]
    return EXPLODE_JSON_KEYS_ERROR


# ── Time ────────────────────────────────────────────────────────

_ZONE_NAME = r"[A-Z][A-Za-z]{2,4}"
_DATETIME_ZONE_NAME_RE = re.compile(rf"^(\d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}}:\d{{2}}(?:\.\d+)?) {_ZONE_NAME}$")
_RFC3339_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$")
_RFC822_RE = re.compile(rf"^(\d{{2}} [A-Z][a-z]{{2}} \d{{2}} \d{{2}}:\d{{2}}) {_ZONE_NAME}$")
_UNIX_DATE_RE = re.compile(rf"^([A-Z][a-z]{{2}} [A-Z][a-z]{{2}} [ \d]\d \d{{2}}:\d{{2}}:\d{{2}}) {_ZONE_NAME} (\d{{4}})$")


def _strptime_utc(text: str, fmt: str) -> datetime:
    return datetime.strptime(text, fmt).replace(tzinfo=UTC)


def _parse_datetime_zone_name(text: str) -> datetime:
    match = _DATETIME_ZONE_NAME_RE.match(text)
    if not match:
        raise ValueError(text)
    stamp = match.group(1)
    fmt = "%Y-%m-%d %H:%M:%S.%f" if "." in stamp else "%Y-%m-%d %H:%M:%S"
    return _strptime_utc(stamp[:26], fmt)


def _parse_datetime(text: str) -> datetime:
    return _strptime_utc(text, "%Y-%m-%d %H:%M:%S")


def _parse_rfc3339(text: str) -> datetime:
    if not _RFC3339_RE.match(text):
        raise ValueError(text)
    return datetime.fromisoformat(text)


def _parse_rfc822(text: str) -> datetime:
    match = _RFC822_RE.match(text)
    if not match:
        raise ValueError(text)
    return _strptime_utc(match.group(1), "%d %b %y %H:%M")


def _parse_rfc822z(text: str) -> datetime:
    return datetime.strptime(text, "%d %b %y %H:%M %z")


def _parse_ansic(text: str) -> datetime:
    return _strptime_utc(text, "%a %b %d %H:%M:%S %Y")


def _parse_unix_date(text: str) -> datetime:
    match = _UNIX_DATE_RE.match(text)
    if not match:
        raise ValueError(text)
    return _strptime_utc(f"{match.group(1)} {match.group(2)}", "%a %b %d %H:%M:%S %Y")


# Tried in order; named zones other than numeric offsets are read as UTC.
_TIME_PARSERS: tuple[Callable[[str], datetime], ...] = (
    _parse_datetime_zone_name,  # 2006-01-02 15:04:05 MST
    _parse_datetime,  # 2006-01-02 15:04:05
    _parse_rfc3339,  # RFC3339, with or without fractional seconds
    _parse_rfc822,  # 02 Jan 06 15:04 MST
    _parse_rfc822z,  # 02 Jan 06 15:04 -0700
    _parse_ansic,  # Mon Jan _2 15:04:05 2006
    _parse_unix_date,  # Mon Jan _2 15:04:05 MST 2006
)


def parse_time(text: str) -> datetime | None:
    """Parse *text* with the first known layout that accepts it."""
    for parser in _TIME_PARSERS:
        try:
            return parser(text)
        except ValueError:
            continue
    return None


def time_rfc3339(value: Any) -> str:
    """Converts various time formats to RFC3339.

    Accepts a string in one of the known layouts, an integer Unix timestamp
    or a timestamp value. Unparseable strings are returned unchanged.
    """
    if isinstance(value, str):
        moment = parse_time(value)
        if moment is None:
            return value
    elif is_int(value):
        moment = datetime.fromtimestamp(value, tz=UTC)
    elif isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
    else:
        return sprintf("(%t:%+v)", value, value)
    return format_rfc3339(moment)


# ── Utility ─────────────────────────────────────────────────────


def join(index: int) -> str:
    """Returns a comma for index > 0, empty string for index 0.

    Useful for joining list items in templates.
    """
    return "" if index == 0 else ","


def join_with(index: int, sep: str) -> str:
    """Returns the separator for index > 0, empty string for index 0."""
    return "" if index == 0 else sep


# ── Formatting ──────────────────────────────────────────────────


def importance_name(severity: ViewModelImportance) -> str:
    """Returns the lowercase name for an importance level."""
    return IMPORTANCE_NAMES.get(severity, "")


def importance_label(severity: ViewModelImportance) -> str:
    """Returns the title-case label for an importance level."""
    return title(importance_name(severity))


def importance_to_color(severity: ViewModelImportance) -> str:
    """Returns the hex color code for an importance level."""
    return IMPORTANCE_COLORS.get(severity, "")


def importance_to_emoji(severity: ViewModelImportance) -> str:
    """Returns the emoji(s) for an importance level."""
    return IMPORTANCE_EMOJIS.get(severity, "")


# ── Registry ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Param:
    name: str
    annotation: Any


@dataclass(frozen=True)
class FunctionSpec:
    """A registered template function with its call contract."""

    name: str
    func: Callable[..., Any]
    category: FunctionCategory
    aliases: tuple[str, ...] = ()
    params: tuple[Param, ...] = field(init=False)
    returns: Any = field(init=False)

    def __post_init__(self) -> None:
        hints = get_type_hints(self.func)
        params = tuple(
            Param(p.name, hints.get(p.name, Any))
            for p in inspect.signature(self.func).parameters.values()
        )
        object.__setattr__(self, "params", params)
        object.__setattr__(self, "returns", hints.get("return", Any))

    def check_args(self, args: tuple[Any, ...]) -> None:
        """Raise ``TypeError`` when *args* do not fit the declared parameters."""
        if len(args) != len(self.params):
            raise TypeError(f"wrong number of args for {self.name}: want {len(self.params)} got {len(args)}")
        for param, arg in zip(self.params, args):
            if not _accepts(param.annotation, arg):
                raise TypeError(
                    f"wrong type for value; expected {_expected_name(param.annotation)}; got {type_name(arg)}"
                )


def _accepts(annotation: Any, value: Any) -> bool:
    if annotation is Any:
        return True
    if annotation is str:
        return isinstance(value, str)
    if annotation is int or (isinstance(annotation, type) and issubclass(annotation, int)):
        return is_int(value)
    return isinstance(value, annotation)


def _expected_name(annotation: Any) -> str:
    if annotation is str:
        return "string"
    if isinstance(annotation, type) and issubclass(annotation, int):
        return "int"
    return getattr(annotation, "__name__", str(annotation))


_SPECS: tuple[FunctionSpec, ...] = (
    FunctionSpec("toUpper", to_upper, FunctionCategory.STRING),
    FunctionSpec("toLower", to_lower, FunctionCategory.STRING),
    FunctionSpec("title", title, FunctionCategory.STRING),
    FunctionSpec("trimSpace", trim_space, FunctionCategory.STRING),
    FunctionSpec("split", split, FunctionCategory.STRING),
    FunctionSpec("toJSON", to_json, FunctionCategory.CONVERSION, aliases=("j",)),
    FunctionSpec("compactJSON", compact_json, FunctionCategory.CONVERSION, aliases=("uglifyJSON",)),
    FunctionSpec("explodeJSONKeys", explode_json_keys, FunctionCategory.CONVERSION, aliases=("x",)),
    FunctionSpec("timeRfc3339", time_rfc3339, FunctionCategory.TIME),
    FunctionSpec("join", join, FunctionCategory.UTILITY),
    FunctionSpec("joinWith", join_with, FunctionCategory.UTILITY),
    FunctionSpec("importanceName", importance_name, FunctionCategory.FORMATTING),
    FunctionSpec("importanceLabel", importance_label, FunctionCategory.FORMATTING),
    FunctionSpec("importanceToColor", importance_to_color, FunctionCategory.FORMATTING),
    FunctionSpec("importanceToEmoji", importance_to_emoji, FunctionCategory.FORMATTING),
)

# Canonical names in registration order.
REGISTRY: Mapping[str, FunctionSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})

# Every callable name, aliases included.
FUNCTIONS: Mapping[str, FunctionSpec] = MappingProxyType(
    {name: spec for spec in _SPECS for name in (spec.name, *spec.aliases)}
)
