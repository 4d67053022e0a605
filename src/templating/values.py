"""Runtime value helpers: truthiness, type names and text printing.

Printing uses the notation existing notification templates expect:
``<nil>`` for nil, ``[a b]`` for lists, ``map[k:v]`` for
mappings and ``{v1 v2}`` for view model objects.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, RootModel


class _NoValue:
    """Result of looking up a key that a mapping does not contain."""

    _instance: _NoValue | None = None

    def __new__(cls) -> _NoValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<no value>"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


# ── Classification ──────────────────────────────────────────────


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_sequence(value: Any) -> Sequence[Any] | None:
    """Return *value* as an indexable sequence, or None when it is not one."""
    if isinstance(value, RootModel):
        value = value.root
    if isinstance(value, (list, tuple)):
        return value
    return None


def truth(value: Any) -> bool:
    """Template truthiness: false, zero, nil and empty values are false."""
    if value is None or value is NO_VALUE:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, RootModel):
        return bool(value.root)
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) > 0
    return True


def type_name(value: Any) -> str:
    """Short type name used in diagnostics."""
    if value is None or value is NO_VALUE:
        return "<nil>"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "time.Time"
    if isinstance(value, (list, tuple)):
        return "[]interface {}"
    if isinstance(value, Mapping):
        return "map[string]interface {}"
    return type(value).__name__


# ── Printing ────────────────────────────────────────────────────


def format_float(value: float) -> str:
    """Shortest representation, exponent form outside ``1e-4 <= |v| < 1e6``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    point = len(digits) + exponent
    prefix = "-" if sign else ""

    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def format_time(moment: datetime) -> str:
    """``2006-01-02 15:04:05 +0000 UTC`` with fractional seconds when present."""
    text = f"{moment:%Y-%m-%d %H:%M:%S}"
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if offset is None or not offset:
        return f"{text} +0000 UTC"
    zone = f"{moment:%z}"
    return f"{text} {zone} {zone}"


def format_value(value: Any, plus: bool = False) -> str:
    """Render *value* the way an action prints it."""
    if value is NO_VALUE:
        return "<no value>"
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, datetime):
        return format_time(value)
    if isinstance(value, RootModel):
        return format_value(value.root, plus)
    if isinstance(value, BaseModel):
        parts = []
        for attr in type(value).model_fields:
            text = format_value(getattr(value, attr), plus)
            parts.append(f"{attr}:{text}" if plus else text)
        return "{" + " ".join(parts) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(format_value(item, plus) for item in value) + "]"
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{format_value(k, plus)}:{format_value(v, plus)}" for k, v in items) + "]"
    return str(value)


def sprint(*args: Any) -> str:
    """Concatenate operands, adding spaces between non-string neighbours."""
    out: list[str] = []
    for i, arg in enumerate(args):
        if i > 0 and not isinstance(arg, str) and not isinstance(args[i - 1], str):
            out.append(" ")
        out.append(format_value(arg))
    return "".join(out)


def sprintln(*args: Any) -> str:
    return " ".join(format_value(arg) for arg in args) + "\n"


# ── printf ──────────────────────────────────────────────────────

_VERB_RE = re.compile(r"%([-+# 0]*)(\*|\d+)?(?:\.(\*|\d*))?(.)", re.DOTALL)


def quote(text: str) -> str:
    """Double-quoted string literal with backslash escapes."""
    out = ['"']
    for ch in text:
        if ch in ('"', "\\"):
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def _bad_verb(verb: str, value: Any) -> str:
    if value is None:
        return f"%!{verb}(<nil>)"
    return f"%!{verb}({type_name(value)}={format_value(value)})"


def _pad(text: str, flags: str, width: int | None) -> str:
    if width is None:
        return text
    align = "<" if "-" in flags else ">"
    return format(text, f"{align}{width}")


def _number_spec(flags: str, width: int | None, precision: int | None, kind: str) -> str:
    spec = ""
    if "-" in flags:
        spec += "<"
    if "+" in flags:
        spec += "+"
    elif " " in flags:
        spec += " "
    if "#" in flags:
        spec += "#"
    if "0" in flags and "-" not in flags:
        spec += "0"
    if width is not None:
        spec += str(width)
    if precision is not None:
        spec += f".{precision}"
    return spec + kind


def _format_verb(verb: str, flags: str, width: int | None, precision: int | None, value: Any) -> str:
    if verb == "v":
        return _pad(format_value(value, plus="+" in flags), flags, width)
    if verb == "T":
        return _pad(type_name(value), flags, width)
    if verb == "s":
        if value is None or value is NO_VALUE or isinstance(value, bool) or is_number(value):
            return _bad_verb(verb, value)
        text = format_value(value)
        if precision is not None:
            text = text[:precision]
        return _pad(text, flags, width)
    if verb == "q":
        if isinstance(value, str):
            return _pad(quote(value), flags, width)
        if is_int(value):
            return _pad(f"'{chr(value)}'", flags, width)
        return _bad_verb(verb, value)
    if verb == "t":
        if isinstance(value, bool):
            return _pad(format_value(value), flags, width)
        return _bad_verb(verb, value)
    if verb == "c":
        if is_int(value):
            return _pad(chr(value), flags, width)
        return _bad_verb(verb, value)
    if verb in "dboxX":
        if is_int(value):
            kind = "d" if verb == "d" else verb
            return format(int(value), _number_spec(flags, width, None, kind))
        if verb in "xX" and isinstance(value, str):
            encoded = value.encode().hex()
            return _pad(encoded.upper() if verb == "X" else encoded, flags, width)
        return _bad_verb(verb, value)
    if verb in "eEfFgG":
        if not is_number(value):
            return _bad_verb(verb, value)
        number = float(value)
        if verb in "gG" and precision is None:
            text = format_float(number)
            if "+" in flags and number >= 0:
                text = "+" + text
            text = text.upper() if verb == "G" else text
            return _pad(text, flags, width)
        return format(number, _number_spec(flags, width, precision, verb))
    return _bad_verb(verb, value)


def sprintf(fmt: str, *args: Any) -> str:
    """Format *args* according to a ``%``-verb format string."""
    out: list[str] = []
    arg_index = 0
    pos = 0
    for match in _VERB_RE.finditer(fmt):
        out.append(fmt[pos:match.start()])
        pos = match.end()
        flags, width_text, precision_text, verb = match.groups()
        if verb == "%":
            out.append("%")
            continue

        width: int | None = None
        precision: int | None = None
        if width_text == "*":
            if arg_index < len(args) and is_int(args[arg_index]):
                width = args[arg_index]
            arg_index += 1
        elif width_text:
            width = int(width_text)
        if precision_text == "*":
            if arg_index < len(args) and is_int(args[arg_index]):
                precision = args[arg_index]
            arg_index += 1
        elif precision_text is not None:
            precision = int(precision_text) if precision_text else 0

        if arg_index >= len(args):
            out.append(f"%!{verb}(MISSING)")
            continue
        out.append(_format_verb(verb, flags, width, precision, args[arg_index]))
        arg_index += 1

    out.append(fmt[pos:])
    if arg_index < len(args):
        extra = ", ".join(
            f"{type_name(arg)}={format_value(arg)}" if arg is not None else "<nil>"
            for arg in args[arg_index:]
        )
        out.append(f"%!(EXTRA {extra})")
    return "".join(out)
