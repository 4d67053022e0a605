"""Functions built into the template language itself.

``and`` and ``or`` evaluate their arguments lazily and are handled by the
executor; everything else here is an ordinary function of its evaluated
arguments. Errors are raised as ``ValueError`` and wrapped by the caller
with the function name.
"""

from __future__ import annotations

import html as html_lib
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import quote_plus

from src.templating.values import (
    NO_VALUE,
    as_sequence,
    is_int,
    is_number,
    sprint,
    sprintf,
    sprintln,
    truth,
    type_name,
)

LAZY_BUILTINS = frozenset({"and", "or"})


def _not(value: Any) -> bool:
    return not truth(value)


def _len(value: Any) -> int:
    if value is None or value is NO_VALUE:
        raise ValueError("len of nil pointer")
    seq = as_sequence(value)
    if seq is not None:
        return len(seq)
    if isinstance(value, (str, Mapping)):
        return len(value)
    raise ValueError(f"len of type {type_name(value)}")


def _index(item: Any, *indices: Any) -> Any:
    if item is None or item is NO_VALUE:
        raise ValueError("index of untyped nil")
    current = item
    for index in indices:
        if current is None or current is NO_VALUE:
            raise ValueError("index of nil pointer")
        if isinstance(current, Mapping):
            if not isinstance(index, str):
                raise ValueError(f"value has type {type_name(index)}; should be string")
            current = current.get(index, NO_VALUE)
            continue
        seq: Any = as_sequence(current)
        if seq is None and isinstance(current, str):
            seq = current.encode()
        if seq is None:
            raise ValueError(f"can't index item of type {type_name(current)}")
        if not is_int(index):
            raise ValueError(f"cannot index slice/array with type {type_name(index)}")
        if index < 0 or index >= len(seq):
            raise ValueError(f"index out of range: {index}")
        current = seq[index]
    return current


def _slice(item: Any, *indices: Any) -> Any:
    if item is None or item is NO_VALUE:
        raise ValueError("slice of untyped nil")
    if len(indices) > 3:
        raise ValueError(f"too many slice indexes: {len(indices)}")
    if isinstance(item, str):
        if len(indices) == 3:
            raise ValueError("cannot 3-index slice a string")
        seq: Any = item
    else:
        seq = as_sequence(item)
        if seq is None:
            raise ValueError(f"can't slice item of type {type_name(item)}")

    bounds = [0, len(seq)]
    for i, index in enumerate(indices[:2]):
        if not is_int(index):
            raise ValueError(f"cannot index slice/array with type {type_name(index)}")
        if index < 0 or index > len(seq):
            raise ValueError(f"index out of range: {index}")
        bounds[i] = index
    if bounds[0] > bounds[1]:
        raise ValueError(f"invalid slice index: {bounds[0]} > {bounds[1]}")
    result = seq[bounds[0]:bounds[1]]
    return list(result) if isinstance(result, tuple) else result


# ── Comparison ──────────────────────────────────────────────────


def _comparable(left: Any, right: Any) -> bool:
    if is_number(left) and is_number(right):
        return True
    if isinstance(left, bool) and isinstance(right, bool):
        return True
    return isinstance(left, str) and isinstance(right, str)


def _eq(arg1: Any, *args: Any) -> bool:
    if not args:
        raise ValueError("missing argument for comparison")
    if isinstance(arg1, (list, tuple, dict)):
        raise ValueError("non-comparable type")
    for arg in args:
        if arg1 is None or arg is None or arg1 is NO_VALUE or arg is NO_VALUE:
            if arg1 in (None, NO_VALUE) and arg in (None, NO_VALUE):
                return True
            continue
        if isinstance(arg, (list, tuple, dict)):
            raise ValueError("non-comparable types")
        if not _comparable(arg1, arg):
            raise ValueError("incompatible types for comparison")
        if arg1 == arg:
            return True
    return False


def _ne(arg1: Any, arg2: Any) -> bool:
    return not _eq(arg1, arg2)


def _ordered(arg1: Any, arg2: Any) -> None:
    for arg in (arg1, arg2):
        if not (is_number(arg) or isinstance(arg, str)):
            raise ValueError("invalid type for comparison")
    if not _comparable(arg1, arg2) or isinstance(arg1, bool):
        raise ValueError("incompatible types for comparison")


def _lt(arg1: Any, arg2: Any) -> bool:
    _ordered(arg1, arg2)
    return arg1 < arg2


def _le(arg1: Any, arg2: Any) -> bool:
    _ordered(arg1, arg2)
    return arg1 <= arg2


def _gt(arg1: Any, arg2: Any) -> bool:
    _ordered(arg1, arg2)
    return arg1 > arg2


def _ge(arg1: Any, arg2: Any) -> bool:
    _ordered(arg1, arg2)
    return arg1 >= arg2


def _printf(fmt: Any, *args: Any) -> str:
    if not isinstance(fmt, str):
        raise ValueError(f"wrong type for value; expected string; got {type_name(fmt)}")
    return sprintf(fmt, *args)


# ── Escaping ────────────────────────────────────────────────────


def _eval_args(args: tuple[Any, ...]) -> str:
    if len(args) == 1 and isinstance(args[0], str):
        return args[0]
    return sprint(*args)


def _html(*args: Any) -> str:
    text = html_lib.escape(_eval_args(args), quote=True)
    return text.replace("&quot;", "&#34;").replace("&#x27;", "&#39;").replace("\0", "�")


_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "=": "\\u003D",
}


def _js(*args: Any) -> str:
    out = []
    for ch in _eval_args(args):
        if ch in _JS_ESCAPES:
            out.append(_JS_ESCAPES[ch])
        elif ord(ch) < 0x20 or not ch.isprintable():
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return "".join(out)


def _urlquery(*args: Any) -> str:
    return quote_plus(_eval_args(args), safe="")


BUILTINS: Mapping[str, Callable[..., Any]] = MappingProxyType({
    "not": _not,
    "len": _len,
    "index": _index,
    "slice": _slice,
    "eq": _eq,
    "ne": _ne,
    "lt": _lt,
    "le": _le,
    "gt": _gt,
    "ge": _ge,
    "print": sprint,
    "printf": _printf,
    "println": sprintln,
    "html": _html,
    "js": _js,
    "urlquery": _urlquery,
})
