"""Editor-facing names for Python type annotations."""

from __future__ import annotations

import types
from datetime import datetime
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, RootModel

_SCALAR_NAMES: dict[Any, str] = {
    str: "string",
    int: "int",
    float: "float",
    bool: "bool",
    datetime: "datetime",
    Any: "any",
    object: "any",
}

_SEQUENCE_ORIGINS = (list, tuple)


def unwrap_optional(tp: Any) -> Any:
    """``X | None`` becomes ``X``; other annotations pass through."""
    if get_origin(tp) in (Union, types.UnionType):
        args = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel) and not issubclass(tp, RootModel)


def collection_parts(tp: Any) -> tuple[type | None, Any] | None:
    """Split a collection annotation into (collection model, element type).

    The collection model is the ``RootModel`` subclass wrapping the list,
    or None for a plain list. Returns None when *tp* is not a collection.
    """
    tp = unwrap_optional(tp)
    if get_origin(tp) in _SEQUENCE_ORIGINS:
        args = get_args(tp)
        return None, unwrap_optional(args[0]) if args else Any
    if isinstance(tp, type) and issubclass(tp, RootModel):
        parts = collection_parts(tp.model_fields["root"].annotation)
        if parts is not None:
            return tp, parts[1]
    return None


def type_label(tp: Any) -> str:
    """``string``, ``int``, ``[]T``, ``map[K]V`` or a class name."""
    tp = unwrap_optional(tp)
    if tp in _SCALAR_NAMES:
        return _SCALAR_NAMES[tp]
    parts = collection_parts(tp)
    if parts is not None:
        return "[]" + type_label(parts[1])
    if get_origin(tp) is dict:
        key, value = get_args(tp) or (Any, Any)
        return f"map[{type_label(key)}]{type_label(value)}"
    if isinstance(tp, type):
        return tp.__name__
    return str(tp)
