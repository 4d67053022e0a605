"""Static descriptions of accessors, functions and enumerations.

Built once at import from docstrings and the function registry, then
exposed read-only. Anything without a docstring simply has an empty
description.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from src.schema.typenames import type_label
from src.templating.functions import REGISTRY, FunctionSpec
from src.viewmodel import (
    DetailTag,
    EventType,
    EventViewModel,
    EventViewModelDetail,
    EventViewModelDetails,
    NotificationViewConfig,
    NotificationViewModel,
    ViewModelImportance,
    template_members,
)

_SENTENCE_END = re.compile(r"(?<=\.)\s")

VIEW_MODEL_TYPES: tuple[type, ...] = (
    NotificationViewModel,
    NotificationViewConfig,
    EventViewModel,
    EventViewModelDetails,
    EventViewModelDetail,
)


def first_sentence(obj: Any) -> str:
    """First sentence of *obj*'s docstring, on one line."""
    doc = inspect.getdoc(obj) or ""
    paragraph = " ".join(doc.split("\n\n", 1)[0].split())
    return _SENTENCE_END.split(paragraph, maxsplit=1)[0]


def function_signature(spec: FunctionSpec) -> str:
    params = ", ".join(f"{p.name} {type_label(p.annotation)}" for p in spec.params)
    return f"{spec.name}({params}) {type_label(spec.returns)}"


def _method_descriptions() -> dict[str, str]:
    descriptions: dict[str, str] = {}
    for cls in VIEW_MODEL_TYPES:
        for name, acc in template_members(cls).accessors.items():
            descriptions[f"{cls.__name__}.{name}"] = first_sentence(getattr(cls, acc.attr))
    return descriptions


def _enum_values(enum_cls: type[Enum]) -> tuple[str, ...]:
    if issubclass(enum_cls, int):
        return tuple(member.name.title() for member in enum_cls)
    return tuple(str(member.value) for member in enum_cls if member.value)


# "<TypeName>.<MethodName>" -> description
METHOD_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(_method_descriptions())

# (name, signature, description, category) in registration order
FUNCTION_DESCRIPTORS: tuple[tuple[str, str, str, str], ...] = tuple(
    (spec.name, function_signature(spec), first_sentence(spec.func), str(spec.category))
    for spec in REGISTRY.values()
)

# enum name -> (ordered values, description)
ENUM_CATALOG: Mapping[str, tuple[tuple[str, ...], str]] = MappingProxyType({
    cls.__name__: (_enum_values(cls), first_sentence(cls))
    for cls in (ViewModelImportance, EventType, DetailTag)
})

# Fields bound to an enumeration by name.
ENUM_FIELD_BINDINGS: Mapping[str, str] = MappingProxyType({
    "Type": EventType.__name__,
    "Tag": DetailTag.__name__,
    "Importance": ViewModelImportance.__name__,
})
