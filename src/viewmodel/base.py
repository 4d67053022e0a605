"""Template-visible members of view model types.

Templates address data with PascalCase names (``.CompanyName``,
``.Event.Details.WithTag``). Fields expose their template name through the
pydantic alias (or serialization alias when input and template names
differ); accessor methods opt in with :func:`accessor`. Member lookup is
resolved once per class and shared by the template executor and the schema
introspector.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel, SerializerFunctionWrapHandler, model_serializer

F = TypeVar("F", bound=Callable[..., Any])

_TEMPLATE_NAME_ATTR = "__template_name__"


def accessor(name: str) -> Callable[[F], F]:
    """Expose a method to templates under *name*."""

    def decorate(func: F) -> F:
        setattr(func, _TEMPLATE_NAME_ATTR, name)
        return func

    return decorate


@dataclass(frozen=True)
class Accessor:
    """A template-callable method: zero or one argument (or variadic)."""

    name: str
    attr: str
    arity: int
    variadic: bool


@dataclass(frozen=True)
class TemplateMembers:
    fields: Mapping[str, str]
    accessors: Mapping[str, Accessor]


class TemplateModel(BaseModel):
    """Base for view model entities decoded strictly from JSON input."""

    model_config = ConfigDict(extra="forbid", populate_by_name=False)

    # Public JSON keys dropped from the dump when their value is empty.
    _omit_empty: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in self._omit_empty:
            if key in data and not data[key]:
                del data[key]
        return data

    def public_dict(self) -> dict[str, Any]:
        """Public JSON representation: hidden fields excluded, keys as input."""
        return self.model_dump(mode="json", by_alias=True)


def field_template_name(attr: str, cls: type[BaseModel]) -> str:
    info = cls.model_fields[attr]
    return info.serialization_alias or info.alias or attr


def _accessor_for(attr: str, func: Callable[..., Any]) -> Accessor:
    params = list(inspect.signature(func).parameters.values())[1:]
    variadic = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)
    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return Accessor(
        name=getattr(func, _TEMPLATE_NAME_ATTR),
        attr=attr,
        arity=len(positional),
        variadic=variadic,
    )


@functools.cache
def template_members(cls: type) -> TemplateMembers:
    """Return the fields and accessors *cls* exposes to templates.

    Fields keep declaration order; accessors are sorted by template name.
    """
    fields: dict[str, str] = {}
    if issubclass(cls, BaseModel) and not issubclass(cls, RootModel):
        for attr in cls.model_fields:
            fields[field_template_name(attr, cls)] = attr

    found: dict[str, Accessor] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if callable(value) and hasattr(value, _TEMPLATE_NAME_ATTR):
                acc = _accessor_for(attr, value)
                found[acc.name] = acc

    accessors = {name: found[name] for name in sorted(found)}
    return TemplateMembers(
        fields=MappingProxyType(fields),
        accessors=MappingProxyType(accessors),
    )

