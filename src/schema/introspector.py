"""Type-graph walk from the root view model to the editor schema.

Fields come from the pydantic model definitions, pseudo-fields from the
template accessors. Accessors are expanded into their result's members;
an accessor already being expanded for the same receiver type on the
current path is listed but not expanded again.
"""

from __future__ import annotations

from typing import Any, get_type_hints

import structlog

from src.schema.catalog import (
    ENUM_CATALOG,
    ENUM_FIELD_BINDINGS,
    FUNCTION_DESCRIPTORS,
    METHOD_DESCRIPTIONS,
)
from src.schema.typenames import collection_parts, is_model, type_label, unwrap_optional
from src.schema.types import Schema, SchemaEnum, SchemaField, SchemaFunction
from src.viewmodel import NotificationViewModel, template_members
from src.viewmodel.base import Accessor, field_template_name

logger = structlog.get_logger(__name__)

ROOT_PATH = "."

# (receiver type, accessor name) pairs being expanded on the current path.
_Guard = frozenset[tuple[type, str]]


def _child_path(path: str, name: str) -> str:
    return f".{name}" if path == ROOT_PATH else f"{path}.{name}"


def _members(tp: Any, path: str, guard: _Guard) -> list[SchemaField]:
    """Fields then accessors of a model type."""
    return _fields(tp, path, guard) + _accessors(tp, path, guard)


def _collection_children(collection: type | None, element: Any, path: str, guard: _Guard) -> list[SchemaField]:
    children: list[SchemaField] = []
    if collection is not None:
        children.extend(_accessors(collection, path, guard))
    if is_model(element):
        children.extend(_members(element, path + "[]", guard))
    return children


def _fields(cls: type, path: str, guard: _Guard) -> list[SchemaField]:
    result: list[SchemaField] = []
    for attr, info in cls.model_fields.items():
        name = field_template_name(attr, cls)
        tp = unwrap_optional(info.annotation)
        child_path = _child_path(path, name)

        extra: dict[str, Any] = {}
        parts = collection_parts(tp)
        if parts is not None:
            collection, element = parts
            extra = {
                "is_array": True,
                "element_type": type_label(element),
                "children": _collection_children(collection, element, child_path, guard),
            }
        elif is_model(tp):
            extra = {"children": _members(tp, child_path, guard)}

        result.append(
            SchemaField(
                name=name,
                type=type_label(tp),
                path=path,
                description=info.description or "",
                enum_type=ENUM_FIELD_BINDINGS.get(name, ""),
                **extra,
            )
        )
    return result


def _template_callable(acc: Accessor) -> bool:
    # A variadic parameter counts as one argument.
    return acc.arity + (1 if acc.variadic else 0) <= 1


def _accessors(cls: type, path: str, guard: _Guard) -> list[SchemaField]:
    result: list[SchemaField] = []
    accessors = template_members(cls).accessors
    for name, acc in accessors.items():
        if not _template_callable(acc):
            continue
        returns = unwrap_optional(get_type_hints(getattr(cls, acc.attr)).get("return", Any))
        label = type_label(returns)
        child_path = _child_path(path, name)

        extra: dict[str, Any] = {}
        parts = collection_parts(returns)
        if parts is not None:
            extra = {"is_array": True, "element_type": type_label(parts[1])}

        key = (cls, name)
        if key not in guard and (parts is not None or is_model(returns)):
            nested = guard | {key}
            if returns is cls:
                nested |= {(cls, other) for other in accessors}
            if parts is not None:
                extra["children"] = _collection_children(parts[0], parts[1], child_path, nested)
            else:
                extra["children"] = _members(returns, child_path, nested)

        result.append(
            SchemaField(
                name=name,
                type=label,
                path=path,
                description=METHOD_DESCRIPTIONS.get(f"{cls.__name__}.{name}", ""),
                is_method=True,
                return_type=label,
                enum_type=ENUM_FIELD_BINDINGS.get(name, ""),
                **extra,
            )
        )
    return result


def _schema_fields() -> list[SchemaField]:
    return _members(NotificationViewModel, ROOT_PATH, frozenset())


def _schema_functions() -> list[SchemaFunction]:
    return [
        SchemaFunction(name=name, signature=signature, description=description, category=category)
        for name, signature, description, category in FUNCTION_DESCRIPTORS
    ]


def _schema_enums() -> dict[str, SchemaEnum]:
    return {
        name: SchemaEnum(values=values, description=description)
        for name, (values, description) in ENUM_CATALOG.items()
    }


def get_schema() -> Schema:
    """Build the schema document for the notification view model.

    Derived only from static type information, so repeated calls return
    identical documents.
    """
    schema = Schema(
        fields=tuple(_schema_fields()),
        functions=tuple(_schema_functions()),
        enums=_schema_enums(),
    )
    logger.debug(
        "schema_built",
        fields=len(schema.fields),
        functions=len(schema.functions),
        enums=len(schema.enums),
    )
    return schema
