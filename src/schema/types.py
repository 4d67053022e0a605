"""Schema document served to template editors."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _SchemaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """camelCase JSON form; optional members are left out when empty."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


class SchemaField(_SchemaModel):
    """A field or accessor reachable from the root view model.

    ``path`` is the path of the containing value (``.`` at the root);
    element members of collections use the collection path suffixed
    with ``[]``.
    """

    name: str
    type: str
    path: str
    description: str = ""
    is_array: bool = Field(False, alias="isArray")
    element_type: str = Field("", alias="elementType")
    children: tuple[SchemaField, ...] = ()
    is_method: bool = Field(False, alias="isMethod")
    return_type: str = Field("", alias="returnType")
    enum_type: str = Field("", alias="enumType")


class SchemaFunction(_SchemaModel):
    name: str
    signature: str
    description: str = ""
    category: str = ""


class SchemaEnum(_SchemaModel):
    values: tuple[str, ...]
    description: str = ""


class Schema(_SchemaModel):
    fields: tuple[SchemaField, ...]
    functions: tuple[SchemaFunction, ...]
    enums: dict[str, SchemaEnum]

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "functions": [f.to_dict() for f in self.functions],
            "enums": {name: enum.to_dict() for name, enum in self.enums.items()},
        }
