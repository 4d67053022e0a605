"""Editor schema of the notification view model."""

from src.schema.introspector import get_schema
from src.schema.types import Schema, SchemaEnum, SchemaField, SchemaFunction

__all__ = [
    "Schema",
    "SchemaEnum",
    "SchemaField",
    "SchemaFunction",
    "get_schema",
]
