"""Schema introspection and its deterministic text renderings."""

from .types import ColumnDescription, SchemaDescription, TableDescription
from .render import render_compact, render_expanded
from .introspector import SchemaIntrospector

__all__ = [
    "ColumnDescription",
    "SchemaDescription",
    "TableDescription",
    "render_compact",
    "render_expanded",
    "SchemaIntrospector",
]
