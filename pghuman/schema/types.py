from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class ColumnDescription:
    name: str
    # Textual data_type from information_schema (arrays come back as "ARRAY").
    type_name: str


@dataclass(frozen=True)
class TableDescription:
    schema: str
    name: str
    columns: Tuple[ColumnDescription, ...] = ()
    constraints: Tuple[str, ...] = ()
    # Server-quoted "schema.table", as returned by quote_ident().
    qualified_name: Optional[str] = None


@dataclass(frozen=True)
class SchemaDescription:
    """Every table visible on the session's search path, in catalog order."""

    tables: Tuple[TableDescription, ...] = field(default_factory=tuple)

    def compact(self) -> str:
        from .render import render_compact

        return render_compact(self)

    def expanded(self) -> str:
        from .render import render_expanded

        return render_expanded(self)
