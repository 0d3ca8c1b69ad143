from __future__ import annotations

import re

from .types import ColumnDescription, SchemaDescription, TableDescription

_INDENT = "    "
_SAFE_IDENT_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

# Keywords PostgreSQL 17's quote_ident() always quotes (reserved and
# type/function-name categories). Unreserved keywords are left bare.
# Only used for descriptions built without a server-quoted name.
_QUOTED_KEYWORDS = frozenset(
    """
    all analyse analyze and any array as asc asymmetric authorization between
    bigint binary bit boolean both case cast char character check coalesce
    collate collation column concurrently constraint create cross
    current_catalog current_date current_role current_schema current_time
    current_timestamp current_user dec decimal default deferrable desc distinct
    do else end except exists extract false fetch float for foreign freeze from
    full grant greatest group grouping having ilike in initially inner inout int
    integer intersect interval into is isnull join lateral leading least left
    like limit localtime localtimestamp national natural nchar none normalize not
    notnull null nullif numeric offset on only or order out outer overlaps
    overlay placing position precision primary real references returning right
    row select session_user setof similar smallint some substring symmetric
    table tablesample then time timestamp to trailing treat trim true union
    unique user using values varchar variadic verbose when where window with
    xmlattributes xmlconcat xmlelement xmlexists xmlforest xmlnamespaces
    xmlparse xmlpi xmlroot xmlserialize xmltable
    json json_array json_arrayagg json_exists json_object json_objectagg
    json_query json_scalar json_serialize json_table json_value merge_action
    system_user
    """.split()
)


def quote_identifier(ident: str) -> str:
    """Quote ``ident`` the way PostgreSQL's quote_ident() does: only when needed."""
    if _SAFE_IDENT_RE.match(ident) and ident not in _QUOTED_KEYWORDS:
        return ident
    return '"' + ident.replace('"', '""') + '"'


def quote_qualified_identifier(schema: str, name: str) -> str:
    return f"{quote_identifier(schema)}.{quote_identifier(name)}"


def render_column(column: ColumnDescription) -> str:
    return f"{column.name} {column.type_name}"


def _items(table: TableDescription) -> list[str]:
    # Constraints always follow the columns, in the order they were fetched.
    return [render_column(c) for c in table.columns] + list(table.constraints)


def _head(table: TableDescription) -> str:
    if table.qualified_name:
        return table.qualified_name
    return quote_qualified_identifier(table.schema, table.name)


def render_table_compact(table: TableDescription) -> str:
    head = _head(table)
    return f"CREATE TABLE {head}({', '.join(_items(table))});"


def render_table_expanded(table: TableDescription) -> str:
    head = _head(table)
    body = ",".join(f"\n{_INDENT}{item}" for item in _items(table))
    return f"CREATE TABLE {head}({body}\n);"


def render_compact(description: SchemaDescription) -> str:
    """One ``CREATE TABLE`` line per table."""
    return "\n".join(render_table_compact(t) for t in description.tables)


def render_expanded(description: SchemaDescription) -> str:
    """One column/constraint per indented line, tables separated by a blank line."""
    return "\n\n".join(render_table_expanded(t) for t in description.tables)
