from __future__ import annotations

import logging
import time
from itertools import groupby
from typing import Any, Dict, Iterable, List, NamedTuple, Sequence, Tuple

from adapters.db.base import DBAdapter
from pghuman.errors.exceptions import SchemaIntrospectionFailure
from pghuman.schema.types import (
    ColumnDescription,
    SchemaDescription,
    TableDescription,
)

log = logging.getLogger(__name__)

COLUMNS_QUERY = """
    SELECT
        table_schema::text,
        table_name::text,
        column_name::text,
        data_type::text,
        quote_ident(table_schema) || '.' || quote_ident(table_name)
    FROM information_schema.columns
    WHERE table_schema = ANY(current_schemas(false))
    ORDER BY table_schema, table_name, ordinal_position;
"""

# One query for every table on the search path. con.oid keeps the catalog
# creation order of the constraints within a table.
CONSTRAINTS_QUERY = """
    SELECT
        nsp.nspname::text,
        rel.relname::text,
        pg_get_constraintdef(con.oid)
    FROM pg_catalog.pg_constraint con
         INNER JOIN pg_catalog.pg_class rel
                    ON rel.oid = con.conrelid
         INNER JOIN pg_catalog.pg_namespace nsp
                    ON nsp.oid = con.connamespace
    WHERE nsp.nspname = ANY(current_schemas(false))
    ORDER BY nsp.nspname, rel.relname, con.oid;
"""

TableKey = Tuple[str, str]


class ColumnGroup(NamedTuple):
    key: TableKey
    qualified_name: str
    columns: List[ColumnDescription]


def group_sorted_columns(rows: Iterable[Sequence[Any]]) -> List[ColumnGroup]:
    """
    Group (schema, table, column, type, qualified name) rows into per-table
    column lists.

    Single linear pass over contiguous runs of the same (schema, table) key.
    The rows MUST already be sorted by (schema, table, ordinal_position):
    an unsorted source does not fail, it silently yields split or duplicate
    tables. COLUMNS_QUERY guarantees that order with its ORDER BY.

    The qualified name is quoted by the server's quote_ident(), so it always
    matches the quoting rules of the connected PostgreSQL version.
    """
    grouped: List[ColumnGroup] = []
    for key, run in groupby(rows, key=lambda r: (r[0], r[1])):
        run = list(run)
        columns = [ColumnDescription(name=r[2], type_name=r[3]) for r in run]
        grouped.append(ColumnGroup(key, run[0][4], columns))
    return grouped


def index_constraints(rows: Iterable[Sequence[Any]]) -> Dict[TableKey, List[str]]:
    by_table: Dict[TableKey, List[str]] = {}
    for schema, table, definition in rows:
        by_table.setdefault((schema, table), []).append(definition)
    return by_table


class SchemaIntrospector:
    name = "introspector"

    def __init__(self, db: DBAdapter) -> None:
        self.db = db

    def describe(self) -> SchemaDescription:
        """
        Build a fresh description of every table on the current search path.

        Raises SchemaIntrospectionFailure if either catalog query fails; no
        partial description is ever returned.
        """
        t0 = time.perf_counter()
        try:
            column_rows = self.db.fetch_all(COLUMNS_QUERY)
            constraint_rows = self.db.fetch_all(CONSTRAINTS_QUERY)
        except Exception as exc:
            raise SchemaIntrospectionFailure.wrap(
                "schema introspection failed", exc
            ) from exc

        constraints = index_constraints(constraint_rows)
        tables = tuple(
            TableDescription(
                schema=group.key[0],
                name=group.key[1],
                columns=tuple(group.columns),
                constraints=tuple(constraints.get(group.key, ())),
                qualified_name=group.qualified_name,
            )
            for group in group_sorted_columns(column_rows)
        )

        log.debug(
            "Introspected schema",
            extra={
                "tables": len(tables),
                "columns": len(column_rows),
                "constraints": len(constraint_rows),
                "duration_ms": (time.perf_counter() - t0) * 1000.0,
            },
        )
        return SchemaDescription(tables=tables)
