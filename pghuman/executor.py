from __future__ import annotations

import logging
from typing import List

from adapters.db.base import DBAdapter
from pghuman.errors.exceptions import GeneratedSqlExecutionFailure
from pghuman.types import ExecutedRow

log = logging.getLogger(__name__)

_TRAILING_CHARS = ";\n "

READ_WRAPPER = (
    "SELECT to_jsonb(generated_query) AS data FROM ({sql}) generated_query"
)


def trim_generated_sql(sql: str) -> str:
    """Strip trailing ';', newline and space characters. Nothing else is touched."""
    return sql.rstrip(_TRAILING_CHARS)


class QueryExecutor:
    """
    Runs model-generated SQL against the invocation's session.

    Neither mode validates, sanitizes or dry-runs the SQL: whatever the model
    returned runs with the full privileges of the session, DDL and DML included.
    """

    name = "executor"

    def __init__(self, db: DBAdapter) -> None:
        self.db = db

    def wrap_read(self, sql: str) -> str:
        return READ_WRAPPER.format(sql=trim_generated_sql(sql))

    def execute_read(self, sql: str) -> List[ExecutedRow]:
        """
        Run ``sql`` as a derived table and return each result row as one JSON
        document, indexed from 0 in result order.
        """
        wrapped = self.wrap_read(sql)
        try:
            rows = self.db.fetch_all(wrapped)
        except Exception as exc:
            raise GeneratedSqlExecutionFailure.wrap(
                "generated query failed", exc, mode="read"
            ) from exc

        result = [ExecutedRow(index=i, data=row[0]) for i, row in enumerate(rows)]
        log.info("Query executed successfully. Returned %d rows.", len(result))
        return result

    def execute_write(self, sql: str) -> None:
        """Run ``sql`` unmodified for its side effect."""
        try:
            affected = self.db.execute(sql)
        except Exception as exc:
            raise GeneratedSqlExecutionFailure.wrap(
                "generated statement failed", exc, mode="write"
            ) from exc
        log.info("Statement executed successfully. Affected %d rows.", affected)
