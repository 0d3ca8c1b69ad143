from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

import psycopg

from adapters.db.base import DBAdapter

log = logging.getLogger(__name__)


class PostgresAdapter(DBAdapter):
    name = "postgres"
    dialect = "postgres"

    def __init__(
        self, dsn: str = "", *, connection: Optional[psycopg.Connection[Any]] = None
    ):
        """
        DSN example:
        "dbname=demo user=postgres password=postgres host=localhost port=5432"

        Pass ``connection`` to run inside a session the caller already owns;
        the adapter then never closes it.
        """
        if not dsn and connection is None:
            raise ValueError("PostgresAdapter needs a DSN or an open connection")
        self.dsn = dsn
        self._conn = connection
        self._owns_connection = connection is None

    def __enter__(self) -> PostgresAdapter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _connect(self) -> psycopg.Connection[Any]:
        if self._conn is not None and not self._conn.closed:
            return self._conn
        # autocommit: every statement runs in the session's own implicit
        # transaction, nothing here wraps the whole pipeline.
        log.debug("Opening PostgreSQL session", extra={"dsn_set": bool(self.dsn)})
        self._conn = psycopg.connect(self.dsn, autocommit=True)
        self._owns_connection = True
        return self._conn

    def fetch_all(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> List[Tuple[Any, ...]]:
        conn = self._connect()
        with conn.cursor() as cur:
            # No params => psycopg sends the text untouched (no %-placeholder parsing).
            cur.execute(sql, params)
            rows = cur.fetchall() or []
            return [tuple(r) for r in rows]

    def execute(self, sql: str) -> int:
        conn = self._connect()
        with conn.cursor() as cur:
            cur.execute(sql)
            return cur.rowcount

    def ping(self) -> None:
        self.fetch_all("SELECT 1")

    def close(self) -> None:
        if self._conn is not None and self._owns_connection and not self._conn.closed:
            self._conn.close()
        if self._owns_connection:
            self._conn = None
