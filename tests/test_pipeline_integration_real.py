"""
Runs against a real PostgreSQL when PGHUMAN_TEST_DSN is set, e.g.

    PGHUMAN_TEST_DSN="dbname=postgres user=postgres host=localhost" pytest
"""

import os
import uuid

import pytest

from adapters.db.postgres_adapter import PostgresAdapter
from pghuman.errors.exceptions import GeneratedSqlExecutionFailure
from pghuman.pipeline import Pipeline
from pghuman.schema.introspector import SchemaIntrospector

from tests.fakes import FakeLLM

DSN = os.getenv("PGHUMAN_TEST_DSN")

pytestmark = pytest.mark.skipif(not DSN, reason="PGHUMAN_TEST_DSN not set")


@pytest.fixture
def db():
    schema = f"pghuman_test_{uuid.uuid4().hex[:8]}"
    adapter = PostgresAdapter(DSN)
    adapter.execute(f"CREATE SCHEMA {schema}")
    adapter.execute(f"SET search_path TO {schema}")
    adapter.execute("CREATE TABLE companies(id bigint PRIMARY KEY, name text)")
    adapter.execute(
        "CREATE TABLE campaigns(id bigint, company_id bigint "
        "REFERENCES companies(id), name text)"
    )
    adapter.execute("INSERT INTO companies VALUES (1, 'Acme'), (2, 'Globex')")
    try:
        yield schema, adapter
    finally:
        adapter.execute(f"DROP SCHEMA {schema} CASCADE")
        adapter.close()


def test_introspection_of_real_catalog(db):
    schema, adapter = db
    text = SchemaIntrospector(adapter).describe().expanded()

    assert text == (
        f"CREATE TABLE {schema}.campaigns(\n"
        "    id bigint,\n"
        "    company_id bigint,\n"
        "    name text,\n"
        "    FOREIGN KEY (company_id) REFERENCES companies(id)\n"
        ");\n"
        "\n"
        f"CREATE TABLE {schema}.companies(\n"
        "    id bigint,\n"
        "    name text,\n"
        "    PRIMARY KEY (id)\n"
        ");"
    )


def test_read_mode_returns_rows_as_json(db):
    _, adapter = db
    pipeline = Pipeline(
        db=adapter, llm=FakeLLM("SELECT id, name FROM companies ORDER BY id;\n")
    )

    rows = pipeline.run_query("list companies")

    assert [(r.index, r.data) for r in rows] == [
        (0, {"id": 1, "name": "Acme"}),
        (1, {"id": 2, "name": "Globex"}),
    ]


def test_write_mode_runs_statement_in_same_session(db):
    _, adapter = db
    pipeline = Pipeline(
        db=adapter, llm=FakeLLM("INSERT INTO campaigns VALUES (1, 1, 'Launch');")
    )

    pipeline.run_statement("add a campaign")

    assert adapter.fetch_all("SELECT name FROM campaigns") == [("Launch",)]


def test_engine_error_surfaces(db):
    _, adapter = db
    pipeline = Pipeline(db=adapter, llm=FakeLLM("SELECT nope FROM companies"))

    with pytest.raises(GeneratedSqlExecutionFailure) as ei:
        pipeline.run_query("broken")

    assert "nope" in ei.value.details[0]
