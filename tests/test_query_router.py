from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_query_service
from app.main import app
from pghuman.errors.codes import ErrorCode
from pghuman.errors.exceptions import (
    CompletionTimeout,
    CompletionTransportFailure,
    GeneratedSqlExecutionFailure,
    MissingCredential,
    SchemaIntrospectionFailure,
)
from pghuman.schema.introspector import SchemaIntrospector
from pghuman.types import ExecutedRow, ExecutionMode, FinalResult

from tests.fakes import (
    CAMPAIGNS_COLUMN_ROWS,
    CAMPAIGNS_CONSTRAINT_ROWS,
    CAMPAIGNS_EXPANDED,
    FakeDB,
)

client = TestClient(app)


def fake_trace(stage: str) -> dict:
    return {"stage": stage, "duration_ms": 10.4, "summary": "ok", "notes": None}


class DummyService:
    def __init__(self, *, sql: str = "SELECT 1;", rows=None, error=None):
        self.sql = sql
        self.rows = rows
        self.error = error
        self.calls: list[tuple[str, ExecutionMode]] = []

    def run(self, *, question: str, mode: ExecutionMode) -> FinalResult:
        self.calls.append((question, mode))
        if self.error is not None:
            raise self.error
        return FinalResult(
            mode=mode,
            sql=self.sql,
            rows=self.rows if mode is ExecutionMode.READ else None,
            traces=[fake_trace("introspector"), fake_trace("completion")],
        )

    def describe_schema(self):
        return SchemaIntrospector(
            FakeDB(CAMPAIGNS_COLUMN_ROWS, CAMPAIGNS_CONSTRAINT_ROWS)
        ).describe()


@pytest.fixture
def service():
    svc = DummyService()
    app.dependency_overrides[get_query_service] = lambda: svc
    try:
        yield svc
    finally:
        app.dependency_overrides.pop(get_query_service, None)


def assert_error_contract(
    resp, *, expected_status: int, expected_code: str, retryable: bool
) -> dict[str, Any]:
    assert resp.status_code == expected_status, resp.text
    body = resp.json()
    assert "error" in body and isinstance(body["error"], dict), body

    err = body["error"]
    assert err["code"] == expected_code
    assert err["retryable"] is retryable
    assert isinstance(err["message"], str) and err["message"]
    assert isinstance(err["request_id"], str) and err["request_id"]
    assert resp.headers.get("X-Request-ID") == err["request_id"]
    if retryable:
        assert resp.headers.get("Retry-After") == "2"
    return err


def test_generate_returns_sql_and_rounded_traces(service):
    resp = client.post(
        app.url_path_for("generate_handler"), json={"question": "list companies"}
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["sql"] == "SELECT 1;"
    assert [t["stage"] for t in body["traces"]] == ["introspector", "completion"]
    assert body["traces"][0]["duration_ms"] == 10
    assert service.calls == [("list companies", ExecutionMode.GENERATE)]


def test_run_returns_indexed_rows(service):
    service.rows = [ExecutedRow(0, {"id": 1}), ExecutedRow(1, {"id": 2})]

    resp = client.post(app.url_path_for("run_handler"), json={"question": "ids"})

    assert resp.status_code == 200, resp.text
    assert resp.json()["rows"] == [
        {"i": 0, "data": {"id": 1}},
        {"i": 1, "data": {"id": 2}},
    ]
    assert service.calls == [("ids", ExecutionMode.READ)]


def test_statement_reports_success_only(service):
    service.sql = "DELETE FROM campaigns;"

    resp = client.post(
        app.url_path_for("statement_handler"), json={"question": "wipe campaigns"}
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["ok"] is True
    assert body["sql"] == "DELETE FROM campaigns;"
    assert "rows" not in body
    assert service.calls == [("wipe campaigns", ExecutionMode.WRITE)]


def test_empty_question_is_rejected(service):
    resp = client.post(app.url_path_for("generate_handler"), json={"question": ""})
    assert resp.status_code == 422
    assert service.calls == []


def test_schema_endpoint_renders_expanded_by_default(service):
    resp = client.get(app.url_path_for("schema_handler"))

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body == {
        "format": "expanded",
        "tables": 2,
        "schema_text": CAMPAIGNS_EXPANDED,
    }


def test_schema_endpoint_renders_compact_on_request(service):
    resp = client.get(app.url_path_for("schema_handler"), params={"format": "compact"})

    assert resp.status_code == 200, resp.text
    assert resp.json()["schema_text"].splitlines()[1] == (
        "CREATE TABLE public.companies(id bigint, name text);"
    )


@pytest.mark.parametrize(
    "error, status, code, retryable",
    [
        (MissingCredential("no key"), 500, ErrorCode.MISSING_CREDENTIAL, False),
        (
            SchemaIntrospectionFailure("catalog down"),
            500,
            ErrorCode.SCHEMA_INTROSPECTION_FAILED,
            False,
        ),
        (CompletionTimeout("too slow"), 504, ErrorCode.LLM_TIMEOUT, True),
        (
            CompletionTransportFailure("bad gateway"),
            502,
            ErrorCode.LLM_TRANSPORT_FAILED,
            True,
        ),
        (
            GeneratedSqlExecutionFailure(
                "generated query failed", details=['column "x" does not exist']
            ),
            422,
            ErrorCode.GENERATED_SQL_FAILED,
            False,
        ),
    ],
)
def test_errors_follow_contract(service, error, status, code, retryable):
    service.error = error

    resp = client.post(app.url_path_for("run_handler"), json={"question": "q"})

    err = assert_error_contract(
        resp, expected_status=status, expected_code=code.value, retryable=retryable
    )
    assert err["details"] == error.details


def test_request_id_is_echoed(service):
    service.error = CompletionTimeout("too slow")

    resp = client.post(
        app.url_path_for("generate_handler"),
        json={"question": "q"},
        headers={"X-Request-ID": "req-123"},
    )

    assert resp.json()["error"]["request_id"] == "req-123"
