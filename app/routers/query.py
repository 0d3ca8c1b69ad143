from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

from app.dependencies import get_query_service
from app.schemas import (
    GenerateResponse,
    QuestionRequest,
    RowModel,
    RunResponse,
    SchemaResponse,
    StatementResponse,
)
from app.services.query_service import QueryService
from app.settings import get_settings
from pghuman.schema.render import render_compact, render_expanded
from pghuman.types import ExecutionMode

logger = logging.getLogger(__name__)
settings = get_settings()

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(key: Optional[str] = Security(api_key_header)):
    """
    Simple API key check using X-API-Key header and configured API keys.

    - Settings.api_keys_raw is a comma-separated list of keys.
    - If api_keys_raw is empty → auth disabled (dev mode).
    """
    raw = settings.api_keys_raw or ""
    allowed = {k.strip() for k in raw.split(",") if k.strip()}
    if not allowed:
        # No keys configured → treat as dev mode (auth off).
        return
    if not key or key not in allowed:
        raise HTTPException(status_code=401, detail="invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])


# -------------------------------
# Helpers
# -------------------------------


def _round_trace(t: Dict[str, Any]) -> Dict[str, Any]:
    try:
        ms_int = int(round(float(t.get("duration_ms") or 0)))
    except (TypeError, ValueError):
        ms_int = 0
    return {
        "stage": str(t.get("stage", "?")),
        "duration_ms": ms_int,
        "summary": t.get("summary", "ok"),
        "notes": t.get("notes"),
    }


def _round_traces(traces: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [_round_trace(t) for t in traces]


# -------------------------------
# Endpoints
# -------------------------------


@router.get("/schema", name="schema_handler", response_model=SchemaResponse)
def schema_endpoint(
    format: Literal["expanded", "compact"] = "expanded",
    svc: QueryService = Depends(get_query_service),
) -> SchemaResponse:
    description = svc.describe_schema()
    render = render_expanded if format == "expanded" else render_compact
    return SchemaResponse(
        format=format, tables=len(description.tables), schema_text=render(description)
    )


@router.post(
    "/query/generate", name="generate_handler", response_model=GenerateResponse
)
def generate_handler(
    request: QuestionRequest,
    svc: QueryService = Depends(get_query_service),
) -> GenerateResponse:
    result = svc.run(question=request.question, mode=ExecutionMode.GENERATE)
    return GenerateResponse(sql=result.sql, traces=_round_traces(result.traces))


@router.post("/query/run", name="run_handler", response_model=RunResponse)
def run_handler(
    request: QuestionRequest,
    svc: QueryService = Depends(get_query_service),
) -> RunResponse:
    result = svc.run(question=request.question, mode=ExecutionMode.READ)
    rows = [RowModel(i=r.index, data=r.data) for r in (result.rows or [])]
    logger.debug("Read-mode query returned rows", extra={"row_count": len(rows)})
    return RunResponse(sql=result.sql, rows=rows, traces=_round_traces(result.traces))


@router.post(
    "/query/statement", name="statement_handler", response_model=StatementResponse
)
def statement_handler(
    request: QuestionRequest,
    svc: QueryService = Depends(get_query_service),
) -> StatementResponse:
    result = svc.run(question=request.question, mode=ExecutionMode.WRITE)
    return StatementResponse(
        sql=result.sql, ok=True, traces=_round_traces(result.traces)
    )
