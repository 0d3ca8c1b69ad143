from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, TypeVar

from adapters.db.base import DBAdapter
from adapters.llm.base import LLMProvider
from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from pghuman.errors.codes import ErrorCode
from pghuman.errors.exceptions import PgHumanError
from pghuman.executor import QueryExecutor
from pghuman.prompts.builder import PromptBuilder
from pghuman.schema.introspector import SchemaIntrospector
from pghuman.types import ExecutedRow, ExecutionMode, FinalResult, StageTrace

log = logging.getLogger(__name__)

T = TypeVar("T")


class Pipeline:
    """
    pg-human pipeline:
      introspector → prompt → completion → executor (read | write | skipped).

    Stages run strictly in sequence inside the caller's database session.
    Any failure aborts the whole invocation; nothing is retried and no
    partial result is returned.
    """

    def __init__(
        self,
        *,
        db: DBAdapter,
        llm: LLMProvider,
        introspector: Optional[SchemaIntrospector] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        executor: Optional[QueryExecutor] = None,
        metrics: Metrics | None = None,
    ):
        self.db = db
        self.llm = llm
        self.introspector = introspector or SchemaIntrospector(db)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.executor = executor or QueryExecutor(db)
        self.metrics: Metrics = metrics or NoOpMetrics()

    # ---------------------------- helpers ----------------------------
    def _stage(
        self,
        stage: str,
        fn: Callable[[], T],
        traces: List[Dict[str, Any]],
        notes: Optional[Callable[[T], Dict[str, Any]]] = None,
    ) -> T:
        t0 = time.perf_counter()
        try:
            out = fn()
        except Exception as exc:
            dt = (time.perf_counter() - t0) * 1000.0
            code = (
                exc.code if isinstance(exc, PgHumanError) else ErrorCode.PIPELINE_CRASH
            )
            self.metrics.observe_stage_duration_ms(stage=stage, dt_ms=dt)
            self.metrics.inc_stage_call(stage=stage, ok=False)
            self.metrics.inc_stage_error(stage=stage, error_code=str(code.value))
            log.debug(
                "Stage failed",
                extra={"stage": stage, "error_code": code.value, "duration_ms": dt},
            )
            raise

        dt = (time.perf_counter() - t0) * 1000.0
        self.metrics.observe_stage_duration_ms(stage=stage, dt_ms=dt)
        self.metrics.inc_stage_call(stage=stage, ok=True)
        trace = StageTrace(
            stage=stage,
            duration_ms=dt,
            notes=notes(out) if notes else None,
        )
        traces.append(asdict(trace))
        return out

    def _completion_notes(self, text: str) -> Dict[str, Any]:
        usage_fn = getattr(self.llm, "get_last_usage", None)
        usage = usage_fn() if callable(usage_fn) else {}
        return {**usage, "sql_length": len(text)}

    # ---------------------------- main ----------------------------
    def run(
        self, question: str, mode: ExecutionMode | str = ExecutionMode.GENERATE
    ) -> FinalResult:
        mode = ExecutionMode(mode)
        traces: List[Dict[str, Any]] = []
        rows: Optional[List[ExecutedRow]] = None

        try:
            description = self._stage(
                "introspector",
                self.introspector.describe,
                traces,
                notes=lambda d: {"tables": len(d.tables)},
            )
            turns = self._stage(
                "prompt",
                lambda: self.prompt_builder.build(description, question),
                traces,
                notes=lambda ts: {
                    "turns": len(ts),
                    "chars": sum(len(t.content) for t in ts),
                },
            )
            sql = self._stage(
                "completion",
                lambda: self.llm.complete(turns),
                traces,
                notes=self._completion_notes,
            )

            if mode is ExecutionMode.GENERATE:
                log.info("You can try this query:\n%s", sql)
            elif mode is ExecutionMode.READ:
                log.info("Executing query:\n%s", sql)
                rows = self._stage(
                    "executor",
                    lambda: self.executor.execute_read(sql),
                    traces,
                    notes=lambda rs: {"mode": "read", "row_count": len(rs)},
                )
            else:
                log.info("Executing:\n%s", sql)
                self._stage(
                    "executor",
                    lambda: self.executor.execute_write(sql),
                    traces,
                    notes=lambda _: {"mode": "write"},
                )
        except Exception:
            self.metrics.inc_pipeline_run(mode=mode.value, status="error")
            raise

        self.metrics.inc_pipeline_run(mode=mode.value, status="ok")
        return FinalResult(mode=mode, sql=sql, rows=rows, traces=traces)

    # ---------------------------- entry operations ----------------------------
    def generate_query(self, question: str) -> str:
        """Return generated SQL without executing it."""
        return self.run(question, ExecutionMode.GENERATE).sql

    def run_query(self, question: str) -> List[ExecutedRow]:
        """Generate SQL, run it in read mode and return its rows."""
        return self.run(question, ExecutionMode.READ).rows or []

    def run_statement(self, question: str) -> None:
        """Generate SQL and execute it directly for its side effect."""
        self.run(question, ExecutionMode.WRITE)
