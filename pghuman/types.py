from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ExecutionMode(str, Enum):
    GENERATE = "generate"
    READ = "read"
    WRITE = "write"


# =====================
# Tracing / Observability
# =====================


@dataclass(frozen=True)
class StageTrace:
    stage: str
    duration_ms: float
    summary: str = "ok"
    notes: Optional[Dict[str, Any]] = None


# =====================
# Execution output
# =====================


@dataclass(frozen=True)
class ExecutedRow:
    """One read-mode result row: its position plus the row as a JSON document."""

    index: int
    data: Any


# =====================
# Final pipeline result
# =====================


@dataclass(frozen=True)
class FinalResult:
    """
    Outcome of one successful invocation.
    Adapters (HTTP/CLI) serialize this at the boundary.
    Failures are raised, never returned.
    """

    mode: ExecutionMode
    sql: str
    rows: Optional[List[ExecutedRow]] = None
    traces: List[Dict[str, Any]] = field(default_factory=list)
