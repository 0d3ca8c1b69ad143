from __future__ import annotations

from adapters.metrics.base import Metrics, PipelineStatus


class NoOpMetrics(Metrics):
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None:
        return

    def inc_pipeline_run(self, *, mode: str, status: PipelineStatus) -> None:
        return

    def inc_stage_call(self, *, stage: str, ok: bool) -> None:
        return

    def inc_stage_error(self, *, stage: str, error_code: str) -> None:
        return
