from __future__ import annotations

from typing import Any, Optional

from adapters.db.base import DBAdapter
from adapters.llm.openai_provider import (
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SEC,
    OpenAIProvider,
)
from adapters.metrics.base import Metrics
from pghuman.pipeline import Pipeline


def build_llm(
    *,
    api_key: Optional[str],
    model: str = DEFAULT_MODEL,
    base_url: Optional[str] = None,
    timeout_sec: float = DEFAULT_TIMEOUT_SEC,
) -> OpenAIProvider:
    """The credential is injected here; a missing one only fails at call time."""
    return OpenAIProvider(
        api_key,
        model=model or DEFAULT_MODEL,
        base_url=base_url or None,
        timeout_sec=timeout_sec,
    )


def build_pipeline(
    *,
    db: DBAdapter,
    api_key: Optional[str],
    model: str = DEFAULT_MODEL,
    base_url: Optional[str] = None,
    timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    metrics: Metrics | None = None,
) -> Pipeline:
    llm = build_llm(
        api_key=api_key, model=model, base_url=base_url, timeout_sec=timeout_sec
    )
    return Pipeline(db=db, llm=llm, metrics=metrics)


def pipeline_from_settings(
    settings: Any, db: DBAdapter, *, metrics: Metrics | None = None
) -> Pipeline:
    """
    Build a pipeline from an app settings object.

    Reads ``api_key``, ``model``, ``base_url`` and ``completion_timeout_sec``.
    """
    return build_pipeline(
        db=db,
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url,
        timeout_sec=settings.completion_timeout_sec,
        metrics=metrics,
    )
