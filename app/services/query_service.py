from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from adapters.db.postgres_adapter import PostgresAdapter
from adapters.metrics.base import Metrics
from adapters.metrics.prometheus import PrometheusMetrics
from pghuman.errors.exceptions import (
    ConfigurationError,
    MissingCredential,
    PgHumanError,
)
from pghuman.pipeline import Pipeline
from pghuman.pipeline_factory import pipeline_from_settings
from pghuman.schema.introspector import SchemaIntrospector
from pghuman.schema.types import SchemaDescription
from pghuman.types import ExecutionMode, FinalResult

from app.settings import Settings

log = logging.getLogger(__name__)


@dataclass
class QueryService:
    """
    Application-level service for the question-to-SQL use-case.

    Responsibilities:
        - Open one PostgreSQL session per invocation.
        - Build the pipeline with the configured credential.
        - Run it in the requested mode and close the session.
    """

    settings: Settings
    metrics: Optional[Metrics] = None

    def _open_adapter(self) -> PostgresAdapter:
        dsn = (self.settings.postgres_dsn or "").strip()
        if not dsn:
            raise ConfigurationError("Postgres DSN is not configured (POSTGRES_DSN)")
        return PostgresAdapter(dsn=dsn)

    def _build_pipeline(self, db: PostgresAdapter) -> Pipeline:
        return pipeline_from_settings(
            self.settings, db, metrics=self.metrics or PrometheusMetrics()
        )

    def describe_schema(self) -> SchemaDescription:
        with self._open_adapter() as db:
            try:
                return SchemaIntrospector(db).describe()
            except PgHumanError:
                raise
            except Exception as exc:
                log.exception("Unexpected crash while describing the schema")
                raise PgHumanError.wrap("schema description crashed", exc) from exc

    def run(self, *, question: str, mode: ExecutionMode) -> FinalResult:
        """Run one invocation end to end. Every failure surfaces as a PgHumanError."""
        # No session is opened without a credential.
        if not (self.settings.api_key or "").strip():
            raise MissingCredential(
                "No completion API key configured. "
                "Set PGHUMAN_API_KEY or OPENAI_API_KEY."
            )

        with self._open_adapter() as db:
            pipeline = self._build_pipeline(db)
            try:
                return pipeline.run(question, mode)
            except PgHumanError:
                raise
            except Exception as exc:
                log.exception("Unexpected pipeline crash in QueryService.run")
                raise PgHumanError.wrap(
                    "pipeline crashed during execution", exc, mode=mode.value
                ) from exc
