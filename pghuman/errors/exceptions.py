from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pghuman.errors.codes import ErrorCode
from pghuman.errors.mapper import map_error


@dataclass
class PgHumanError(Exception):
    """Base class for every failure that aborts an invocation."""

    message: str
    code: ErrorCode = ErrorCode.PIPELINE_CRASH
    extra: Dict[str, Any] = field(default_factory=dict)
    details: Optional[List[str]] = None

    def __str__(self) -> str:
        return self.message

    @property
    def http_status(self) -> int:
        return map_error(self.code)[0]

    @property
    def retryable(self) -> bool:
        return map_error(self.code)[1]

    @classmethod
    def wrap(cls, message: str, exc: BaseException, **extra: Any) -> "PgHumanError":
        """Build the error around ``exc``, keeping its text verbatim in details."""
        err = cls(message=f"{message}: {exc}", details=[str(exc)], extra=dict(extra))
        err.extra.setdefault("cause", type(exc).__name__)
        return err


@dataclass
class MissingCredential(PgHumanError):
    code: ErrorCode = ErrorCode.MISSING_CREDENTIAL


@dataclass
class SchemaIntrospectionFailure(PgHumanError):
    code: ErrorCode = ErrorCode.SCHEMA_INTROSPECTION_FAILED


@dataclass
class CompletionTimeout(PgHumanError):
    code: ErrorCode = ErrorCode.LLM_TIMEOUT


@dataclass
class CompletionTransportFailure(PgHumanError):
    code: ErrorCode = ErrorCode.LLM_TRANSPORT_FAILED


@dataclass
class GeneratedSqlExecutionFailure(PgHumanError):
    code: ErrorCode = ErrorCode.GENERATED_SQL_FAILED


@dataclass
class ConfigurationError(PgHumanError):
    code: ErrorCode = ErrorCode.CONFIG_ERROR
