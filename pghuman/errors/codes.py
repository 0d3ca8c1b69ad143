from enum import Enum


class ErrorCode(str, Enum):
    # --- Configuration ---
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    CONFIG_ERROR = "CONFIG_ERROR"

    # --- Introspection ---
    SCHEMA_INTROSPECTION_FAILED = "SCHEMA_INTROSPECTION_FAILED"

    # --- LLM ---
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_TRANSPORT_FAILED = "LLM_TRANSPORT_FAILED"

    # --- Executor / DB ---
    GENERATED_SQL_FAILED = "GENERATED_SQL_FAILED"

    # --- Internal ---
    PIPELINE_CRASH = "PIPELINE_CRASH"
