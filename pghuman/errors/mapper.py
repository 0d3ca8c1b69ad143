from pghuman.errors.codes import ErrorCode

ERROR_MAP = {
    ErrorCode.MISSING_CREDENTIAL: (500, False),
    ErrorCode.CONFIG_ERROR: (500, False),
    ErrorCode.SCHEMA_INTROSPECTION_FAILED: (500, False),
    ErrorCode.LLM_TIMEOUT: (504, True),
    ErrorCode.LLM_TRANSPORT_FAILED: (502, True),
    ErrorCode.GENERATED_SQL_FAILED: (422, False),
    ErrorCode.PIPELINE_CRASH: (500, False),
}


def map_error(code: ErrorCode | None) -> tuple[int, bool]:
    if code is None:
        return (500, False)
    return ERROR_MAP.get(code, (500, False))
