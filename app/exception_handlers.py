from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pghuman.errors.exceptions import PgHumanError


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for the FastAPI application."""

    @app.exception_handler(PgHumanError)
    async def pghuman_error_handler(
        request: Request, exc: PgHumanError
    ) -> JSONResponse:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        status = exc.http_status
        retryable = exc.retryable
        extra: Dict[str, Any] = exc.extra or {}
        details: Optional[List[str]] = exc.details

        payload = {
            "error": {
                "code": exc.code.value,
                "message": exc.message,
                "details": details,
                "retryable": retryable,
                "request_id": request_id,
                "extra": extra,
            }
        }

        headers = {"X-Request-ID": request_id}
        if retryable:
            headers["Retry-After"] = "2"

        return JSONResponse(status_code=status, content=payload, headers=headers)
