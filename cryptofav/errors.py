"""Centralized FastAPI error handlers and JSON error bodies."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("cryptofav.errors")


def message_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _field_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Collapse pydantic error locations into ``{field: [messages]}``."""
    out: dict[str, list[str]] = defaultdict(list)
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        out[field].append(err.get("msg", "Invalid value"))
    return dict(out)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        errors = _field_errors(list(exc.errors()))
        first = next(iter(errors.values()), ["Invalid request"])[0]
        return JSONResponse(
            status_code=422,
            content={"message": first, "errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return message_response("Internal server error", 500)
