from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mockforge.core.errors import (
    InvalidInputError,
    MockForgeError,
    RecordNotFoundError,
    SchemaNotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


_STATUS_BY_ERROR: tuple[tuple[type[MockForgeError], int], ...] = (
    (UnauthorizedError, 401),
    (InvalidInputError, 400),
    (SchemaNotFoundError, 404),
    (RecordNotFoundError, 404),
)

_DEFAULT_MESSAGES: dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    404: "Not found",
    405: "Method not allowed",
    500: "Internal server error",
}


def status_for_error(exc: MockForgeError) -> int:
    # Generation, provider and persistence failures all surface as 500.
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_body(message: str) -> dict[str, str]:
    return {"error": message}


def _detail_message(detail: Any, status_code: int) -> str:
    if isinstance(detail, str) and detail:
        if status_code == 405:
            return _DEFAULT_MESSAGES[405]
        return detail
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return _DEFAULT_MESSAGES.get(status_code, "Request failed")


async def mockforge_error_handler(request: Request, exc: MockForgeError) -> JSONResponse:
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(
            "request_failed path=%s error=%s message=%s",
            request.url.path,
            type(exc).__name__,
            exc,
        )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(content=error_body(str(exc)), status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = _detail_message(exc.detail, exc.status_code)
    return JSONResponse(content=error_body(message), status_code=exc.status_code, headers=exc.headers)


async def starlette_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Routing 404/405 responses share the flat error body.
    message = _detail_message(exc.detail, exc.status_code)
    return JSONResponse(content=error_body(message), status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        return JSONResponse(content=error_body("Request body must be valid JSON"), status_code=400)
    # Positional parts of loc are offsets into the raw body, not field names.
    location = ".".join(
        part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"
    )
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg") or "Invalid request")
    return JSONResponse(content=error_body(message), status_code=400)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_unhandled path=%s", request.url.path)
    return JSONResponse(content=error_body(str(exc) or _DEFAULT_MESSAGES[500]), status_code=500)
