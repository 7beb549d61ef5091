from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mockforge.apps.api.deps import get_request_id
from mockforge.apps.api.errors import (
    http_exception_handler,
    mockforge_error_handler,
    starlette_http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from mockforge.apps.api.middleware.preflight import PreflightMiddleware
from mockforge.apps.api.routes.create_schema import router as create_schema_router
from mockforge.apps.api.routes.data_crud import router as data_crud_router
from mockforge.apps.api.routes.health import router as health_router
from mockforge.apps.api.routes.schemas import router as schemas_router
from mockforge.core.config import get_settings
from mockforge.core.errors import MockForgeError
from mockforge.core.logging import configure_logging


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(title="mockforge API")

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):  # type: ignore[override]
        # Preserve incoming request IDs or assign a new one for traceability.
        request_id = get_request_id(request)
        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as exc:
            # Answer here rather than in ServerErrorMiddleware, which sits outside
            # the preflight layer and would drop the CORS headers.
            response = await unhandled_exception_handler(request, exc)
        latency_ms = (time.monotonic() - start) * 1000.0
        logger.info(
            "request_done method=%s path=%s status=%s latency_ms=%.1f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
            request_id,
        )
        response.headers.setdefault("X-Request-Id", request_id)
        return response

    @app.exception_handler(MockForgeError)
    async def _mockforge_error_handler(request: Request, exc: MockForgeError):
        return await mockforge_error_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return await starlette_http_exception_handler(request, exc)

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return await validation_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        return await unhandled_exception_handler(request, exc)

    # Outermost so OPTIONS preflights are answered before routing or auth.
    app.add_middleware(PreflightMiddleware, allow_headers=settings.cors_allow_headers)

    app.include_router(health_router)
    app.include_router(create_schema_router)
    app.include_router(data_crud_router)
    app.include_router(schemas_router)

    return app


app = create_app()
