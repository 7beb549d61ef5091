from __future__ import annotations

import json

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request

from mockforge.apps.api.errors import validation_exception_handler


def _request() -> Request:
    return Request({"type": "http", "method": "POST", "path": "/schemas", "headers": []})


@pytest.mark.asyncio
async def test_invalid_json_body_gets_fixed_message() -> None:
    exc = RequestValidationError(
        [{"type": "json_invalid", "loc": ("body", 1), "msg": "JSON decode error"}]
    )
    response = await validation_exception_handler(_request(), exc)
    assert response.status_code == 400
    assert json.loads(response.body) == {"error": "Request body must be valid JSON"}


@pytest.mark.asyncio
async def test_positional_loc_parts_are_dropped() -> None:
    exc = RequestValidationError(
        [{"type": "missing", "loc": ("body", "items", 0, "name"), "msg": "Field required"}]
    )
    response = await validation_exception_handler(_request(), exc)
    assert json.loads(response.body) == {"error": "items.name: Field required"}
