from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.apps.api.deps import get_current_principal, get_db
from mockforge.apps.api.serializers import (
    RecordResponse,
    SuccessResponse,
    record_to_response,
)
from mockforge.core.errors import InvalidInputError
from mockforge.domain.identity import Principal
from mockforge.services import records as record_service
from mockforge.services import schemas as schema_service


router = APIRouter(tags=["data"])


def _require_schema_id(schema_id: str | None) -> str:
    if not schema_id:
        raise InvalidInputError("schemaId is required")
    return schema_id


async def _read_data(request: Request) -> Any:
    # Bodies look like {"data": {...}}; the payload itself is stored untouched.
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidInputError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return body.get("data")


@router.get("/data-crud", response_model=list[RecordResponse] | RecordResponse)
async def read_data(
    schema_id: str | None = Query(default=None, alias="schemaId"),
    data_id: str | None = Query(default=None, alias="dataId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> list[RecordResponse] | RecordResponse:
    schema_id = _require_schema_id(schema_id)
    if data_id:
        record = await record_service.get_record(db, principal, schema_id, data_id)
        return record_to_response(record)
    records = await record_service.list_records(db, principal, schema_id)
    return [record_to_response(record) for record in records]


@router.post("/data-crud", status_code=201, response_model=RecordResponse)
async def create_data(
    request: Request,
    schema_id: str | None = Query(default=None, alias="schemaId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> RecordResponse:
    schema_id = _require_schema_id(schema_id)
    # Resolve ownership before touching the body so foreign schemas 404 first.
    await schema_service.get_schema(db, principal, schema_id)
    data = await _read_data(request)
    record = await record_service.create_record(db, principal, schema_id, data)
    return record_to_response(record)


@router.put("/data-crud", response_model=RecordResponse)
async def update_data(
    request: Request,
    schema_id: str | None = Query(default=None, alias="schemaId"),
    data_id: str | None = Query(default=None, alias="dataId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> RecordResponse:
    schema_id = _require_schema_id(schema_id)
    await schema_service.get_schema(db, principal, schema_id)
    if not data_id:
        raise InvalidInputError("dataId is required for updates")
    data = await _read_data(request)
    record = await record_service.update_record(db, principal, schema_id, data_id, data)
    return record_to_response(record)


@router.delete("/data-crud", response_model=SuccessResponse)
async def delete_data(
    schema_id: str | None = Query(default=None, alias="schemaId"),
    data_id: str | None = Query(default=None, alias="dataId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    schema_id = _require_schema_id(schema_id)
    await schema_service.get_schema(db, principal, schema_id)
    if not data_id:
        raise InvalidInputError("dataId is required for deletion")
    await record_service.delete_record(db, principal, schema_id, data_id)
    return SuccessResponse()


# Authenticate before rejecting unsupported methods so anonymous callers always see 401.
@router.api_route(
    "/data-crud",
    methods=["PATCH", "HEAD", "TRACE", "CONNECT"],
    include_in_schema=False,
)
async def unsupported_method(
    schema_id: str | None = Query(default=None, alias="schemaId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> None:
    schema_id = _require_schema_id(schema_id)
    await schema_service.get_schema(db, principal, schema_id)
    raise HTTPException(status_code=405, detail="Method not allowed")
