from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.apps.api.deps import get_current_principal, get_db
from mockforge.apps.api.serializers import (
    SchemaResponse,
    SuccessResponse,
    schema_to_response,
)
from mockforge.domain.identity import Principal
from mockforge.services import schemas as schema_service


router = APIRouter(prefix="/schemas", tags=["schemas"])


@router.get("", response_model=list[SchemaResponse])
async def list_schemas(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> list[SchemaResponse]:
    schemas = await schema_service.list_schemas(db, principal)
    return [schema_to_response(schema) for schema in schemas]


@router.get("/{schema_id}", response_model=SchemaResponse)
async def get_schema(
    schema_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> SchemaResponse:
    schema = await schema_service.get_schema(db, principal, schema_id)
    return schema_to_response(schema)


@router.delete("/{schema_id}", response_model=SuccessResponse)
async def delete_schema(
    schema_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    # Records go with the schema in the same transaction.
    await schema_service.delete_schema(db, principal, schema_id)
    return SuccessResponse()
