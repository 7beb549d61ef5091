from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.apps.api.deps import get_current_principal, get_db, get_llm
from mockforge.apps.api.serializers import SchemaResponse, schema_to_response
from mockforge.core.errors import InvalidInputError
from mockforge.domain.identity import Principal
from mockforge.providers.llm.base import LLMProvider
from mockforge.services import schemas as schema_service


router = APIRouter(tags=["schemas"])


class CreateSchemaRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    schemaDefinition: dict[str, Any] | None = Field(default=None)


class CreateSchemaResponse(BaseModel):
    # "schema" shadows a BaseModel attribute, so the field is aliased.
    model_config = {"populate_by_name": True}

    success: bool = True
    schema_: SchemaResponse = Field(alias="schema")
    recordCount: int


async def _read_payload(request: Request) -> CreateSchemaRequest:
    # Read after the principal dependency so anonymous callers get 401 whatever the body.
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidInputError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    try:
        return CreateSchemaRequest.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"] if isinstance(part, str))
        raise InvalidInputError(f"{location}: {first['msg']}" if location else first["msg"]) from exc


# Single handler regardless of method; the body carries everything.
@router.api_route(
    "/create-schema",
    methods=["POST", "PUT", "PATCH", "GET", "DELETE"],
    response_model=CreateSchemaResponse,
    response_model_by_alias=True,
)
async def create_schema(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    llm: LLMProvider = Depends(get_llm),
) -> CreateSchemaResponse:
    payload = await _read_payload(request)
    result = await schema_service.create_schema(
        db,
        principal,
        name=payload.name,
        description=payload.description,
        field_definition=payload.schemaDefinition,
        llm=llm,
    )
    return CreateSchemaResponse(
        schema_=schema_to_response(result.schema),
        recordCount=result.record_count,
    )
