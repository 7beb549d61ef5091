from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from mockforge.domain.models import GeneratedRecord, Schema


class SchemaResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    description: str | None
    field_definition: dict[str, str]
    api_slug: str
    created_at: str


class RecordResponse(BaseModel):
    id: str
    schema_id: str
    payload: Any
    created_at: str


class SuccessResponse(BaseModel):
    success: bool = True


def _isoformat(value: datetime) -> str:
    # sqlite returns naive datetimes; every stored timestamp is UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def schema_to_response(schema: Schema) -> SchemaResponse:
    return SchemaResponse(
        id=schema.id,
        owner_id=schema.owner_id,
        name=schema.name,
        description=schema.description,
        field_definition=schema.field_definition,
        api_slug=schema.api_slug,
        created_at=_isoformat(schema.created_at),
    )


def record_to_response(record: GeneratedRecord) -> RecordResponse:
    return RecordResponse(
        id=record.id,
        schema_id=record.schema_id,
        payload=record.payload,
        created_at=_isoformat(record.created_at),
    )
