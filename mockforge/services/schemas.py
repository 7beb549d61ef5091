from __future__ import annotations

from dataclasses import dataclass
import logging
import re
import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.core.config import FIELD_TYPES, Settings, get_settings
from mockforge.core.errors import InvalidInputError, PersistenceError, SchemaNotFoundError
from mockforge.domain.identity import Principal
from mockforge.domain.models import Schema
from mockforge.generation.parsing import check_conformance, parse_generated_records
from mockforge.generation.prompts import build_generation_prompt
from mockforge.persistence.repos import records as records_repo
from mockforge.persistence.repos import schemas as schemas_repo
from mockforge.providers.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SchemaCreationResult:
    schema: Schema
    record_count: int


def derive_api_slug(name: str, now_ms: int | None = None) -> str:
    # Millisecond suffix separates schemas sharing a name; collisions are not retried.
    suffix = now_ms if now_ms is not None else int(time.time() * 1000)
    base = _WHITESPACE.sub("-", name.strip().lower())
    return f"{base}-{suffix}"


def normalize_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("name is required")
    return name.strip()


def normalize_field_definition(raw: Any) -> dict[str, str]:
    """Validate a submitted field list, keeping its order.

    Entries with blank names are dropped, matching how the form submits
    unfilled rows; at least one named field must remain.
    """
    if not isinstance(raw, dict):
        raise InvalidInputError("schemaDefinition must be an object of field name to type")
    fields: dict[str, str] = {}
    for field_name, type_tag in raw.items():
        if not isinstance(field_name, str) or not field_name.strip():
            continue
        key = field_name.strip()
        if not isinstance(type_tag, str) or type_tag.strip().lower() not in FIELD_TYPES:
            raise InvalidInputError(
                f"Unsupported type for field {key!r}; expected one of: {', '.join(FIELD_TYPES)}"
            )
        if key in fields:
            raise InvalidInputError(f"Duplicate field name: {key!r}")
        fields[key] = type_tag.strip().lower()
    if not fields:
        raise InvalidInputError("schemaDefinition must contain at least one named field")
    return fields


async def create_schema(
    session: AsyncSession,
    principal: Principal,
    *,
    name: Any,
    description: str | None,
    field_definition: Any,
    llm: LLMProvider,
    settings: Settings | None = None,
) -> SchemaCreationResult:
    settings = settings or get_settings()
    clean_name = normalize_name(name)
    fields = normalize_field_definition(field_definition)
    api_slug = derive_api_slug(clean_name)

    prompt = build_generation_prompt(fields, settings.generation_record_count)
    raw_text = (await llm.complete(prompt)).strip()
    generated = parse_generated_records(raw_text)
    if settings.generation_strict_conformance:
        check_conformance(generated, fields, raw_text=raw_text)

    # Schema and records share one transaction so a failed insert leaves nothing behind.
    try:
        schema = await schemas_repo.add_schema(
            session,
            owner_id=principal.user_id,
            name=clean_name,
            description=description,
            field_definition=fields,
            api_slug=api_slug,
        )
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Database error while creating schema") from exc
    try:
        records = await records_repo.add_records(session, schema.id, generated)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Database error while storing generated records") from exc

    logger.info("schema_created schema_id=%s record_count=%s", schema.id, len(records))
    return SchemaCreationResult(schema=schema, record_count=len(records))


async def list_schemas(session: AsyncSession, principal: Principal) -> list[Schema]:
    try:
        return await schemas_repo.list_schemas_by_owner(session, principal.user_id)
    except SQLAlchemyError as exc:
        raise PersistenceError("Database error while listing schemas") from exc


async def get_schema(session: AsyncSession, principal: Principal, schema_id: str) -> Schema:
    try:
        schema = await schemas_repo.get_schema_for_owner(session, schema_id, principal.user_id)
    except SQLAlchemyError as exc:
        raise PersistenceError("Database error while fetching schema") from exc
    if schema is None:
        # Not-owned and absent look the same to avoid leaking existence.
        raise SchemaNotFoundError("Schema not found")
    return schema


async def delete_schema(session: AsyncSession, principal: Principal, schema_id: str) -> None:
    schema = await get_schema(session, principal, schema_id)
    try:
        await schemas_repo.delete_schema(session, schema)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Database error while deleting schema") from exc
    logger.info("schema_deleted schema_id=%s", schema_id)
