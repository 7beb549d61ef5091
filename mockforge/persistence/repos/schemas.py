from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.domain.models import GeneratedRecord, Schema


async def get_schema_for_owner(session: AsyncSession, schema_id: str, owner_id: str) -> Schema | None:
    # Ownership is part of the lookup so non-owners cannot tell a schema exists.
    result = await session.execute(
        select(Schema).where(Schema.id == schema_id, Schema.owner_id == owner_id)
    )
    return result.scalar_one_or_none()


async def list_schemas_by_owner(session: AsyncSession, owner_id: str) -> list[Schema]:
    result = await session.execute(
        select(Schema)
        .where(Schema.owner_id == owner_id)
        .order_by(Schema.created_at.desc(), Schema.id.desc())
    )
    return list(result.scalars().all())


async def add_schema(
    session: AsyncSession,
    *,
    owner_id: str,
    name: str,
    description: str | None,
    field_definition: dict[str, str],
    api_slug: str,
) -> Schema:
    schema = Schema(
        owner_id=owner_id,
        name=name,
        description=description,
        field_definition=field_definition,
        api_slug=api_slug,
    )
    session.add(schema)
    # Flush to obtain the id before child rows reference it.
    await session.flush()
    return schema


async def delete_schema(session: AsyncSession, schema: Schema) -> None:
    # Remove children explicitly so the cascade holds even without FK enforcement.
    await session.execute(delete(GeneratedRecord).where(GeneratedRecord.schema_id == schema.id))
    await session.delete(schema)
