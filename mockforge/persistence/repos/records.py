from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.domain.models import GeneratedRecord


async def list_records(session: AsyncSession, schema_id: str) -> list[GeneratedRecord]:
    # Newest first; id breaks ties so equal timestamps still order deterministically.
    result = await session.execute(
        select(GeneratedRecord)
        .where(GeneratedRecord.schema_id == schema_id)
        .order_by(GeneratedRecord.created_at.desc(), GeneratedRecord.id.desc())
    )
    return list(result.scalars().all())


async def get_record_in_schema(
    session: AsyncSession, schema_id: str, record_id: str
) -> GeneratedRecord | None:
    # Scope by schema so a foreign record id is indistinguishable from a missing one.
    result = await session.execute(
        select(GeneratedRecord).where(
            GeneratedRecord.id == record_id,
            GeneratedRecord.schema_id == schema_id,
        )
    )
    return result.scalar_one_or_none()


async def add_record(session: AsyncSession, schema_id: str, payload: dict[str, Any]) -> GeneratedRecord:
    record = GeneratedRecord(schema_id=schema_id, payload=payload)
    session.add(record)
    await session.flush()
    return record


async def add_records(
    session: AsyncSession, schema_id: str, payloads: Iterable[dict[str, Any]]
) -> list[GeneratedRecord]:
    records = [GeneratedRecord(schema_id=schema_id, payload=payload) for payload in payloads]
    session.add_all(records)
    await session.flush()
    return records
