from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.core.errors import InvalidInputError, PersistenceError, RecordNotFoundError
from mockforge.domain.identity import Principal
from mockforge.domain.models import GeneratedRecord
from mockforge.persistence.repos import records as records_repo
from mockforge.services.schemas import get_schema

logger = logging.getLogger(__name__)


def ensure_payload(payload: Any) -> dict[str, Any]:
    # Payloads are opaque, but they must at least be JSON objects.
    if not isinstance(payload, dict):
        raise InvalidInputError("data must be a JSON object")
    return payload


async def _get_scoped(session: AsyncSession, schema_id: str, record_id: str) -> GeneratedRecord:
    try:
        record = await records_repo.get_record_in_schema(session, schema_id, record_id)
    except SQLAlchemyError as exc:
        raise PersistenceError("Database error while fetching record") from exc
    if record is None:
        raise RecordNotFoundError("Record not found")
    return record


async def _commit(session: AsyncSession, action: str) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError(f"Database error while {action} record") from exc


async def list_records(session: AsyncSession, principal: Principal, schema_id: str) -> list[GeneratedRecord]:
    await get_schema(session, principal, schema_id)
    try:
        return await records_repo.list_records(session, schema_id)
    except SQLAlchemyError as exc:
        raise PersistenceError("Database error while listing records") from exc


async def get_record(
    session: AsyncSession, principal: Principal, schema_id: str, record_id: str
) -> GeneratedRecord:
    await get_schema(session, principal, schema_id)
    return await _get_scoped(session, schema_id, record_id)


async def create_record(
    session: AsyncSession, principal: Principal, schema_id: str, payload: Any
) -> GeneratedRecord:
    await get_schema(session, principal, schema_id)
    data = ensure_payload(payload)
    try:
        record = await records_repo.add_record(session, schema_id, data)
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Database error while creating record") from exc
    await _commit(session, "creating")
    logger.info("record_created schema_id=%s record_id=%s", schema_id, record.id)
    return record


async def update_record(
    session: AsyncSession, principal: Principal, schema_id: str, record_id: str, payload: Any
) -> GeneratedRecord:
    await get_schema(session, principal, schema_id)
    data = ensure_payload(payload)
    record = await _get_scoped(session, schema_id, record_id)
    # Full replace, never a merge.
    record.payload = data
    await _commit(session, "updating")
    return record


async def delete_record(
    session: AsyncSession, principal: Principal, schema_id: str, record_id: str
) -> None:
    await get_schema(session, principal, schema_id)
    record = await _get_scoped(session, schema_id, record_id)
    await session.delete(record)
    await _commit(session, "deleting")
    logger.info("record_deleted schema_id=%s record_id=%s", schema_id, record_id)
