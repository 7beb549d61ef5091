from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import Depends, Request
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.core.config import get_settings
from mockforge.core.errors import PersistenceError
from mockforge.domain.identity import Principal
from mockforge.domain.models import ApiKey
from mockforge.persistence.db import SessionLocal, get_session
from mockforge.providers.llm.base import LLMProvider
from mockforge.providers.llm.factory import get_llm_provider
from mockforge.services.auth.api_keys import parse_bearer_token, resolve_principal


logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    # One AsyncSession per request; context manager ensures close on success/error.
    async with get_session() as session:
        yield session


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id
    generated = request.headers.get("X-Request-Id") or str(uuid4())
    request.state.request_id = generated
    return generated


async def _touch_last_used(api_key_id: str) -> None:
    # Own session so the stamp is committed even when the request only reads.
    async with SessionLocal() as session:
        try:
            await session.execute(
                update(ApiKey)
                .where(ApiKey.id == api_key_id)
                .values(last_used_at=datetime.now(timezone.utc))
            )
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.warning("api_key_touch_failed api_key_id=%s error=%s", api_key_id, exc)


async def get_current_principal(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Principal:
    settings = get_settings()
    # Parse the header first so anonymous requests never reach the database.
    raw_key = parse_bearer_token(request.headers.get(settings.auth_api_key_header))
    try:
        principal = await resolve_principal(db, raw_key)
    except SQLAlchemyError as exc:
        raise PersistenceError("Database error while resolving credentials") from exc
    await _touch_last_used(principal.api_key_id)
    return principal


def get_llm(request: Request) -> LLMProvider:
    return get_llm_provider(request_id=get_request_id(request))
