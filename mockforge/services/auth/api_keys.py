from __future__ import annotations

from datetime import datetime, timezone
import hashlib
import secrets
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mockforge.core.errors import UnauthorizedError
from mockforge.domain.identity import Principal
from mockforge.domain.models import ApiKey, User


KEY_PREFIX = "mfk"


def hash_api_key(raw_key: str) -> str:
    # Use SHA-256 for deterministic, non-reversible key storage.
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def generate_api_key(*, key_id: str | None = None) -> tuple[str, str, str, str]:
    # Embed the key id in the token so operators can trace secrets safely.
    resolved_id = key_id or uuid4().hex
    secret = secrets.token_urlsafe(32)
    raw_key = f"{KEY_PREFIX}_{resolved_id}_{secret}"
    key_prefix = raw_key[:12]
    return resolved_id, raw_key, key_prefix, hash_api_key(raw_key)


def parse_bearer_token(header_value: str | None) -> str:
    if not header_value:
        raise UnauthorizedError("Unauthorized")
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Unauthorized")
    return parts[1]


def _is_expired(expires_at: datetime | None, now: datetime) -> bool:
    if expires_at is None:
        return False
    # sqlite hands back naive datetimes; treat them as UTC.
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


async def resolve_principal(session: AsyncSession, raw_key: str) -> Principal:
    result = await session.execute(
        select(ApiKey, User)
        .join(User, User.id == ApiKey.user_id)
        .where(ApiKey.key_hash == hash_api_key(raw_key))
    )
    row = result.first()
    if row is None:
        raise UnauthorizedError("Unauthorized")
    api_key, user = row
    now = datetime.now(timezone.utc)
    if api_key.revoked_at is not None or _is_expired(api_key.expires_at, now) or not user.is_active:
        raise UnauthorizedError("Unauthorized")
    return Principal(user_id=user.id, api_key_id=api_key.id)
