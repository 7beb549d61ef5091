from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from mockforge.domain.identity import Principal
from mockforge.domain.models import ApiKey, User
from mockforge.persistence.db import SessionLocal
from mockforge.services.auth.api_keys import generate_api_key


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def create_test_api_key(
    *,
    name: str = "test-key",
    user_active: bool = True,
    key_revoked: bool = False,
    key_expires_at: datetime | None = None,
) -> tuple[str, dict[str, str], str, str]:
    # Provision a user + API key pair for integration tests.
    user_id = uuid4().hex
    key_id, raw_key, key_prefix, key_hash = generate_api_key()

    async with SessionLocal() as session:
        session.add(User(id=user_id, email=None, is_active=user_active))
        # Flush the user insert before the API key to satisfy FK constraints.
        await session.flush()
        session.add(
            ApiKey(
                id=key_id,
                user_id=user_id,
                key_prefix=key_prefix,
                key_hash=key_hash,
                name=name,
                expires_at=key_expires_at,
                revoked_at=_utc_now() if key_revoked else None,
            )
        )
        await session.commit()

    headers = {"Authorization": f"Bearer {raw_key}"}
    return raw_key, headers, user_id, key_id


async def create_test_principal() -> Principal:
    _raw_key, _headers, user_id, key_id = await create_test_api_key()
    return Principal(user_id=user_id, api_key_id=key_id)
