from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mockforge.core.errors import UnauthorizedError
from mockforge.persistence.db import SessionLocal
from mockforge.services.auth.api_keys import (
    generate_api_key,
    hash_api_key,
    parse_bearer_token,
    resolve_principal,
)
from mockforge.tests.utils.auth import create_test_api_key


def test_generate_api_key_embeds_id_and_hashes() -> None:
    key_id, raw_key, key_prefix, key_hash = generate_api_key(key_id="abc123")
    assert key_id == "abc123"
    assert raw_key.startswith("mfk_abc123_")
    assert raw_key.startswith(key_prefix)
    assert key_hash == hash_api_key(raw_key)
    assert key_hash != raw_key


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer", "Bearer a b"])
def test_parse_bearer_token_rejects_malformed_headers(header) -> None:
    with pytest.raises(UnauthorizedError):
        parse_bearer_token(header)


def test_parse_bearer_token_is_case_insensitive_on_scheme() -> None:
    assert parse_bearer_token("bearer secret") == "secret"


@pytest.mark.asyncio
async def test_resolve_principal_returns_owner() -> None:
    raw_key, _headers, user_id, key_id = await create_test_api_key()
    async with SessionLocal() as session:
        principal = await resolve_principal(session, raw_key)
    assert principal.user_id == user_id
    assert principal.api_key_id == key_id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"key_revoked": True},
        {"user_active": False},
        {"key_expires_at": datetime.now(timezone.utc) - timedelta(minutes=1)},
    ],
)
async def test_resolve_principal_rejects_unusable_keys(kwargs) -> None:
    raw_key, _headers, _user_id, _key_id = await create_test_api_key(**kwargs)
    async with SessionLocal() as session:
        with pytest.raises(UnauthorizedError):
            await resolve_principal(session, raw_key)


@pytest.mark.asyncio
async def test_resolve_principal_rejects_unknown_key() -> None:
    async with SessionLocal() as session:
        with pytest.raises(UnauthorizedError):
            await resolve_principal(session, "mfk_nope_nope")
