from __future__ import annotations

import os
from pathlib import Path
import tempfile

# Point settings at a throwaway sqlite file before any mockforge module reads them.
_TEST_DB = Path(tempfile.gettempdir()) / f"mockforge-test-{os.getpid()}.db"
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB}")
os.environ.setdefault("LLM_PROVIDER", "fake")

import pytest  # noqa: E402

from mockforge.domain.models import Base  # noqa: E402
from mockforge.persistence.db import engine  # noqa: E402


@pytest.fixture(autouse=True)
async def prepare_database() -> None:
    # Create tables lazily; create_all skips ones that already exist.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Dispose the async engine to prevent cross-loop connection reuse between tests.
    await engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def remove_test_database() -> None:
    yield
    if _TEST_DB.exists():
        _TEST_DB.unlink()
