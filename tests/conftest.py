"""Test configuration and fixtures for patchql."""

import os
from typing import AsyncGenerator

import pytest
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tests.models import Base

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(autouse=True)
def clean_patchql_env(monkeypatch):
    """Keep PATCHQL_* settings from a local .env out of config tests."""
    for suffix in ('TAG_NAME', 'INPUT_ARGUMENT', 'ON_MISSING_TABLE', 'IN_PLACE'):
        monkeypatch.delenv('PATCHQL_' + suffix, raising=False)
    yield


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the test tables created."""
    test_db_url = os.getenv('PATCHQL_TEST_DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
    engine = create_async_engine(test_db_url, echo=False, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# Import fixtures from fixtures module
from tests.fixtures import (
    inflector,
    introspection,
    graphql_schema,
    patch_config,
    entity_table,
    entity_children,
)
