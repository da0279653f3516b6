# This project was developed with assistance from AI tools.
"""Integration fixtures -- real PostgreSQL via testcontainers.

Run with ``pytest -m integration``. The schema is created once per run;
each test gets a session inside a transaction that is rolled back.
"""

import asyncio

import pytest
import pytest_asyncio
from permit_db import Base
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer


@pytest.fixture(scope="session")
def pg_container():
    with PostgresContainer(
        image="postgres:16-alpine",
        username="test",
        password="test",
        dbname="test",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def async_engine(db_url):
    """Engine with the schema created; NullPool so each test loop gets fresh connections."""
    engine = create_async_engine(db_url, poolclass=NullPool)

    async def _create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_schema())
    yield engine


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Per-test DB session with savepoint rollback."""
    conn = await async_engine.connect()
    txn = await conn.begin()
    session = AsyncSession(
        bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False
    )
    yield session
    await session.close()
    await txn.rollback()
    await conn.close()
