"""Shared fixtures: a fresh in-memory SQLite record store per test."""
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db.connection import build_engine, database_url, init_schema
from db.store import SqlRecordStore

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    engine = build_engine(database_url(TEST_DATABASE_URL))
    await init_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return SqlRecordStore(session)


@pytest.fixture
def stored(session):
    """Re-read rows from the database, bypassing in-memory state.

    Expires every instance in the session first, so capture ids before
    calling it.
    """
    async def _stored(model, *criteria):
        session.expire_all()
        result = await session.execute(select(model).where(*criteria))
        return list(result.scalars().all())

    return _stored
