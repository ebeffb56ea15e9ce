import os
import pytest
import httpx

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

# Import Base + all models so metadata is complete
from collabhub.models import Base

from collabhub.main import app
from collabhub.core.db import get_db

from tests.fixtures_seed import (  # noqa: F401
    auction_listing,
    brand,
    fixed_listing,
    influencer,
    other_brand,
    other_influencer,
)


def _test_db_url() -> str:
    # PostgreSQL exercises real row locks; in-memory SQLite keeps the suite self-contained.
    return os.getenv("DATABASE_URL_TEST", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def async_engine():
    url = _test_db_url()
    kwargs = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

    engine = create_async_engine(url, **kwargs)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(async_engine):
    """
    One session per test, shared with the app through the get_db override.

    SQLite gets a fresh in-memory database per test. On PostgreSQL the test
    runs inside an outer transaction; commits made by the code under test only
    release SAVEPOINTs, and everything is rolled back at the end.
    """
    if async_engine.dialect.name == "sqlite":
        session_factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
        async with session_factory() as session:
            yield session
        return

    async with async_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        try:
            yield session
        finally:
            await session.close()
            await trans.rollback()


@pytest.fixture
async def client(db_session: AsyncSession):
    """
    HTTP client that uses the test DB session via dependency override.
    """
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
