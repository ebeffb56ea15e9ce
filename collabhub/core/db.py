from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from collabhub.core.config import settings

# One engine per process; disposed by the application lifespan.
engine = create_async_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    All-or-nothing unit of work on an injected session.
    Commits when the block exits cleanly, rolls everything back otherwise.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
