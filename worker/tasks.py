import asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from worker.celery_app import celery
from collabhub.core.config import settings
import collabhub.models  # noqa: F401  # ensures Models are registered
from collabhub.services.outbox_dispatcher import process_outbox_event as process_event


async def _process_outbox_event(outbox_id: str, lease_id: str) -> bool:
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with Session() as db:
            return await process_event(db, outbox_id, lease_id)
    finally:
        await engine.dispose()


@celery.task(name="worker.tasks.process_outbox_event", bind=True, max_retries=5)
def process_outbox_event(self, outbox_id: str, lease_id: str) -> bool:
    return asyncio.run(_process_outbox_event(outbox_id, lease_id))
