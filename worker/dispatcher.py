import asyncio
import logging
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from collabhub.core.config import settings
import collabhub.models  # noqa: F401
from collabhub.services.outbox_dispatcher import dispatch_outbox
from worker.celery_app import celery


log = logging.getLogger(__name__)

POLL_SECONDS = 2


async def _tick(Session) -> int:
    async with Session() as db:
        return await dispatch_outbox(
            db,
            celery.send_task,
            batch_size=settings.outbox_batch_size,
            lease_minutes=settings.outbox_lease_minutes,
        )


async def main():
    celery.connection().ensure_connection(max_retries=3)

    logging.basicConfig(level=settings.log_level)
    log.info("outbox dispatcher: started")

    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        while True:
            try:
                n = await _tick(Session)
                if n:
                    log.info("tick: enqueued %d outbox event(s)", n)
            except Exception:
                log.exception("outbox dispatcher: tick crashed")
            await asyncio.sleep(POLL_SECONDS)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
