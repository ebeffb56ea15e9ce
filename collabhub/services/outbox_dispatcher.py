from datetime import timedelta
import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.timeutil import utcnow
from collabhub.models.outbox import OutboxEvent
from collabhub.services.notifications import deliver_notifications

log = logging.getLogger(__name__)

PROCESS_TASK = "worker.tasks.process_outbox_event"


async def requeue_expired_leases(db: AsyncSession) -> int:
    result = await db.execute(
        update(OutboxEvent)
        .where(
            OutboxEvent.status == "processing",
            OutboxEvent.lease_expires_at.is_not(None),
            OutboxEvent.lease_expires_at < utcnow(),
        )
        .values(
            status="pending",
            lease_id=None,
            lease_expires_at=None,
            processing_started_at=None,
            last_error="requeued: lease expired",
        )
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


async def claim_outbox_event_ids(db: AsyncSession, batch_size: int = 100, lease_minutes: int = 10) -> tuple[str, list[str]]:
    lease_id = uuid.uuid4().hex
    now = utcnow()

    # Lock and select pending rows
    stmt = (
        select(OutboxEvent.id)
        .where(OutboxEvent.status == "pending")
        .order_by(OutboxEvent.created_at.asc())
        .with_for_update(skip_locked=True)
        .limit(batch_size)
    )
    ids = list((await db.execute(stmt)).scalars().all())
    if not ids:
        return lease_id, []

    await db.execute(
        update(OutboxEvent)
        .where(OutboxEvent.id.in_(ids))
        .values(
            status="processing",
            processing_started_at=now,
            attempts=OutboxEvent.attempts + 1,
            last_error=None,
            lease_id=lease_id,
            lease_expires_at=now + timedelta(minutes=lease_minutes),
        )
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    return lease_id, ids


async def dispatch_outbox(db: AsyncSession, send_task, batch_size: int = 100, lease_minutes: int = 10) -> int:
    """
    Claim a batch of pending events and hand each to `send_task(name, args=..., queue=...)`.
    Events that fail to enqueue go back to pending with the error recorded.
    """
    await requeue_expired_leases(db)

    lease_id, ids = await claim_outbox_event_ids(db, batch_size=batch_size, lease_minutes=lease_minutes)

    # Commit before enqueue so workers can read status/rows
    await db.commit()

    if not ids:
        return 0

    failed: list[tuple[str, str]] = []
    dispatched = 0

    for outbox_id in ids:
        try:
            send_task(PROCESS_TASK, args=[outbox_id, lease_id], queue="outbox")
            dispatched += 1
        except Exception as e:
            log.warning("enqueue failed for outbox event %s: %s", outbox_id, e)
            failed.append((outbox_id, f"{type(e).__name__}: {e}"))

    if failed:
        for outbox_id, msg in failed:
            await db.execute(
                update(OutboxEvent)
                .where(OutboxEvent.id == outbox_id, OutboxEvent.lease_id == lease_id)
                .values(status="pending", lease_id=None, lease_expires_at=None, processing_started_at=None, last_error=f"enqueue failed: {msg}")
                .execution_options(synchronize_session=False)
            )
        await db.commit()

    return dispatched


async def process_outbox_event(db: AsyncSession, outbox_id: str, lease_id: str) -> bool:
    """
    Deliver one claimed event. Returns False when the lease was lost or the
    event is gone; the row is left for whoever holds it now.
    """
    stmt = select(OutboxEvent).where(OutboxEvent.id == outbox_id).execution_options(populate_existing=True)
    ev = (await db.execute(stmt)).scalar_one_or_none()
    if not ev:
        return False

    # Lease ownership check
    if ev.lease_id != lease_id or ev.status != "processing":
        return False

    try:
        created = await deliver_notifications(db, ev)

        result = await db.execute(
            update(OutboxEvent)
            .where(OutboxEvent.id == outbox_id, OutboxEvent.lease_id == lease_id)
            .values(status="done", processed_at=utcnow(), lease_id=None, lease_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # lease lost; do not overwrite
            await db.rollback()
            return False

        await db.commit()
        log.info("outbox event %s (%s) done, %d message(s)", outbox_id, ev.event_type, created)
        return True

    except Exception as e:
        log.exception("outbox event %s failed", outbox_id)
        await db.rollback()
        # Return to pending if lease matches; store error
        await db.execute(
            update(OutboxEvent)
            .where(OutboxEvent.id == outbox_id, OutboxEvent.lease_id == lease_id)
            .values(
                status="pending",
                lease_id=None,
                lease_expires_at=None,
                processing_started_at=None,
                last_error=f"{type(e).__name__}: {e}",
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return False
