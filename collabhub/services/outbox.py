from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.models.outbox import OutboxEvent


def emit_event(
    db: AsyncSession,
    *,
    aggregate_type: str,
    aggregate_id: str,
    event_type: str,
    payload: dict[str, Any],
) -> OutboxEvent:
    """
    Stage an outbox row on the caller's session.
    It commits (or rolls back) together with the state change it describes.
    """
    ev = OutboxEvent(
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        event_type=event_type,
        payload=payload,
        status="pending",
    )
    db.add(ev)
    return ev
