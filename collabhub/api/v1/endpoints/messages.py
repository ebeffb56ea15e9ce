from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.schemas.message import MessageOut
from collabhub.services.auth import Actor, get_actor
from collabhub.services.notifications import list_inbox

router = APIRouter()


@router.get("/messages", response_model=list[MessageOut])
async def inbox(
    limit: int = Query(default=50, ge=1, le=200),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[MessageOut]:
    rows = await list_inbox(db, actor.user_id, limit=limit)
    return [MessageOut.model_validate(m) for m in rows]
