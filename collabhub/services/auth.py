from dataclasses import dataclass
from fastapi import Depends, Security
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.core.errors import Unauthenticated
from collabhub.core.security import hash_api_key
from collabhub.models.api_key import ApiKey
from collabhub.models.user import User

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@dataclass(frozen=True)
class Actor:
    api_key_id: str
    user_id: str
    role: str | None  # "influencer" | "brand" | None before onboarding


async def _actor_from_key(db: AsyncSession, api_key: str) -> Actor | None:
    hashed = hash_api_key(api_key)
    stmt = (
        select(ApiKey.id, User.id, User.role)
        .join(User, User.id == ApiKey.user_id)
        .where(ApiKey.key_hash == hashed, ApiKey.is_active.is_(True))
    )
    row = (await db.execute(stmt)).one_or_none()
    if not row:
        return None
    key_id, user_id, role = row
    return Actor(api_key_id=key_id, user_id=user_id, role=role)


async def get_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    if not api_key:
        raise Unauthenticated("Missing X-API-Key")

    actor = await _actor_from_key(db, api_key)
    if actor is None:
        raise Unauthenticated("Invalid API key")
    return actor


async def get_optional_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor | None:
    # Public endpoints still personalise results for a known caller.
    if not api_key:
        return None
    return await _actor_from_key(db, api_key)

