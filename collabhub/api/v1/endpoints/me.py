from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.schemas.me import MeOut
from collabhub.services.auth import Actor, get_actor
from collabhub.services.profiles import get_brand_profile, get_influencer_profile

router = APIRouter()

@router.get("/me", response_model=MeOut)
async def me(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> MeOut:
    influencer = await get_influencer_profile(db, actor.user_id)
    brand = await get_brand_profile(db, actor.user_id)
    return MeOut(
        api_key_id=actor.api_key_id,
        user_id=actor.user_id,
        role=actor.role,
        influencer_profile_id=influencer.id if influencer else None,
        brand_profile_id=brand.id if brand else None,
    )
