from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.models.profiles import BrandProfile, InfluencerProfile


async def get_influencer_profile(db: AsyncSession, user_id: str) -> InfluencerProfile | None:
    stmt = select(InfluencerProfile).where(InfluencerProfile.user_id == user_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_brand_profile(db: AsyncSession, user_id: str) -> BrandProfile | None:
    stmt = select(BrandProfile).where(BrandProfile.user_id == user_id)
    return (await db.execute(stmt)).scalar_one_or_none()
