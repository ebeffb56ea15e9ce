import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.core.errors import Conflict
from collabhub.core.security import generate_api_key
from collabhub.models.api_key import ApiKey
from collabhub.models.profiles import BrandProfile, InfluencerProfile
from collabhub.models.user import User
from collabhub.schemas.user import UserBootstrap, UserBootstrapOut
from collabhub.services.internal_admin import require_internal_admin


log = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/users/bootstrap",
    response_model=UserBootstrapOut,
    status_code=201,
    dependencies=[Depends(require_internal_admin)],
)
async def bootstrap_user(payload: UserBootstrap, db: AsyncSession = Depends(get_db)) -> UserBootstrapOut:
    """
    Create an onboarded user, their profile and a first API key.
    Internal-only; sign-up and sessions live in front of this API.
    """
    user = User(email=payload.email, name=payload.name, role=payload.role, onboarded=True)

    try:
        db.add(user)
        await db.flush()  # user id needed by profile + key

        if payload.role == "influencer":
            profile = InfluencerProfile(
                user_id=user.id,
                handle=payload.influencer_profile.handle,
                bio=payload.influencer_profile.bio,
            )
        else:
            profile = BrandProfile(
                user_id=user.id,
                handle=payload.brand_profile.handle,
                company_name=payload.brand_profile.company_name,
                website=payload.brand_profile.website,
                industry=payload.brand_profile.industry,
            )
        db.add(profile)

        key = generate_api_key()
        db.add(ApiKey(user_id=user.id, key_prefix=key.prefix, key_hash=key.hashed, is_active=True))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("user bootstrap failed: integrity error")
        raise Conflict("Email or handle already taken")

    return UserBootstrapOut(user_id=user.id, role=payload.role, profile_id=profile.id, api_key=key.plain)
