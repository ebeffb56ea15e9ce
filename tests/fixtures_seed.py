from datetime import timedelta

import pytest
from sqlalchemy import select

from collabhub.core.security import generate_api_key
from collabhub.core.timeutil import utcnow
from collabhub.models.api_key import ApiKey
from collabhub.models.bid import ListingBid
from collabhub.models.listing import InfluencerListing
from collabhub.models.profiles import BrandProfile, InfluencerProfile
from collabhub.models.user import User
from collabhub.services.auth import Actor


async def make_user(db, *, role: str, handle: str) -> dict:
    user = User(email=f"{handle}@test.com", name=handle.title(), role=role, onboarded=True)
    db.add(user)
    await db.flush()

    if role == "influencer":
        profile = InfluencerProfile(user_id=user.id, handle=handle, bio="Test creator")
    else:
        profile = BrandProfile(user_id=user.id, handle=handle, company_name=f"{handle.title()} Inc")
    db.add(profile)

    key = generate_api_key()
    key_row = ApiKey(user_id=user.id, key_prefix=key.prefix, key_hash=key.hashed, is_active=True)
    db.add(key_row)
    await db.commit()

    return {
        "user_id": user.id,
        "profile_id": profile.id,
        "api_key": key.plain,
        "headers": {"X-API-Key": key.plain},
        "actor": Actor(api_key_id=key_row.id, user_id=user.id, role=role),
    }


async def make_listing(db, owner: dict, *, pricing_type: str = "AUCTION", **overrides) -> str:
    fields = {
        "title": "Sponsored YouTube video",
        "description": "A dedicated 10 minute review video on my main channel.",
        "pricing_type": pricing_type,
        "status": "OPEN",
    }
    if pricing_type == "AUCTION":
        fields.update(starting_bid=50.0, reserve_price=80.0, auction_ends_at=utcnow() + timedelta(days=7))
    else:
        fields.update(fixed_price=500.0)
    fields.update(overrides)

    listing = InfluencerListing(influencer_profile_id=owner["profile_id"], niches=[], **fields)
    db.add(listing)
    await db.commit()
    await db.refresh(listing)
    return listing.id


async def add_bid(db, listing_id: str, bidder: dict, amount: float, status: str = "PENDING") -> str:
    bid = ListingBid(listing_id=listing_id, brand_profile_id=bidder["profile_id"], amount=amount, status=status)
    db.add(bid)
    await db.commit()
    await db.refresh(bid)
    return bid.id


async def bid_status(db, bid_id: str) -> str:
    return (await db.execute(select(ListingBid.status).where(ListingBid.id == bid_id))).scalar_one()


async def listing_status(db, listing_id: str) -> str:
    stmt = select(InfluencerListing.status).where(InfluencerListing.id == listing_id)
    return (await db.execute(stmt)).scalar_one()


@pytest.fixture
async def influencer(db_session):
    return await make_user(db_session, role="influencer", handle="creator")


@pytest.fixture
async def other_influencer(db_session):
    return await make_user(db_session, role="influencer", handle="rival")


@pytest.fixture
async def brand(db_session):
    return await make_user(db_session, role="brand", handle="acme")


@pytest.fixture
async def other_brand(db_session):
    return await make_user(db_session, role="brand", handle="globex")


@pytest.fixture
async def auction_listing(db_session, influencer):
    return await make_listing(db_session, influencer, pricing_type="AUCTION")


@pytest.fixture
async def fixed_listing(db_session, influencer):
    return await make_listing(db_session, influencer, pricing_type="FIXED")
